"""Sidebar settings loaded from YAML.

The packaged `default_settings.yml` is used unless a path is given, e.g. from
the MARGINALIA_SETTINGS environment variable.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from marginalia.models import Group

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "default_settings.yml"


class SidebarSettings(BaseModel):
    defaults: dict[str, Any] = Field(default_factory=dict)
    groups: list[Group] = Field(default_factory=list)
    focused_group: str | None = None


def load_settings(path: str | Path | None = None) -> SidebarSettings:
    """Load settings from `path`, or the packaged defaults."""
    settings_path = Path(path) if path else DEFAULT_SETTINGS_PATH
    with open(settings_path) as f:
        data = yaml.safe_load(f) or {}
    return SidebarSettings.model_validate(data)
