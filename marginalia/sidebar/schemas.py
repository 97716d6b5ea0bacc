"""Request and response schemas for sidebar context endpoints."""

from typing import Any

from pydantic import BaseModel

from marginalia.models import Frame, Group, Profile


class SessionResponse(BaseModel):
    logged_in: bool
    profile: Profile | None = None


class FramesResponse(BaseModel):
    frames: list[Frame]
    main_frame: Frame | None = None


class GroupsResponse(BaseModel):
    groups: list[Group]
    focused_group_id: str | None = None


class DefaultValue(BaseModel):
    """Request and response body for /api/defaults/{key}."""

    value: Any = None
