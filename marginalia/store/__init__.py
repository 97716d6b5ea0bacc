"""The sidebar's state store: all store modules composed into one `Store`."""

from marginalia.settings import SidebarSettings
from marginalia.store.create_store import Action, Store, create_store
from marginalia.store.modules.activity import activity_module
from marginalia.store.modules.annotations import annotations_module
from marginalia.store.modules.defaults import defaults_module
from marginalia.store.modules.drafts import drafts_module
from marginalia.store.modules.frames import frames_module
from marginalia.store.modules.groups import groups_module
from marginalia.store.modules.selection import selection_module
from marginalia.store.modules.session import session_module
from marginalia.store.modules.sidebar_panels import sidebar_panels_module

SidebarStore = Store


def create_sidebar_store(settings: SidebarSettings | None = None) -> SidebarStore:
    """Create the store used by the sidebar, seeded from `settings`."""
    store = create_store([
        activity_module,
        annotations_module,
        defaults_module,
        drafts_module,
        frames_module,
        groups_module,
        selection_module,
        session_module,
        sidebar_panels_module,
    ])
    if settings is not None:
        for key, value in settings.defaults.items():
            store.set_default(key, value)
        store.load_groups(settings.groups)
        if settings.focused_group:
            store.focus_group(settings.focused_group)
    return store


__all__ = ["Action", "SidebarStore", "Store", "create_sidebar_store"]
