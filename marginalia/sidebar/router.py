"""FastAPI routes for the sidebar's context: session, frames, groups, defaults."""

from fastapi import APIRouter, Depends, HTTPException

from marginalia.annotations.router import get_store
from marginalia.annotations.service import LOGIN_PANEL
from marginalia.defaults.service import PersistedDefaultsService
from marginalia.models import Frame, Profile
from marginalia.sidebar.schemas import (
    DefaultValue,
    FramesResponse,
    GroupsResponse,
    SessionResponse,
)
from marginalia.store import SidebarStore
from marginalia.store.modules.defaults import DEFAULT_KEYS

router = APIRouter(prefix="/api", tags=["sidebar"])


def get_defaults_service() -> PersistedDefaultsService:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("PersistedDefaultsService not initialized")


def _session(store: SidebarStore) -> SessionResponse:
    return SessionResponse(logged_in=store.is_logged_in(), profile=store.get_profile())


@router.get("/session")
async def get_session(store: SidebarStore = Depends(get_store)) -> SessionResponse:
    return _session(store)


@router.put("/session")
async def login(profile: Profile, store: SidebarStore = Depends(get_store)) -> SessionResponse:
    store.set_profile(profile)
    store.close_sidebar_panel(LOGIN_PANEL)
    return _session(store)


@router.delete("/session")
async def logout(store: SidebarStore = Depends(get_store)) -> SessionResponse:
    store.logout()
    return _session(store)


@router.put("/frames")
async def connect_frame(frame: Frame, store: SidebarStore = Depends(get_store)) -> FramesResponse:
    store.connect_frame(frame)
    return FramesResponse(frames=store.frames(), main_frame=store.main_frame())


@router.get("/groups")
async def list_groups(store: SidebarStore = Depends(get_store)) -> GroupsResponse:
    return GroupsResponse(groups=store.all_groups(), focused_group_id=store.focused_group_id())


@router.post("/groups/{group_id}/focus")
async def focus_group(
    group_id: str,
    store: SidebarStore = Depends(get_store),
    defaults: PersistedDefaultsService = Depends(get_defaults_service),
) -> GroupsResponse:
    store.focus_group(group_id)
    if store.focused_group_id() != group_id:
        raise HTTPException(status_code=404, detail=f"Group not found: {group_id}")
    store.set_default("focusedGroup", group_id)
    await defaults.flush()
    return GroupsResponse(groups=store.all_groups(), focused_group_id=group_id)


@router.get("/defaults/{key}")
async def get_default(key: str, store: SidebarStore = Depends(get_store)) -> DefaultValue:
    if key not in DEFAULT_KEYS:
        raise HTTPException(status_code=404, detail=f"Unknown default: {key}")
    return DefaultValue(value=store.get_default(key))


@router.put("/defaults/{key}")
async def set_default(
    key: str,
    body: DefaultValue,
    store: SidebarStore = Depends(get_store),
    defaults: PersistedDefaultsService = Depends(get_defaults_service),
) -> DefaultValue:
    if key not in DEFAULT_KEYS:
        raise HTTPException(status_code=404, detail=f"Unknown default: {key}")
    store.set_default(key, body.value)
    await defaults.flush()
    return DefaultValue(value=store.get_default(key))
