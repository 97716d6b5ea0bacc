"""Store module tracking which sidebar panel, if any, is open."""

from typing import Any, TypedDict

from marginalia.store.create_store import Action, create_store_module, make_action


class SidebarPanelsState(TypedDict):
    active_panel_name: str | None


initial_state: SidebarPanelsState = {"active_panel_name": None}


def _open_sidebar_panel(state: SidebarPanelsState, action: Action) -> dict[str, Any]:
    return {"active_panel_name": action.payload["name"]}


def _close_sidebar_panel(
    state: SidebarPanelsState, action: Action
) -> SidebarPanelsState | dict[str, Any]:
    if state["active_panel_name"] != action.payload["name"]:
        return state
    return {"active_panel_name": None}


reducers = {
    "OPEN_SIDEBAR_PANEL": _open_sidebar_panel,
    "CLOSE_SIDEBAR_PANEL": _close_sidebar_panel,
}


def open_sidebar_panel(name: str) -> Action:
    return make_action(reducers, "OPEN_SIDEBAR_PANEL", {"name": name})


def close_sidebar_panel(name: str) -> Action:
    return make_action(reducers, "CLOSE_SIDEBAR_PANEL", {"name": name})


def active_panel_name(state: SidebarPanelsState) -> str | None:
    return state["active_panel_name"]


def is_sidebar_panel_open(state: SidebarPanelsState, name: str) -> bool:
    return state["active_panel_name"] == name


sidebar_panels_module = create_store_module(
    initial_state,
    namespace="sidebar_panels",
    reducers=reducers,
    action_creators={
        "open_sidebar_panel": open_sidebar_panel,
        "close_sidebar_panel": close_sidebar_panel,
    },
    selectors={
        "active_panel_name": active_panel_name,
        "is_sidebar_panel_open": is_sidebar_panel_open,
    },
)
