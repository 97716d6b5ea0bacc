"""Store module for UI selection state: the selected tab and expanded threads."""

from typing import Any, TypedDict, get_args

from marginalia.models import TabName
from marginalia.store.create_store import Action, create_store_module, make_action

TABS = frozenset(get_args(TabName))


class SelectionState(TypedDict):
    selected_tab: TabName
    expanded: dict[str, bool]
    """Thread expansion, keyed by annotation id."""


initial_state: SelectionState = {"selected_tab": "annotation", "expanded": {}}


def _select_tab(state: SelectionState, action: Action) -> SelectionState | dict[str, Any]:
    tab = action.payload["tab"]
    if tab not in TABS:
        return state
    return {"selected_tab": tab}


def _set_expanded(state: SelectionState, action: Action) -> dict[str, Any]:
    return {"expanded": {**state["expanded"], action.payload["id"]: action.payload["expanded"]}}


reducers = {
    "SELECT_TAB": _select_tab,
    "SET_EXPANDED": _set_expanded,
}


def select_tab(tab: TabName) -> Action:
    return make_action(reducers, "SELECT_TAB", {"tab": tab})


def set_expanded(id: str, expanded: bool) -> Action:
    return make_action(reducers, "SET_EXPANDED", {"id": id, "expanded": expanded})


def selected_tab(state: SelectionState) -> TabName:
    return state["selected_tab"]


def expanded_map(state: SelectionState) -> dict[str, bool]:
    return dict(state["expanded"])


selection_module = create_store_module(
    initial_state,
    namespace="selection",
    reducers=reducers,
    action_creators={
        "select_tab": select_tab,
        "set_expanded": set_expanded,
    },
    selectors={
        "selected_tab": selected_tab,
        "expanded_map": expanded_map,
    },
)
