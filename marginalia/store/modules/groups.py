"""Store module for the groups available to the user and the focused group."""

import logging
from typing import Any, TypedDict

from marginalia.models import Group
from marginalia.store.create_store import Action, create_store_module, make_action

logger = logging.getLogger(__name__)


class GroupsState(TypedDict):
    groups: tuple[Group, ...]
    focused_group_id: str | None


initial_state: GroupsState = {"groups": (), "focused_group_id": None}


def _load_groups(state: GroupsState, action: Action) -> dict[str, Any]:
    groups = tuple(action.payload["groups"])
    focused = state["focused_group_id"]
    # Drop the focus if the focused group is no longer available.
    if focused is not None and not any(g.id == focused for g in groups):
        focused = None
    return {"groups": groups, "focused_group_id": focused}


def _focus_group(state: GroupsState, action: Action) -> GroupsState | dict[str, Any]:
    group_id = action.payload["id"]
    if not any(g.id == group_id for g in state["groups"]):
        logger.warning("Attempted to focus group %r which is not loaded", group_id)
        return state
    return {"focused_group_id": group_id}


reducers = {
    "LOAD_GROUPS": _load_groups,
    "FOCUS_GROUP": _focus_group,
}


def load_groups(groups: list[Group]) -> Action:
    return make_action(reducers, "LOAD_GROUPS", {"groups": list(groups)})


def focus_group(id: str) -> Action:
    return make_action(reducers, "FOCUS_GROUP", {"id": id})


def all_groups(state: GroupsState) -> list[Group]:
    return list(state["groups"])


def focused_group_id(state: GroupsState) -> str | None:
    return state["focused_group_id"]


def focused_group(state: GroupsState) -> Group | None:
    return next((g for g in state["groups"] if g.id == state["focused_group_id"]), None)


groups_module = create_store_module(
    initial_state,
    namespace="groups",
    reducers=reducers,
    action_creators={
        "load_groups": load_groups,
        "focus_group": focus_group,
    },
    selectors={
        "all_groups": all_groups,
        "focused_group_id": focused_group_id,
        "focused_group": focused_group,
    },
)
