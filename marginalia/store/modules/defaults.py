"""Store module for user defaults, e.g. the privacy level of new annotations."""

from typing import Any, TypedDict

from marginalia.store.create_store import Action, create_store_module, make_action

# Keys that are persisted between sessions.
DEFAULT_KEYS = ("annotationPrivacy", "focusedGroup")


class DefaultsState(TypedDict):
    defaults: dict[str, Any]


def initial_state() -> DefaultsState:
    return {"defaults": {"annotationPrivacy": "shared", "focusedGroup": None}}


def _set_default(state: DefaultsState, action: Action) -> dict[str, Any]:
    return {"defaults": {**state["defaults"], action.payload["key"]: action.payload["value"]}}


reducers = {
    "SET_DEFAULT": _set_default,
}


def set_default(key: str, value: Any) -> Action:
    return make_action(reducers, "SET_DEFAULT", {"key": key, "value": value})


def get_default(state: DefaultsState, key: str) -> Any:
    return state["defaults"].get(key)


def get_defaults(state: DefaultsState) -> dict[str, Any]:
    return dict(state["defaults"])


defaults_module = create_store_module(
    initial_state,
    namespace="defaults",
    reducers=reducers,
    action_creators={
        "set_default": set_default,
    },
    selectors={
        "get_default": get_default,
        "get_defaults": get_defaults,
    },
)
