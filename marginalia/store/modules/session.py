"""Store module for the identity of the logged-in user."""

from typing import Any, TypedDict

from marginalia.models import Profile
from marginalia.store.create_store import Action, create_store_module, make_action


class SessionState(TypedDict):
    profile: Profile | None


initial_state: SessionState = {"profile": None}


def _set_profile(state: SessionState, action: Action) -> dict[str, Any]:
    return {"profile": action.payload["profile"]}


def _logout(state: SessionState, action: Action) -> dict[str, Any]:
    return {"profile": None}


reducers = {
    "SET_PROFILE": _set_profile,
    "LOGOUT": _logout,
}


def set_profile(profile: Profile) -> Action:
    return make_action(reducers, "SET_PROFILE", {"profile": profile})


def logout() -> Action:
    return make_action(reducers, "LOGOUT")


def get_profile(state: SessionState) -> Profile | None:
    return state["profile"]


def is_logged_in(state: SessionState) -> bool:
    return state["profile"] is not None


session_module = create_store_module(
    initial_state,
    namespace="session",
    reducers=reducers,
    action_creators={
        "set_profile": set_profile,
        "logout": logout,
    },
    selectors={
        "get_profile": get_profile,
        "is_logged_in": is_logged_in,
    },
)
