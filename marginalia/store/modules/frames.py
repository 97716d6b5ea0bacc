"""Store module for the content frames connected to the sidebar."""

from typing import Any, TypedDict

from marginalia.models import Frame
from marginalia.store.create_store import Action, create_store_module, make_action


class FramesState(TypedDict):
    frames: tuple[Frame, ...]


initial_state: FramesState = {"frames": ()}


def _connect_frame(state: FramesState, action: Action) -> dict[str, Any]:
    frame: Frame = action.payload["frame"]
    others = tuple(f for f in state["frames"] if f.id != frame.id)
    return {"frames": (*others, frame)}


def _destroy_frame(state: FramesState, action: Action) -> dict[str, Any]:
    frame: Frame = action.payload["frame"]
    return {"frames": tuple(f for f in state["frames"] if f.id != frame.id)}


reducers = {
    "CONNECT_FRAME": _connect_frame,
    "DESTROY_FRAME": _destroy_frame,
}


def connect_frame(frame: Frame) -> Action:
    """Add a frame, replacing any connected frame with the same id."""
    return make_action(reducers, "CONNECT_FRAME", {"frame": frame})


def destroy_frame(frame: Frame) -> Action:
    return make_action(reducers, "DESTROY_FRAME", {"frame": frame})


def frames(state: FramesState) -> list[Frame]:
    return list(state["frames"])


def main_frame(state: FramesState) -> Frame | None:
    """Return the top-level content frame, if connected."""
    return next((f for f in state["frames"] if f.id is None), None)


frames_module = create_store_module(
    initial_state,
    namespace="frames",
    reducers=reducers,
    action_creators={
        "connect_frame": connect_frame,
        "destroy_frame": destroy_frame,
    },
    selectors={
        "frames": frames,
        "main_frame": main_frame,
    },
)
