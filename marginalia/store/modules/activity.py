"""Store module which tracks activity happening in the application that may
need to be reflected in the UI: in-flight API requests, annotation fetches and
saves, and bulk-import progress.

Finishing an API request or annotation fetch when none is active is a
programming error and raises. Completing an import when none is pending is
ignored, and the pending count clamps at zero.
"""

import logging
from typing import Any, TypedDict

from marginalia.models import Annotation
from marginalia.store.create_store import Action, create_store_module, make_action

logger = logging.getLogger(__name__)


class ActivityState(TypedDict):
    active_annotation_save_requests: tuple[str, ...]
    """`$tag`s of annotations with an in-flight save."""
    active_api_requests: int
    active_annotation_fetches: int
    has_fetched_annotations: bool
    annotation_result_count: int | None
    """Total results reported for the most recent load/search request."""
    imports_pending: int
    imports_total: int


initial_state: ActivityState = {
    "active_annotation_save_requests": (),
    "active_api_requests": 0,
    "active_annotation_fetches": 0,
    "has_fetched_annotations": False,
    "annotation_result_count": None,
    "imports_pending": 0,
    "imports_total": 0,
}


def _api_request_started(state: ActivityState, action: Action) -> dict[str, Any]:
    logger.debug("API request started: %s", action.payload["service_name"])
    return {"active_api_requests": state["active_api_requests"] + 1}


def _api_request_finished(state: ActivityState, action: Action) -> dict[str, Any]:
    logger.debug("API request finished: %s", action.payload["service_name"])
    if state["active_api_requests"] == 0:
        raise CounterUnderflowError(
            "API_REQUEST_FINISHED action when no requests were active"
        )
    return {"active_api_requests": state["active_api_requests"] - 1}


def _annotation_save_started(state: ActivityState, action: Action) -> dict[str, Any]:
    tag = action.payload["annotation"].tag
    saving = state["active_annotation_save_requests"]
    if tag and tag not in saving:
        saving = (*saving, tag)
    return {"active_annotation_save_requests": saving}


def _annotation_save_finished(state: ActivityState, action: Action) -> dict[str, Any]:
    tag = action.payload["annotation"].tag
    return {
        "active_annotation_save_requests": tuple(
            t for t in state["active_annotation_save_requests"] if t != tag
        )
    }


def _annotation_fetch_started(state: ActivityState, action: Action) -> dict[str, Any]:
    return {"active_annotation_fetches": state["active_annotation_fetches"] + 1}


def _annotation_fetch_finished(state: ActivityState, action: Action) -> dict[str, Any]:
    if state["active_annotation_fetches"] == 0:
        raise CounterUnderflowError(
            "ANNOTATION_FETCH_FINISHED action when no annotation fetches were active"
        )
    return {
        "has_fetched_annotations": True,
        "active_annotation_fetches": state["active_annotation_fetches"] - 1,
    }


def _set_annotation_result_count(state: ActivityState, action: Action) -> dict[str, Any]:
    return {"annotation_result_count": action.payload["result_count"]}


def _begin_import(state: ActivityState, action: Action) -> dict[str, Any]:
    count = action.payload["count"]
    return {
        "imports_pending": state["imports_pending"] + count,
        "imports_total": state["imports_total"] + count,
    }


def _complete_import(state: ActivityState, action: Action) -> ActivityState | dict[str, Any]:
    if not state["imports_pending"]:
        return state
    imports_pending = max(state["imports_pending"] - action.payload["count"], 0)
    imports_total = state["imports_total"] if imports_pending > 0 else 0
    return {"imports_pending": imports_pending, "imports_total": imports_total}


reducers = {
    "API_REQUEST_STARTED": _api_request_started,
    "API_REQUEST_FINISHED": _api_request_finished,
    "ANNOTATION_SAVE_STARTED": _annotation_save_started,
    "ANNOTATION_SAVE_FINISHED": _annotation_save_finished,
    "ANNOTATION_FETCH_STARTED": _annotation_fetch_started,
    "ANNOTATION_FETCH_FINISHED": _annotation_fetch_finished,
    "SET_ANNOTATION_RESULT_COUNT": _set_annotation_result_count,
    "BEGIN_IMPORT": _begin_import,
    "COMPLETE_IMPORT": _complete_import,
}


# -- Action creators --


def annotation_fetch_started() -> Action:
    return make_action(reducers, "ANNOTATION_FETCH_STARTED")


def annotation_fetch_finished() -> Action:
    return make_action(reducers, "ANNOTATION_FETCH_FINISHED")


def annotation_save_started(annotation: Annotation) -> Action:
    return make_action(reducers, "ANNOTATION_SAVE_STARTED", {"annotation": annotation})


def annotation_save_finished(annotation: Annotation) -> Action:
    return make_action(reducers, "ANNOTATION_SAVE_FINISHED", {"annotation": annotation})


def api_request_started(service_name: str) -> Action:
    return make_action(reducers, "API_REQUEST_STARTED", {"service_name": service_name})


def api_request_finished(service_name: str) -> Action:
    return make_action(reducers, "API_REQUEST_FINISHED", {"service_name": service_name})


def set_annotation_result_count(result_count: int) -> Action:
    return make_action(reducers, "SET_ANNOTATION_RESULT_COUNT", {"result_count": result_count})


def begin_import(count: int) -> Action:
    return make_action(reducers, "BEGIN_IMPORT", {"count": count})


def complete_import(count: int) -> Action:
    return make_action(reducers, "COMPLETE_IMPORT", {"count": count})


# -- Selectors --


def annotation_result_count(state: ActivityState) -> int | None:
    return state["annotation_result_count"]


def has_fetched_annotations(state: ActivityState) -> bool:
    return state["has_fetched_annotations"]


def imports_pending(state: ActivityState) -> int:
    return state["imports_pending"]


def imports_total(state: ActivityState) -> int:
    return state["imports_total"]


def is_fetching_annotations(state: ActivityState) -> bool:
    """Return True when annotations are actively being fetched."""
    return state["active_annotation_fetches"] > 0


def is_loading(state: ActivityState) -> bool:
    """Return True while activity that must finish before the UI is ready
    for interaction with annotations is still happening."""
    return state["active_api_requests"] > 0 or not state["has_fetched_annotations"]


def is_saving_annotation(state: ActivityState, annotation: Annotation) -> bool:
    """Return True if `annotation` has an in-flight save request.

    Annotations without a `$tag` are never considered to be saving.
    """
    if not annotation.tag:
        return False
    return annotation.tag in state["active_annotation_save_requests"]


activity_module = create_store_module(
    initial_state,
    namespace="activity",
    reducers=reducers,
    action_creators={
        "annotation_fetch_started": annotation_fetch_started,
        "annotation_fetch_finished": annotation_fetch_finished,
        "annotation_save_started": annotation_save_started,
        "annotation_save_finished": annotation_save_finished,
        "api_request_started": api_request_started,
        "api_request_finished": api_request_finished,
        "begin_import": begin_import,
        "complete_import": complete_import,
        "set_annotation_result_count": set_annotation_result_count,
    },
    selectors={
        "annotation_result_count": annotation_result_count,
        "has_fetched_annotations": has_fetched_annotations,
        "imports_pending": imports_pending,
        "imports_total": imports_total,
        "is_fetching_annotations": is_fetching_annotations,
        "is_loading": is_loading,
        "is_saving_annotation": is_saving_annotation,
    },
)


class CounterUnderflowError(RuntimeError):
    """A *_FINISHED action arrived with no matching active count."""
