"""Store module holding the annotations currently loaded in the sidebar."""

from typing import Any, TypedDict

from marginalia.models import Annotation
from marginalia.store.create_store import Action, create_store_module, make_action

# Also handled by the drafts module: removes stale drafts and their
# annotations in a single dispatch.
REMOVE_NEW_AND_EMPTY_DRAFTS = "REMOVE_NEW_AND_EMPTY_DRAFTS"


class AnnotationsState(TypedDict):
    annotations: tuple[Annotation, ...]


initial_state: AnnotationsState = {"annotations": ()}


def _same_annotation(a: Annotation, b: Annotation) -> bool:
    """Match on persisted id first, then on local `$tag`."""
    if a.id is not None and a.id == b.id:
        return True
    return a.tag is not None and a.tag == b.tag


def _add_annotations(state: AnnotationsState, action: Action) -> dict[str, Any]:
    updated = list(state["annotations"])
    for annotation in action.payload["annotations"]:
        for i, existing in enumerate(updated):
            if _same_annotation(existing, annotation):
                updated[i] = annotation
                break
        else:
            updated.append(annotation)
    return {"annotations": tuple(updated)}


def _remove_annotations(state: AnnotationsState, action: Action) -> dict[str, Any]:
    removed = action.payload["annotations"]
    return {
        "annotations": tuple(
            a for a in state["annotations"]
            if not any(_same_annotation(a, r) for r in removed)
        )
    }


def _update_flag_status(state: AnnotationsState, action: Action) -> dict[str, Any]:
    annotation_id = action.payload["id"]
    is_flagged = action.payload["is_flagged"]
    return {
        "annotations": tuple(
            a.model_copy(update={"flagged": is_flagged}) if a.id == annotation_id else a
            for a in state["annotations"]
        )
    }


reducers = {
    "ADD_ANNOTATIONS": _add_annotations,
    "REMOVE_ANNOTATIONS": _remove_annotations,
    REMOVE_NEW_AND_EMPTY_DRAFTS: _remove_annotations,
    "UPDATE_FLAG_STATUS": _update_flag_status,
}


def add_annotations(annotations: list[Annotation]) -> Action:
    """Add annotations, replacing any already present with the same id or `$tag`."""
    return make_action(reducers, "ADD_ANNOTATIONS", {"annotations": list(annotations)})


def remove_annotations(annotations: list[Annotation]) -> Action:
    return make_action(reducers, "REMOVE_ANNOTATIONS", {"annotations": list(annotations)})


def update_flag_status(id: str, is_flagged: bool) -> Action:
    return make_action(reducers, "UPDATE_FLAG_STATUS", {"id": id, "is_flagged": is_flagged})


def all_annotations(state: AnnotationsState) -> list[Annotation]:
    return list(state["annotations"])


def find_annotation_by_id(state: AnnotationsState, id: str) -> Annotation | None:
    return next((a for a in state["annotations"] if a.id == id), None)


def find_annotation_by_tag(state: AnnotationsState, tag: str) -> Annotation | None:
    return next((a for a in state["annotations"] if a.tag == tag), None)


annotations_module = create_store_module(
    initial_state,
    namespace="annotations",
    reducers=reducers,
    action_creators={
        "add_annotations": add_annotations,
        "remove_annotations": remove_annotations,
        "update_flag_status": update_flag_status,
    },
    selectors={
        "all_annotations": all_annotations,
        "find_annotation_by_id": find_annotation_by_id,
        "find_annotation_by_tag": find_annotation_by_tag,
    },
)
