"""Store module for drafts: unsaved edits to annotations.

A draft is keyed by the identity (id or `$tag`) of the annotation it belongs
to. There is at most one draft per annotation.
"""

from collections.abc import Callable
from typing import Any, TypedDict

from marginalia.models import Annotation, Draft, DraftAnnotationRef, DraftChanges
from marginalia.store.create_store import Action, State, create_store_module, make_action
from marginalia.store.modules.annotations import REMOVE_NEW_AND_EMPTY_DRAFTS


class DraftsState(TypedDict):
    drafts: tuple[Draft, ...]


initial_state: DraftsState = {"drafts": ()}


def _create_draft(state: DraftsState, action: Action) -> dict[str, Any]:
    draft: Draft = action.payload["draft"]
    drafts = tuple(
        d for d in state["drafts"]
        if not _refs_match(d.annotation, draft.annotation)
    )
    return {"drafts": (*drafts, draft)}


def _remove_draft(state: DraftsState, action: Action) -> dict[str, Any]:
    annotation: Annotation = action.payload["annotation"]
    return {"drafts": tuple(d for d in state["drafts"] if not d.annotation.matches(annotation))}


def _remove_drafts(state: DraftsState, action: Action) -> dict[str, Any]:
    removed: list[Draft] = action.payload["drafts"]
    return {
        "drafts": tuple(
            d for d in state["drafts"]
            if not any(_refs_match(d.annotation, r.annotation) for r in removed)
        )
    }


def _refs_match(a: DraftAnnotationRef, b: DraftAnnotationRef) -> bool:
    if a.id is not None and a.id == b.id:
        return True
    return a.tag is not None and a.tag == b.tag


reducers = {
    "CREATE_DRAFT": _create_draft,
    "REMOVE_DRAFT": _remove_draft,
    REMOVE_NEW_AND_EMPTY_DRAFTS: _remove_drafts,
}


def create_draft(annotation: Annotation, changes: DraftChanges) -> Action:
    """Create or replace the draft for `annotation`."""
    draft = Draft(
        annotation=DraftAnnotationRef(id=annotation.id, tag=annotation.tag),
        **changes.model_dump(),
    )
    return make_action(reducers, "CREATE_DRAFT", {"draft": draft})


def remove_draft(annotation: Annotation) -> Action:
    return make_action(reducers, "REMOVE_DRAFT", {"annotation": annotation})


def delete_new_and_empty_drafts() -> Callable[[Callable[..., Any], Callable[[], State]], None]:
    """Remove empty drafts of never-saved annotations, and those annotations.

    Both removals happen in one action, so subscribers never see a draft gone
    while its annotation remains.
    """

    def thunk(dispatch: Callable[..., Any], get_state: Callable[[], State]) -> None:
        state = get_state()
        stale_drafts = [
            d for d in state["drafts"]["drafts"]
            if d.annotation.id is None and d.is_empty()
        ]
        if not stale_drafts:
            return
        stale_annotations = [
            a for a in state["annotations"]["annotations"]
            if any(d.annotation.matches(a) for d in stale_drafts)
        ]
        dispatch(make_action(
            reducers,
            REMOVE_NEW_AND_EMPTY_DRAFTS,
            {"drafts": stale_drafts, "annotations": stale_annotations},
        ))

    return thunk


def get_draft(state: DraftsState, annotation: Annotation) -> Draft | None:
    return next((d for d in state["drafts"] if d.annotation.matches(annotation)), None)


def count_drafts(state: DraftsState) -> int:
    return len(state["drafts"])


drafts_module = create_store_module(
    initial_state,
    namespace="drafts",
    reducers=reducers,
    action_creators={
        "create_draft": create_draft,
        "remove_draft": remove_draft,
        "delete_new_and_empty_drafts": delete_new_and_empty_drafts,
    },
    selectors={
        "get_draft": get_draft,
        "count_drafts": count_drafts,
    },
)
