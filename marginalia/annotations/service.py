"""Annotations service: creates, drafts, and persists annotations.

Annotations and drafts live in the shared store. The service never keeps its
own copies across an `await`: anything it needs after the publisher returns
is read from the store or identified by `$tag`.
"""

import logging
import secrets
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from marginalia.annotations import metadata
from marginalia.annotations.permissions import (
    default_permissions,
    private_permissions,
    shared_permissions,
)
from marginalia.models import Annotation, DraftChanges, SavedAnnotation
from marginalia.publisher.base import Publisher, ReplyRequest
from marginalia.store import SidebarStore

logger = logging.getLogger(__name__)

LOGIN_PANEL = "loginPrompt"


class AnnotationsService:
    """Coordinates the store and the publisher for the annotation lifecycle."""

    def __init__(self, publisher: Publisher, store: SidebarStore) -> None:
        self._publisher = publisher
        self._store = store

    def annotation_from_data(
        self, data: dict[str, Any], now: datetime | None = None
    ) -> Annotation:
        """Build a new, unsaved annotation from `data`.

        `data` must provide `uri` and `target`; every other field not set in
        it gets a default. Raises ConfigurationError when no group is focused
        or nobody is logged in.
        """
        now = now or datetime.now(UTC)
        default_privacy = self._store.get_default("annotationPrivacy")
        group_id = self._store.focused_group_id()
        profile = self._store.get_profile()

        if not group_id:
            raise ConfigurationError("Cannot create annotation without a group")
        if profile is None:
            raise ConfigurationError("Cannot create annotation when logged out")

        # Local identifier for looking the annotation up in the store before
        # it has an id.
        tag = f"s:{secrets.token_hex(4)}"
        fields: dict[str, Any] = {
            "created": now.isoformat(),
            "group": group_id,
            "permissions": default_permissions(profile.public_key_hex, group_id, default_privacy),
            "tags": [],
            "text": "",
            "updated": now.isoformat(),
            "user": profile.public_key_hex,
            "user_info": {"display_name": profile.display_name},
            "$tag": tag,
            "hidden": False,
            "links": {},
            "document": {"title": ""},
        }
        fields.update(data)
        annotation = Annotation.model_validate(fields)

        # Highlights are always private.
        if metadata.is_highlight(annotation):
            annotation = annotation.model_copy(
                update={"permissions": private_permissions(profile.public_key_hex)}
            )
        return annotation

    def create(self, data: dict[str, Any], now: datetime | None = None) -> Annotation:
        """Build an annotation from `data`, add it to the store, and start a
        draft for it unless it is a highlight."""
        annotation = self.annotation_from_data(data, now)

        self._store.add_annotations([annotation])

        # Remove other new drafts that are in the way, and their annotations.
        self._store.delete_new_and_empty_drafts()

        if not metadata.is_highlight(annotation):
            self._store.create_draft(
                annotation,
                DraftChanges(
                    tags=annotation.tags,
                    text=annotation.text,
                    is_private=not metadata.is_public(annotation),
                ),
            )

        # Replies stay in whichever tab is selected.
        if metadata.is_page_note(annotation):
            self._store.select_tab("note")
        elif metadata.is_annotation(annotation):
            self._store.select_tab("annotation")

        for parent_id in annotation.references or []:
            self._store.set_expanded(parent_id, True)

        return annotation

    def create_page_note(self) -> Annotation | None:
        """Create an empty page note on the main frame's document.

        Opens the login panel instead when nobody is logged in.
        """
        if not self._store.is_logged_in():
            self._store.open_sidebar_panel(LOGIN_PANEL)
            return None

        main_frame = self._store.main_frame()
        if main_frame is None:
            return None

        return self.create({
            "target": [{"source": main_frame.uri}],
            "uri": main_frame.uri,
        })

    def flag(self, annotation: SavedAnnotation) -> None:
        """Flag an annotation for review by a moderator."""
        # TODO: send the flag to the moderation endpoint once the publishing
        # service exposes one.
        self._store.update_flag_status(annotation.id, True)

    def reply(self, annotation: SavedAnnotation, user_id: str) -> Annotation:
        """Create a reply to `annotation` by `user_id` and add it to the store."""
        permissions = (
            shared_permissions(user_id, annotation.group)
            if metadata.is_public(annotation)
            else private_permissions(user_id)
        )
        return self.create({
            "group": annotation.group,
            "permissions": permissions,
            "references": [*(annotation.references or []), annotation.id],
            "target": [{"source": annotation.target[0].source}],
            "uri": annotation.uri,
        })

    async def save(self, annotation: Annotation) -> SavedAnnotation:
        """Publish a new annotation with its draft changes applied.

        On success the draft and the unsaved annotation are removed from the
        store and the saved annotation takes their place. Publisher errors
        propagate unchanged.
        """
        if metadata.is_saved(annotation):
            raise AlreadySavedError("Cannot save saved annotation")

        payload = self._apply_draft_changes(annotation)
        publish = self._choose_publish(annotation, payload)

        with self._save_bracket(annotation):
            saved = await publish()

        # Carry local fields over to the saved version.
        local_fields = annotation.local_fields()
        if local_fields:
            saved = SavedAnnotation.model_validate(
                {**saved.model_dump(by_alias=True), **local_fields}
            )

        self._store.remove_draft(annotation)
        self._store.remove_annotations([annotation])
        self._store.add_annotations([saved])

        logger.info("Saved annotation %s (tag %s)", saved.id, annotation.tag)
        return saved

    def _apply_draft_changes(self, annotation: Annotation) -> Annotation:
        """Return `annotation` with its draft, if any, merged in."""
        draft = self._store.get_draft(annotation)
        if draft is None:
            return annotation

        permissions = (
            private_permissions(annotation.user)
            if draft.is_private
            else shared_permissions(annotation.user, annotation.group)
        )
        return annotation.model_copy(
            update={"tags": list(draft.tags), "text": draft.text, "permissions": permissions}
        )

    def _choose_publish(
        self, annotation: Annotation, payload: Annotation
    ) -> Callable[[], Awaitable[SavedAnnotation]]:
        if not metadata.is_reply(annotation):
            if metadata.is_page_note(annotation):
                return lambda: self._publisher.publish_page_note(payload)
            return lambda: self._publisher.publish_annotation(payload)

        references = annotation.references or []
        parent = self._store.find_annotation_by_id(references[-1])
        if parent is None:
            raise NotFoundError("Parent annotation not found")

        root = self._store.find_annotation_by_id(references[0])
        if root is None:
            raise NotFoundError("Root annotation not found")

        request = ReplyRequest(parent_annotation=parent, annotation=payload)
        if metadata.is_page_note(root):
            return lambda: self._publisher.publish_page_note_reply(request)
        return lambda: self._publisher.publish_annotation_reply(request)

    @contextmanager
    def _save_bracket(self, annotation: Annotation) -> Iterator[None]:
        """Mark `annotation` as saving for the duration of the block."""
        self._store.annotation_save_started(annotation)
        try:
            yield
        finally:
            self._store.annotation_save_finished(annotation)


class ConfigurationError(Exception):
    """No focused group, or no logged-in user."""


class NotFoundError(Exception):
    """An annotation a reply depends on is not in the store."""


class AlreadySavedError(Exception):
    pass
