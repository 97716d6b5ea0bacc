"""Publisher that persists annotations only in the local process.

Used when no publishing service is configured: every publish succeeds and
mints a fresh id and event record.
"""

from datetime import UTC, datetime
from uuid import uuid4

from marginalia.models import Annotation, SavedAnnotation
from marginalia.publisher.base import Publisher, ReplyRequest, wire_payload


class LocalPublisher(Publisher):
    def __init__(self) -> None:
        self.published: list[SavedAnnotation] = []

    async def publish_annotation(self, annotation: Annotation) -> SavedAnnotation:
        return self._publish(annotation, "annotation")

    async def publish_page_note(self, annotation: Annotation) -> SavedAnnotation:
        return self._publish(annotation, "page_note")

    async def publish_annotation_reply(self, request: ReplyRequest) -> SavedAnnotation:
        return self._publish(request.annotation, "annotation_reply", request.parent_annotation)

    async def publish_page_note_reply(self, request: ReplyRequest) -> SavedAnnotation:
        return self._publish(request.annotation, "page_note_reply", request.parent_annotation)

    def _publish(
        self, annotation: Annotation, kind: str, parent: Annotation | None = None
    ) -> SavedAnnotation:
        event_id = uuid4().hex
        now = datetime.now(UTC).isoformat()
        saved = SavedAnnotation.model_validate({
            **wire_payload(annotation),
            "id": event_id,
            "updated": now,
            "nostr_event": {
                "id": event_id,
                "kind": kind,
                "created_at": now,
                "pubkey": annotation.user,
                "parent_id": parent.id if parent else None,
                "content": annotation.text,
            },
        })
        self.published.append(saved)
        return saved
