"""Abstract publisher interface and shared request types."""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from marginalia.models import LOCAL_FIELD_PREFIX, Annotation, SavedAnnotation


class ReplyRequest(BaseModel):
    """A reply to publish, together with the annotation it replies to."""

    parent_annotation: Annotation
    annotation: Annotation


class Publisher(ABC):
    """Persists annotations to a publishing service.

    Each operation returns the persisted annotation, or raises if the service
    rejected it or could not be reached.
    """

    @abstractmethod
    async def publish_annotation(self, annotation: Annotation) -> SavedAnnotation:
        """Publish a top-level annotation anchored in the document."""
        ...

    @abstractmethod
    async def publish_page_note(self, annotation: Annotation) -> SavedAnnotation:
        """Publish a top-level note on the whole page."""
        ...

    @abstractmethod
    async def publish_annotation_reply(self, request: ReplyRequest) -> SavedAnnotation:
        """Publish a reply in a thread rooted at an anchored annotation."""
        ...

    @abstractmethod
    async def publish_page_note_reply(self, request: ReplyRequest) -> SavedAnnotation:
        """Publish a reply in a thread rooted at a page note."""
        ...


def wire_payload(annotation: Annotation) -> dict[str, Any]:
    """Serialize `annotation` for a publishing service, without local fields."""
    return {
        key: value
        for key, value in annotation.model_dump(mode="json", by_alias=True, exclude_none=True).items()
        if not key.startswith(LOCAL_FIELD_PREFIX)
    }


class PublishError(Exception):
    """The publishing service rejected an annotation or could not be reached."""
