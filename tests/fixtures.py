"""Shared test helpers."""

import asyncio
from typing import Any
from uuid import uuid4

from marginalia.annotations.permissions import private_permissions, shared_permissions
from marginalia.models import Annotation, Frame, Group, Profile, SavedAnnotation
from marginalia.publisher.base import Publisher, ReplyRequest, wire_payload
from marginalia.settings import SidebarSettings
from marginalia.store import SidebarStore, create_sidebar_store

USER_ID = "a1b2c3d4"
GROUP_ID = "__world__"
DOC_URI = "https://example.com/article"

SELECTOR = [{"type": "TextQuoteSelector", "exact": "quoted text"}]


def make_settings(**overrides: Any) -> SidebarSettings:
    data: dict[str, Any] = {
        "defaults": {"annotationPrivacy": "shared"},
        "groups": [
            Group(id=GROUP_ID, name="Public"),
            Group(id="study-group", name="Study Group"),
        ],
        "focused_group": GROUP_ID,
    }
    data.update(overrides)
    return SidebarSettings(**data)


def make_logged_in_store(**settings_overrides: Any) -> SidebarStore:
    store = create_sidebar_store(make_settings(**settings_overrides))
    store.set_profile(Profile(public_key_hex=USER_ID, display_name="Alice"))
    store.connect_frame(Frame(uri=DOC_URI))
    return store


def make_annotation(**overrides: Any) -> Annotation:
    """An unsaved annotation anchored in DOC_URI."""
    data: dict[str, Any] = {
        "$tag": f"t:{uuid4().hex[:8]}",
        "uri": DOC_URI,
        "target": [{"source": DOC_URI, "selector": SELECTOR}],
        "group": GROUP_ID,
        "user": USER_ID,
        "permissions": shared_permissions(USER_ID, GROUP_ID),
    }
    data.update(overrides)
    return Annotation.model_validate(data)


def make_saved_annotation(
    id: str | None = None,
    *,
    page_note: bool = False,
    public: bool = True,
    **overrides: Any,
) -> SavedAnnotation:
    annotation_id = id or uuid4().hex
    target: dict[str, Any] = {"source": DOC_URI}
    if not page_note:
        target["selector"] = SELECTOR
    data: dict[str, Any] = {
        "id": annotation_id,
        "nostr_event": {"id": annotation_id},
        "uri": DOC_URI,
        "target": [target],
        "group": GROUP_ID,
        "user": USER_ID,
        "text": "Saved text",
        "permissions": shared_permissions(USER_ID, GROUP_ID)
        if public
        else private_permissions(USER_ID),
    }
    data.update(overrides)
    return SavedAnnotation.model_validate(data)


class RecordingPublisher(Publisher):
    """Publisher that records calls and returns a saved copy of the payload.

    Set `gate` to hold every publish until the event is set, `error` to make
    every publish fail, or `fail_texts` to fail publishes of specific texts.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.gate: asyncio.Event | None = None
        self.error: Exception | None = None
        self.fail_texts: set[str] = set()

    async def publish_annotation(self, annotation: Annotation) -> SavedAnnotation:
        return await self._publish("publish_annotation", annotation, annotation)

    async def publish_page_note(self, annotation: Annotation) -> SavedAnnotation:
        return await self._publish("publish_page_note", annotation, annotation)

    async def publish_annotation_reply(self, request: ReplyRequest) -> SavedAnnotation:
        return await self._publish("publish_annotation_reply", request, request.annotation)

    async def publish_page_note_reply(self, request: ReplyRequest) -> SavedAnnotation:
        return await self._publish("publish_page_note_reply", request, request.annotation)

    @property
    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    async def _publish(self, method: str, arg: Any, annotation: Annotation) -> SavedAnnotation:
        self.calls.append((method, arg))
        saved_id = f"saved-{len(self.calls)}"
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if annotation.text in self.fail_texts:
            raise RuntimeError(f"rejected: {annotation.text}")
        return SavedAnnotation.model_validate({
            **wire_payload(annotation),
            "id": saved_id,
            "nostr_event": {"id": saved_id, "kind": method},
        })
