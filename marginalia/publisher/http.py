"""Publisher that posts annotations to a remote publishing service over HTTP.

Every publish is retried with exponential backoff, and each attempt is
tracked in the store's activity module as an API request.
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from marginalia.helpers.retry import retry_with_backoff
from marginalia.models import Annotation, SavedAnnotation
from marginalia.publisher.base import Publisher, PublishError, ReplyRequest, wire_payload
from marginalia.store import SidebarStore

logger = logging.getLogger(__name__)

SERVICE_NAME = "publisher"
DEFAULT_TIMEOUT = 30.0


class HttpPublisher(Publisher):
    def __init__(
        self,
        client: httpx.AsyncClient,
        store: SidebarStore,
        *,
        max_retries: int = 5,
        initial_delay: float = 0.2,
    ) -> None:
        self._client = client
        self._store = store
        self._max_retries = max_retries
        self._initial_delay = initial_delay

    @classmethod
    def from_url(cls, base_url: str, store: SidebarStore, **kwargs: Any) -> "HttpPublisher":
        client = httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=DEFAULT_TIMEOUT)
        return cls(client, store, **kwargs)

    async def publish_annotation(self, annotation: Annotation) -> SavedAnnotation:
        return await self._post("/annotations", wire_payload(annotation))

    async def publish_page_note(self, annotation: Annotation) -> SavedAnnotation:
        return await self._post("/page-notes", wire_payload(annotation))

    async def publish_annotation_reply(self, request: ReplyRequest) -> SavedAnnotation:
        return await self._post(
            f"/annotations/{request.parent_annotation.id}/replies",
            self._reply_body(request),
        )

    async def publish_page_note_reply(self, request: ReplyRequest) -> SavedAnnotation:
        return await self._post(
            f"/page-notes/{request.parent_annotation.id}/replies",
            self._reply_body(request),
        )

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _reply_body(request: ReplyRequest) -> dict[str, Any]:
        return {
            "parent": wire_payload(request.parent_annotation),
            "annotation": wire_payload(request.annotation),
        }

    async def _post(self, path: str, body: dict[str, Any]) -> SavedAnnotation:
        async def attempt(attempt_index: int, max_attempts: int) -> SavedAnnotation:
            self._store.api_request_started(SERVICE_NAME)
            try:
                response = await self._client.post(path, json=body)
                response.raise_for_status()
                return SavedAnnotation.model_validate(response.json())
            except httpx.HTTPStatusError as e:
                raise PublishError(
                    f"Publish to {path} rejected: {e.response.status_code} {e.response.text}"
                ) from e
            except httpx.HTTPError as e:
                raise PublishError(f"Publish to {path} failed: {e}") from e
            except (ValueError, ValidationError) as e:
                raise PublishError(f"Publish to {path} returned an invalid annotation: {e}") from e
            finally:
                self._store.api_request_finished(SERVICE_NAME)

        saved = await retry_with_backoff(attempt, self._max_retries, self._initial_delay)
        logger.debug("Published %s via %s", saved.id, path)
        return saved
