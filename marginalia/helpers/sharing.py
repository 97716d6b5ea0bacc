"""Sharing links for annotations and pages."""

import re
from urllib.parse import quote

from marginalia.models import Annotation

BOUNCER_URL = "https://hyp.is/go"

_SHAREABLE_URI = re.compile(r"^https?:", re.IGNORECASE)


def is_shareable_uri(uri: str) -> bool:
    """Annotations are only meaningfully shareable on web-accessible documents."""
    return bool(_SHAREABLE_URI.match(uri))


def annotation_sharing_link(annotation: Annotation) -> str | None:
    """Link for sharing a single annotation.

    Prefers the in-context link on shareable documents and falls back to the
    standalone HTML view. Non-shareable documents only get the HTML view.
    """
    if is_shareable_uri(annotation.uri):
        return annotation.links.get("incontext") or annotation.links.get("html")
    return annotation.links.get("html")


def page_sharing_link(document_uri: str, group_id: str) -> str | None:
    """Link for sharing the annotations of `group_id` on `document_uri`."""
    if not is_shareable_uri(document_uri):
        return None
    encoded_uri = quote(document_uri, safe="!*'()")
    return f"{BOUNCER_URL}?url={encoded_uri}&group={group_id}"
