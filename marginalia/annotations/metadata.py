"""Predicates describing what kind of annotation an object is."""

from marginalia.models import Annotation


def is_new(annotation: Annotation) -> bool:
    """Has this annotation never been persisted?"""
    return not annotation.id


def is_saved(annotation: Annotation) -> bool:
    """A saved annotation carries both a persisted id and its publish event."""
    return bool(annotation.id) and bool(annotation.nostr_event)


def is_reply(annotation: Annotation) -> bool:
    return bool(annotation.references)


def has_selector(annotation: Annotation) -> bool:
    return bool(annotation.target) and bool(annotation.target[0].selector)


def is_orphan(annotation: Annotation) -> bool:
    """An annotation whose selectors could not be anchored in the document."""
    return has_selector(annotation) and bool(annotation.orphan)


def is_page_note(annotation: Annotation) -> bool:
    return not has_selector(annotation) and not is_reply(annotation)


def is_annotation(annotation: Annotation) -> bool:
    return has_selector(annotation) and not is_orphan(annotation)


def is_highlight(annotation: Annotation) -> bool:
    """Is this annotation a highlight, i.e. an anchored annotation with no body?

    New annotations are only known to be highlights through the local
    `$highlight` marker. Saved ones are highlights when they are top-level,
    anchored, and have neither text nor tags.
    """
    if annotation.highlight:
        return True
    if is_new(annotation):
        return False
    return (
        not is_page_note(annotation)
        and not annotation.references
        and not annotation.text
        and not annotation.tags
    )


def is_public(annotation: Annotation) -> bool:
    """Is this annotation shared with a group rather than private?"""
    return any(
        len(parts) == 2 and parts[0] == "group"
        for parts in (principal.split(":") for principal in annotation.permissions.read)
    )
