"""Canonical data structures for Marginalia.

Defined once here, referenced everywhere else. Fields whose wire name starts
with ``$`` are local bookkeeping: they are never sent to or expected from the
publishing service, and they survive the swap from an unsaved annotation to
its saved form.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

LOCAL_FIELD_PREFIX = "$"

# ---------------------------------------------------------------------------
# Annotation building blocks
# ---------------------------------------------------------------------------


class Permissions(BaseModel):
    read: list[str] = Field(default_factory=list)
    update: list[str] = Field(default_factory=list)
    delete: list[str] = Field(default_factory=list)


class Target(BaseModel):
    model_config = ConfigDict(extra="allow")

    source: str
    selector: list[dict[str, Any]] | None = None


class UserInfo(BaseModel):
    display_name: str | None = None


class DocumentMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str = ""


# ---------------------------------------------------------------------------
# Annotations
# ---------------------------------------------------------------------------


class Annotation(BaseModel):
    """An annotation in unsaved or saved form.

    Unknown keys are kept, so extra ``$``-prefixed local fields set by callers
    round-trip through the store unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    # Local-only fields
    tag: str | None = Field(default=None, alias="$tag")
    highlight: bool | None = Field(default=None, alias="$highlight")
    orphan: bool | None = Field(default=None, alias="$orphan")

    # Present only once persisted
    id: str | None = None
    nostr_event: dict[str, Any] | None = None

    uri: str
    target: list[Target]
    group: str | None = None
    permissions: Permissions = Field(default_factory=Permissions)
    tags: list[str] = Field(default_factory=list)
    text: str = ""
    references: list[str] | None = None

    user: str | None = None
    user_info: UserInfo | None = None
    created: str | None = None
    updated: str | None = None
    hidden: bool = False
    flagged: bool = False
    links: dict[str, str] = Field(default_factory=dict)
    document: DocumentMetadata = Field(default_factory=DocumentMetadata)

    def local_fields(self) -> dict[str, Any]:
        """Return the ``$``-prefixed fields that were explicitly set.

        Explicit ``None`` values are included; unset defaults are not.
        """
        fields = type(self).model_fields
        set_keys = {
            (fields[name].alias or name) if name in fields else name
            for name in self.model_fields_set
        }
        set_keys.update(self.model_extra or {})
        dumped = self.model_dump(by_alias=True)
        return {
            key: value
            for key, value in dumped.items()
            if key.startswith(LOCAL_FIELD_PREFIX) and key in set_keys
        }


class SavedAnnotation(Annotation):
    """An annotation that has been persisted by the publishing service."""

    id: str
    nostr_event: dict[str, Any]


# ---------------------------------------------------------------------------
# Drafts
# ---------------------------------------------------------------------------


class DraftAnnotationRef(BaseModel):
    """Identity of the annotation a draft belongs to."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    tag: str | None = Field(default=None, alias="$tag")

    def matches(self, annotation: Annotation) -> bool:
        if self.id is not None and self.id == annotation.id:
            return True
        return self.tag is not None and self.tag == annotation.tag


class DraftChanges(BaseModel):
    """Pending edits to an annotation's user-editable fields."""

    is_private: bool = False
    tags: list[str] = Field(default_factory=list)
    text: str = ""


class Draft(DraftChanges):
    annotation: DraftAnnotationRef

    def is_empty(self) -> bool:
        return not self.text and not self.tags


# ---------------------------------------------------------------------------
# Sidebar context
# ---------------------------------------------------------------------------


class Profile(BaseModel):
    """The authenticated identity the sidebar acts as."""

    public_key_hex: str
    display_name: str | None = None


class Group(BaseModel):
    id: str
    name: str


class Frame(BaseModel):
    """A connected content frame. The main frame has no id."""

    id: str | None = None
    uri: str


TabName = Literal["annotation", "note", "orphan"]
