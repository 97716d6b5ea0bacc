"""Request and response schemas for annotation endpoints."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from marginalia.models import DocumentMetadata, Target

# -- Requests --


class CreateAnnotationRequest(BaseModel):
    uri: str
    target: list[Target]
    text: str = ""
    tags: list[str] = Field(default_factory=list)
    highlight: bool = False
    document: DocumentMetadata | None = None


class UpdateDraftRequest(BaseModel):
    """Request body for PUT /api/annotations/{tag}/draft."""

    text: str = ""
    tags: list[str] = Field(default_factory=list)
    is_private: bool = False


class CreateReplyRequest(BaseModel):
    """Request body for POST /api/annotations/{annotation_id}/replies.

    Defaults to replying as the logged-in user.
    """

    user_id: str | None = None


class ImportRequest(BaseModel):
    annotations: list[dict[str, Any]]


# -- Responses --


class DraftResponse(BaseModel):
    text: str
    tags: list[str]
    is_private: bool


class AnnotationResponse(BaseModel):
    tag: str | None
    id: str | None
    uri: str
    group: str | None
    text: str
    tags: list[str]
    references: list[str]
    user: str | None
    created: str | None
    updated: str | None
    is_public: bool
    is_highlight: bool
    is_page_note: bool
    is_saved: bool
    is_saving: bool
    flagged: bool
    sharing_link: str | None = None
    draft: DraftResponse | None = None


class PageNoteResponse(BaseModel):
    annotation: AnnotationResponse | None = None
    login_required: bool = False


class ActivityResponse(BaseModel):
    is_loading: bool
    is_fetching_annotations: bool
    has_fetched_annotations: bool
    annotation_result_count: int | None
    imports_pending: int
    imports_total: int


class ImportResultResponse(BaseModel):
    type: Literal["import", "skipped", "error"]
    annotation: AnnotationResponse | None = None
    error: str | None = None


class ImportResponse(BaseModel):
    imported: int
    skipped: int
    errors: int
    results: list[ImportResultResponse]
