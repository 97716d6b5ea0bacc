"""FastAPI routes for the annotation lifecycle and activity status."""

from fastapi import APIRouter, Depends, HTTPException, status

from marginalia.annotations import metadata
from marginalia.annotations.schemas import (
    ActivityResponse,
    AnnotationResponse,
    CreateAnnotationRequest,
    CreateReplyRequest,
    DraftResponse,
    ImportRequest,
    ImportResponse,
    ImportResultResponse,
    PageNoteResponse,
    UpdateDraftRequest,
)
from marginalia.annotations.service import (
    AlreadySavedError,
    AnnotationsService,
    ConfigurationError,
    NotFoundError,
)
from marginalia.helpers.sharing import annotation_sharing_link
from marginalia.importer.service import ImportAnnotationsService
from marginalia.models import Annotation, DraftChanges, SavedAnnotation
from marginalia.publisher.base import PublishError
from marginalia.store import SidebarStore

router = APIRouter(prefix="/api", tags=["annotations"])


def get_store() -> SidebarStore:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("SidebarStore not initialized")


def get_annotations_service() -> AnnotationsService:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("AnnotationsService not initialized")


def get_import_service() -> ImportAnnotationsService:
    """Dependency placeholder, replaced at app startup."""
    raise RuntimeError("ImportAnnotationsService not initialized")


def annotation_response(annotation: Annotation, store: SidebarStore) -> AnnotationResponse:
    draft = store.get_draft(annotation)
    return AnnotationResponse(
        tag=annotation.tag,
        id=annotation.id,
        uri=annotation.uri,
        group=annotation.group,
        text=annotation.text,
        tags=annotation.tags,
        references=annotation.references or [],
        user=annotation.user,
        created=annotation.created,
        updated=annotation.updated,
        is_public=metadata.is_public(annotation),
        is_highlight=metadata.is_highlight(annotation),
        is_page_note=metadata.is_page_note(annotation),
        is_saved=metadata.is_saved(annotation),
        is_saving=store.is_saving_annotation(annotation),
        flagged=annotation.flagged,
        sharing_link=annotation_sharing_link(annotation),
        draft=DraftResponse(text=draft.text, tags=draft.tags, is_private=draft.is_private)
        if draft
        else None,
    )


def _saved_or_404(store: SidebarStore, annotation_id: str) -> SavedAnnotation:
    annotation = store.find_annotation_by_id(annotation_id)
    if annotation is None or not metadata.is_saved(annotation):
        raise HTTPException(status_code=404, detail=f"Annotation not found: {annotation_id}")
    return SavedAnnotation.model_validate(annotation.model_dump(by_alias=True))


@router.get("/annotations")
async def list_annotations(store: SidebarStore = Depends(get_store)) -> list[AnnotationResponse]:
    return [annotation_response(a, store) for a in store.all_annotations()]


@router.post("/annotations", status_code=status.HTTP_201_CREATED)
async def create_annotation(
    request: CreateAnnotationRequest,
    service: AnnotationsService = Depends(get_annotations_service),
    store: SidebarStore = Depends(get_store),
) -> AnnotationResponse:
    data = request.model_dump(exclude={"highlight"}, exclude_none=True)
    if request.highlight:
        data["$highlight"] = True
    try:
        annotation = service.create(data)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return annotation_response(annotation, store)


@router.post("/page-notes")
async def create_page_note(
    service: AnnotationsService = Depends(get_annotations_service),
    store: SidebarStore = Depends(get_store),
) -> PageNoteResponse:
    if not store.is_logged_in():
        service.create_page_note()
        return PageNoteResponse(login_required=True)
    annotation = service.create_page_note()
    if annotation is None:
        raise HTTPException(status_code=409, detail="No document is connected")
    return PageNoteResponse(annotation=annotation_response(annotation, store))


@router.put("/annotations/{tag}/draft")
async def update_draft(
    tag: str,
    request: UpdateDraftRequest,
    store: SidebarStore = Depends(get_store),
) -> AnnotationResponse:
    annotation = store.find_annotation_by_tag(tag)
    if annotation is None:
        raise HTTPException(status_code=404, detail=f"Annotation not found: {tag}")
    store.create_draft(annotation, DraftChanges(**request.model_dump()))
    return annotation_response(annotation, store)


@router.delete("/annotations/{tag}/draft", status_code=status.HTTP_204_NO_CONTENT)
async def discard_draft(tag: str, store: SidebarStore = Depends(get_store)) -> None:
    annotation = store.find_annotation_by_tag(tag)
    if annotation is None:
        raise HTTPException(status_code=404, detail=f"Annotation not found: {tag}")
    store.remove_draft(annotation)


@router.post("/annotations/{tag}/save")
async def save_annotation(
    tag: str,
    service: AnnotationsService = Depends(get_annotations_service),
    store: SidebarStore = Depends(get_store),
) -> AnnotationResponse:
    annotation = store.find_annotation_by_tag(tag)
    if annotation is None:
        raise HTTPException(status_code=404, detail=f"Annotation not found: {tag}")
    try:
        saved = await service.save(annotation)
    except AlreadySavedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PublishError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return annotation_response(saved, store)


@router.post("/annotations/{annotation_id}/replies", status_code=status.HTTP_201_CREATED)
async def reply_to_annotation(
    annotation_id: str,
    request: CreateReplyRequest,
    service: AnnotationsService = Depends(get_annotations_service),
    store: SidebarStore = Depends(get_store),
) -> AnnotationResponse:
    parent = _saved_or_404(store, annotation_id)
    profile = store.get_profile()
    user_id = request.user_id or (profile.public_key_hex if profile else None)
    if user_id is None:
        raise HTTPException(status_code=400, detail="Cannot reply when logged out")
    try:
        reply = service.reply(parent, user_id)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return annotation_response(reply, store)


@router.post("/annotations/{annotation_id}/flag")
async def flag_annotation(
    annotation_id: str,
    service: AnnotationsService = Depends(get_annotations_service),
    store: SidebarStore = Depends(get_store),
) -> AnnotationResponse:
    service.flag(_saved_or_404(store, annotation_id))
    return annotation_response(_saved_or_404(store, annotation_id), store)


@router.get("/activity")
async def get_activity(store: SidebarStore = Depends(get_store)) -> ActivityResponse:
    return ActivityResponse(
        is_loading=store.is_loading(),
        is_fetching_annotations=store.is_fetching_annotations(),
        has_fetched_annotations=store.has_fetched_annotations(),
        annotation_result_count=store.annotation_result_count(),
        imports_pending=store.imports_pending(),
        imports_total=store.imports_total(),
    )


@router.post("/imports")
async def import_annotations(
    request: ImportRequest,
    service: ImportAnnotationsService = Depends(get_import_service),
    store: SidebarStore = Depends(get_store),
) -> ImportResponse:
    results = await service.import_annotations(request.annotations)
    return ImportResponse(
        imported=sum(1 for r in results if r.type == "import"),
        skipped=sum(1 for r in results if r.type == "skipped"),
        errors=sum(1 for r in results if r.type == "error"),
        results=[
            ImportResultResponse(
                type=r.type,
                annotation=annotation_response(r.annotation, store) if r.annotation else None,
                error=str(r.error) if r.error else None,
            )
            for r in results
        ],
    )
