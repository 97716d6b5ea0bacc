"""ImportAnnotationsService: imports a batch of annotations, e.g. from an
export file, by saving each one through the annotations service."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Literal

from marginalia.annotations.service import AnnotationsService
from marginalia.models import Annotation
from marginalia.store import SidebarStore

logger = logging.getLogger(__name__)

# Fields of an exported annotation that are carried into the imported copy.
IMPORTED_FIELDS = ("document", "tags", "target", "text", "uri")


@dataclass
class ImportResult:
    """Outcome of importing one annotation."""

    type: Literal["import", "skipped", "error"]
    annotation: Annotation | None = None
    error: Exception | None = None
    data: dict[str, Any] | None = None


class ImportAnnotationsService:
    def __init__(self, annotations_service: AnnotationsService, store: SidebarStore) -> None:
        self._annotations_service = annotations_service
        self._store = store

    async def import_annotations(self, items: list[dict[str, Any]]) -> list[ImportResult]:
        """Import `items`, skipping any that duplicate an annotation already loaded.

        Progress is reported through the activity module's import counters:
        one `complete_import(1)` per item, whatever its outcome.
        """
        self._store.begin_import(len(items))
        existing = self._store.all_annotations()

        results = await asyncio.gather(*(self._import_one(item, existing) for item in items))

        counts = {kind: sum(1 for r in results if r.type == kind) for kind in ("import", "skipped", "error")}
        logger.info(
            "Imported %d annotations (%d skipped, %d errors)",
            counts["import"], counts["skipped"], counts["error"],
        )
        return list(results)

    async def _import_one(self, item: dict[str, Any], existing: list[Annotation]) -> ImportResult:
        try:
            duplicate = next((a for a in existing if _is_duplicate(item, a)), None)
            if duplicate is not None:
                return ImportResult(type="skipped", annotation=duplicate, data=item)

            data = {key: item[key] for key in IMPORTED_FIELDS if key in item}
            annotation = self._annotations_service.annotation_from_data(data)
            saved = await self._annotations_service.save(annotation)
            return ImportResult(type="import", annotation=saved, data=item)
        except Exception as e:
            logger.warning("Failed to import annotation for %s: %s", item.get("uri"), e)
            return ImportResult(type="error", error=e, data=item)
        finally:
            self._store.complete_import(1)


def _is_duplicate(item: dict[str, Any], annotation: Annotation) -> bool:
    """Same document, same body, same anchoring."""
    if item.get("uri") != annotation.uri or item.get("text", "") != annotation.text:
        return False
    targets = [t.model_dump(exclude_none=True) for t in annotation.target]
    return item.get("target") == targets
