"""
Record index - joins record rows with their tags and category.

``rebuild`` is a pure function: the same four collections always give
the same views. The index is never patched in place; any change to any
collection means a full rebuild, since the join is cheap and partial
updates are where stale joins come from.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ValidationError

from ..schemas.records import (
    CategoryRow,
    LearningRecordRow,
    LearningRecordView,
    LearningTagLinkRow,
    TagRow,
)

logger = logging.getLogger(__name__)


def _rows(items: Any, schema: type, label: str) -> List[Any]:
    """Validate a backend collection, skipping anything unusable."""
    if items is None:
        return []
    if not isinstance(items, (list, tuple)):
        logger.warning(f"Expected a list of {label}, got {type(items).__name__}; treating as empty")
        return []

    rows = []
    for item in items:
        if isinstance(item, schema):
            rows.append(item)
            continue
        try:
            if isinstance(item, dict):
                rows.append(schema.model_validate(item))
            else:
                rows.append(schema.model_validate(item, from_attributes=True))
        except ValidationError as e:
            logger.warning(f"Skipping malformed {label} row: {e.error_count()} error(s)")
    return rows


def rebuild(
    records: Sequence[Any],
    tags: Sequence[Any],
    links: Sequence[Any],
    categories: Sequence[Any],
) -> List[LearningRecordView]:
    """Project records into views with tag names and category name resolved.

    Tags follow link order with duplicates removed. A link to a missing tag
    and a category id matching no category are dropped from the view
    rather than failing the rebuild. Accepts ORM objects, dicts or row
    schemas.
    """
    tag_names: Dict[int, str] = {tag.id: tag.name for tag in _rows(tags, TagRow, "tags")}
    category_names: Dict[int, str] = {
        category.id: category.name for category in _rows(categories, CategoryRow, "categories")
    }

    tag_ids_by_record: Dict[int, List[int]] = {}
    for link in _rows(links, LearningTagLinkRow, "learning tag links"):
        tag_ids = tag_ids_by_record.setdefault(link.learning_id, [])
        if link.tag_id not in tag_ids:
            tag_ids.append(link.tag_id)

    views = []
    for record in _rows(records, LearningRecordRow, "records"):
        names = [tag_names[tag_id] for tag_id in tag_ids_by_record.get(record.id, []) if tag_id in tag_names]
        category_name = category_names.get(record.category_id) if record.category_id is not None else None
        views.append(
            LearningRecordView(
                **record.model_dump(),
                tags=list(dict.fromkeys(names)),
                category_name=category_name,
            )
        )
    return views


class RecordIndex:
    """Holds the current views; replaced wholesale by every rebuild."""

    def __init__(self):
        self._views: List[LearningRecordView] = []
        self._by_id: Dict[int, LearningRecordView] = {}
        self.category_names: List[str] = []
        self.tag_names: List[str] = []

    @property
    def views(self) -> List[LearningRecordView]:
        return list(self._views)

    def __len__(self) -> int:
        return len(self._views)

    def rebuild(
        self,
        records: Sequence[Any],
        tags: Sequence[Any],
        links: Sequence[Any],
        categories: Sequence[Any],
    ) -> List[LearningRecordView]:
        views = rebuild(records, tags, links, categories)
        self._views = views
        self._by_id = {view.id: view for view in views if view.id is not None}
        self.category_names = _names(_rows(categories, CategoryRow, "categories"))
        self.tag_names = _names(_rows(tags, TagRow, "tags"))
        logger.debug(f"Record index rebuilt with {len(views)} views")
        return self.views

    def get(self, record_id: int) -> Optional[LearningRecordView]:
        return self._by_id.get(record_id)


def _names(rows: Iterable[BaseModel]) -> List[str]:
    return list(dict.fromkeys(row.name for row in rows))
