"""Record repository - SQL implementation of the record-storage backend."""

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import and_, delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.category import Category
from ..models.record import LearningRecord
from ..models.tag import LearningTag, Tag
from ..services.interfaces import IRecordStore

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({
    "title",
    "explanatory_text",
    "understanding_level",
    "reference_url",
    "category_id",
    "github_path",
    "commit_sha",
})


class RecordRepository(IRecordStore):
    """Repository for learning records, tags, links and categories."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_records(self, owner_id: int) -> List[LearningRecord]:
        stmt = (
            select(LearningRecord)
            .where(LearningRecord.owner_id == owner_id)
            .order_by(LearningRecord.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars())

    async def list_tags(self) -> List[Tag]:
        result = await self.session.execute(select(Tag).order_by(Tag.id))
        return list(result.scalars())

    async def list_learning_tag_links(self) -> List[LearningTag]:
        # id order == insertion order, which the index keeps for tag lists
        result = await self.session.execute(select(LearningTag).order_by(LearningTag.id))
        return list(result.scalars())

    async def list_categories(self) -> List[Category]:
        result = await self.session.execute(select(Category).order_by(Category.id))
        return list(result.scalars())

    async def get_record(self, record_id: int, owner_id: Optional[int] = None) -> Optional[LearningRecord]:
        """Get record by ID, optionally only if owned by ``owner_id``."""
        conditions = [LearningRecord.id == record_id]
        if owner_id is not None:
            conditions.append(LearningRecord.owner_id == owner_id)
        result = await self.session.execute(select(LearningRecord).where(and_(*conditions)))
        return result.scalar_one_or_none()

    async def create_record(self, record_data: Dict[str, Any]) -> LearningRecord:
        """Create a record with its tag links in one commit."""
        tag_names = _clean_tag_names(record_data.get("tags") or ())
        data = {k: v for k, v in record_data.items() if k != "tags" and v is not None}
        record = LearningRecord(**data)
        self.session.add(record)
        try:
            await self.session.flush()
            await self._replace_tags(record.id, tag_names)
            await self.session.commit()
        except Exception as e:
            logger.error(f"Creating learning record failed, nothing stored: {e!r}")
            await self.session.rollback()
            raise
        await self.session.refresh(record)
        logger.info(f"Created learning record {record.id} for owner {record.owner_id}")
        return record

    async def update_record(
        self, record_id: int, patch: Dict[str, Any], owner_id: int
    ) -> Optional[LearningRecord]:
        """Update record if owned by ``owner_id``; a non-None ``tags`` entry replaces the tag set."""
        record = await self.get_record(record_id, owner_id)
        if not record:
            return None

        tags = patch.get("tags")
        tag_names = _clean_tag_names(tags) if tags is not None else None
        for key, value in patch.items():
            if key in _UPDATABLE_FIELDS:
                setattr(record, key, value)

        try:
            await self.session.flush()
            if tag_names is not None:
                await self._replace_tags(record_id, tag_names)
            await self.session.commit()
        except Exception as e:
            logger.error(f"Updating learning record {record_id} failed, nothing stored: {e!r}")
            await self.session.rollback()
            raise
        await self.session.refresh(record)
        return record

    async def delete_record(self, record_id: int, owner_id: Optional[int] = None) -> bool:
        """Delete record and its tag links."""
        record = await self.get_record(record_id, owner_id)
        if not record:
            logger.warning(f"Record {record_id} not found or not owned by {owner_id}")
            return False

        try:
            await self.session.execute(delete(LearningTag).where(LearningTag.learning_id == record_id))
            await self.session.execute(delete(LearningRecord).where(LearningRecord.id == record_id))
            await self.session.commit()
        except Exception as e:
            logger.error(f"Unexpected error deleting record {record_id}: {e}")
            await self.session.rollback()
            raise

        logger.info(f"Deleted learning record {record_id}")
        return True

    async def create_category(self, name: str) -> Category:
        """Create a category; an existing one with the same name is returned."""
        clean = Category.normalize_name(name)
        existing = await self.session.execute(select(Category).where(Category.name == clean))
        category = existing.scalar_one_or_none()
        if category:
            return category

        category = Category(name=clean)
        self.session.add(category)
        try:
            await self.session.commit()
        except IntegrityError:
            # created concurrently: reload
            await self.session.rollback()
            result = await self.session.execute(select(Category).where(Category.name == clean))
            return result.scalar_one()
        await self.session.refresh(category)
        return category

    async def _replace_tags(self, record_id: int, names: List[str]) -> None:
        """Swap the record's links for ``names``; the caller commits."""
        await self.session.execute(delete(LearningTag).where(LearningTag.learning_id == record_id))
        for name in names:
            tag = await self._get_or_create_tag(name)
            self.session.add(LearningTag(learning_id=record_id, tag_id=tag.id))
        await self.session.flush()

    async def _find_tag(self, name: str) -> Optional[Tag]:
        result = await self.session.execute(select(Tag).where(Tag.name == name))
        return result.scalar_one_or_none()

    async def _get_or_create_tag(self, name: str) -> Tag:
        tag = await self._find_tag(name)
        if tag:
            return tag

        try:
            # savepoint, so a lost race keeps the record in the outer transaction
            async with self.session.begin_nested():
                tag = Tag(name=name)
                self.session.add(tag)
        except IntegrityError:
            # created concurrently: reload
            tag = await self._find_tag(name)
            if tag is None:
                raise
        return tag


def _clean_tag_names(names: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(Tag.normalize_name(n) for n in names if n and n.strip()))
