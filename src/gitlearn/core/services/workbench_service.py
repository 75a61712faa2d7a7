"""
Workbench service - record workflows spanning the record backend and the
repository.

Saving a record together with an edited file always writes the file
first and waits for GitHub's answer; the record is only stored once the
commit that holds that file exists. The record index is refetched and
rebuilt in full after every mutation.
"""

import asyncio
import logging
import re
import time
from typing import Callable, Dict, List, Optional, Tuple

import aiohttp

from ..errors import ContentError, InvalidCommand, NotFound, VersionConflict
from ..schemas.content import RemoteFile, WriteResult
from ..schemas.records import (
    CategoryRow,
    CommandKind,
    CommandResult,
    EditedFile,
    LearningRecordView,
    RecordCommand,
    RecordSaveRequest,
    RecordUpdateRequest,
    SearchFilters,
    SearchResponse,
    TagRow,
)
from ..session import GitHubSession
from .content_service import ContentService
from .interfaces import IContentService, IRecordStore, IWorkbenchService
from .record_index import RecordIndex
from .search_service import SearchService
from .tree_service import TreeCache, get_tree_cache

logger = logging.getLogger(__name__)

_URL_PATTERN = re.compile(
    r"http[s]?://(?:[a-zA-Z]|[0-9]|[$-_@.&+]|[!*\\(\\),]|(?:%[0-9a-fA-F][0-9a-fA-F]))+"
)


class WorkbenchService(IWorkbenchService):
    """Record workflows for one request."""

    def __init__(
        self,
        store: IRecordStore,
        content: Optional[IContentService] = None,
        tree_cache_for: Callable[[GitHubSession], TreeCache] = get_tree_cache,
        search: Optional[SearchService] = None,
        index: Optional[RecordIndex] = None,
    ):
        self.store = store
        self.content = content or ContentService()
        self.tree_cache_for = tree_cache_for
        self.search_service = search or SearchService()
        self.index = index or RecordIndex()

    async def refetch(self, owner_id: int) -> List[LearningRecordView]:
        # one AsyncSession underneath, so no gather
        records = await self.store.list_records(owner_id)
        tags = await self.store.list_tags()
        links = await self.store.list_learning_tag_links()
        categories = await self.store.list_categories()

        views = self.index.rebuild(records, tags, links, categories)
        logger.info(
            f"Refetched records for owner {owner_id}",
            extra={"records": len(views), "tags": len(self.index.tag_names), "categories": len(categories)},
        )
        return views

    async def save_record(self, session: GitHubSession, request: RecordSaveRequest) -> LearningRecordView:
        owner_id = self._owner(session)
        data = request.record.model_dump()

        if request.edited_file is not None:
            written = await self._write_edited_file(session, request.edited_file)
            data["github_path"] = written.path
            data["commit_sha"] = written.commit_sha or written.sha

        data["owner_id"] = owner_id
        row = await self.store.create_record(data)

        await self.refetch(owner_id)
        return self._require(row.id)

    async def update_record(
        self, session: GitHubSession, record_id: int, request: RecordUpdateRequest
    ) -> LearningRecordView:
        owner_id = self._owner(session)
        patch = request.record.model_dump(exclude_unset=True)

        # nothing is committed to GitHub for a record the caller cannot update
        if await self.store.get_record(record_id, owner_id) is None:
            raise NotFound(f"Learning record {record_id} not found")

        if request.edited_file is not None:
            written = await self._write_edited_file(session, request.edited_file)
            patch["github_path"] = written.path
            patch["commit_sha"] = written.commit_sha or written.sha

        row = await self.store.update_record(record_id, patch, owner_id)
        if row is None:
            raise NotFound(f"Learning record {record_id} not found")

        await self.refetch(owner_id)
        return self._require(record_id)

    async def delete_record(self, session: GitHubSession, record_id: int) -> None:
        owner_id = self._owner(session)
        deleted = await self.store.delete_record(record_id, owner_id)
        if not deleted:
            raise NotFound(f"Learning record {record_id} not found")
        await self.refetch(owner_id)

    async def handle(self, session: GitHubSession, command: RecordCommand) -> CommandResult:
        """Run a view, edit or delete command."""
        if command.kind == CommandKind.VIEW:
            if command.path:
                file = await self.content.read_file(session, command.path, command.ref)
                if command.ref:
                    file = file.model_copy(update={"editable": False})
                return CommandResult(kind=command.kind, file=file)
            record = await self._record_for(session, command)
            file, file_error = await self._record_file(session, record, pinned=True)
            return CommandResult(kind=command.kind, record=record, file=file, file_error=file_error)

        if command.kind == CommandKind.EDIT:
            record = await self._record_for(session, command)
            file, file_error = await self._record_file(session, record, pinned=False)
            return CommandResult(kind=command.kind, record=record, file=file, file_error=file_error)

        if command.kind == CommandKind.DELETE:
            if command.id is None:
                raise InvalidCommand("delete needs a record id")
            await self.delete_record(session, command.id)
            return CommandResult(kind=command.kind, deleted=True)

        raise InvalidCommand(f"Unknown command {command.kind!r}")

    async def search_records(
        self, session: GitHubSession, filters: SearchFilters, page: int = 1, per_page: int = 20
    ) -> SearchResponse:
        started_at = time.time()
        views = await self.refetch(self._owner(session))
        return self.search_service.search_page(views, filters, page, per_page, started_at=started_at)

    async def get_record(self, session: GitHubSession, record_id: int) -> LearningRecordView:
        await self.refetch(self._owner(session))
        return self._require(record_id)

    async def list_categories(self) -> List[CategoryRow]:
        rows = await self.store.list_categories()
        return [CategoryRow.model_validate(row, from_attributes=True) for row in rows]

    async def list_tag_names(self) -> List[str]:
        rows = await self.store.list_tags()
        return list(dict.fromkeys(TagRow.model_validate(row, from_attributes=True).name for row in rows))

    async def create_category(self, session: GitHubSession, name: str) -> CategoryRow:
        category = await self.store.create_category(name)
        await self.refetch(self._owner(session))
        return CategoryRow.model_validate(category, from_attributes=True)

    async def validate_reference_urls(self, urls: List[str]) -> Dict[str, bool]:
        """Check each URL answers 200."""
        results = {}
        timeout = aiohttp.ClientTimeout(total=5)

        async with aiohttp.ClientSession(timeout=timeout) as http:
            for url in urls:
                if not _URL_PATTERN.match(url):
                    results[url] = False
                    continue
                try:
                    async with http.get(url) as resp:
                        results[url] = resp.status == 200
                except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                    logger.info(f"Reference URL {url} unreachable: {e!r}")
                    results[url] = False

        return results

    async def _write_edited_file(self, session: GitHubSession, edited: EditedFile) -> WriteResult:
        try:
            written = await self.content.write_file(
                session,
                edited.path,
                edited.content,
                edited.sha,
                content_is_base64=edited.content_is_base64,
            )
        except VersionConflict:
            logger.warning(f"{edited.path} changed remotely; record not saved")
            raise

        logger.info(f"Saved {edited.path} at commit {written.commit_sha}")
        self.tree_cache_for(session).schedule_refresh()
        return written

    async def _record_for(self, session: GitHubSession, command: RecordCommand) -> LearningRecordView:
        if command.id is None:
            raise InvalidCommand(f"{command.kind.value} needs a record id")
        record = self.index.get(command.id)
        if record is None:
            await self.refetch(self._owner(session))
        return self._require(command.id)

    async def _record_file(
        self, session: GitHubSession, record: LearningRecordView, pinned: bool
    ) -> Tuple[Optional[RemoteFile], Optional[str]]:
        """The record's file, or why it cannot be shown. Never fails the record view."""
        if not record.github_path:
            return None, None

        ref = record.commit_sha if pinned else None
        try:
            file = await self.content.read_file(session, record.github_path, ref)
        except ContentError as e:
            logger.warning(f"Could not load {record.github_path} for record {record.id}: {e!r}")
            return None, e.detail

        if pinned:
            file = file.model_copy(update={"editable": False})
        return file, None

    def _require(self, record_id: int) -> LearningRecordView:
        view = self.index.get(record_id)
        if view is None:
            raise NotFound(f"Learning record {record_id} not found")
        return view

    @staticmethod
    def _owner(session: GitHubSession) -> int:
        if session.owner_id is None:
            raise InvalidCommand("Session has no record owner")
        return session.owner_id
