"""
Tree service - recursive blob listing for the repository sidebar.

``TreeCache`` keeps the last listing for one session. A refresh replaces
it wholesale; it is never patched per write. Writes schedule a delayed
refresh because the tree endpoint lags behind the contents endpoint.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from typing import List, Optional, Tuple

from ...config import get_settings
from ..errors import ContentError, EmptyRepository
from ..github import GitHubClient, get_github_client
from ..schemas.content import RemoteTreeEntry
from ..session import GitHubSession
from .content_service import is_placeholder
from .interfaces import ITreeService

logger = logging.getLogger(__name__)


class TreeService(ITreeService):
    """Lists every blob reachable from a ref."""

    def __init__(self, client: Optional[GitHubClient] = None):
        self.client = client or get_github_client()

    async def list_files(self, session: GitHubSession, ref: Optional[str] = None) -> List[RemoteTreeEntry]:
        try:
            data = await self.client.get_tree(session, ref)
        except EmptyRepository:
            logger.info(f"Repository {session.repo} has no commits yet")
            return []

        if data.get("truncated"):
            logger.warning(
                f"Tree listing for {session.repo} was truncated by GitHub",
                extra={"entries": len(data.get("tree", []))},
            )

        return [
            RemoteTreeEntry(path=item["path"], type="blob", sha=item.get("sha"), size=item.get("size"))
            for item in data.get("tree", [])
            if item.get("type") == "blob"
        ]


class TreeCache:
    """Last known blob listing for one session."""

    def __init__(
        self,
        session: GitHubSession,
        service: Optional[TreeService] = None,
        refresh_delay: Optional[float] = None,
    ):
        self.session = session
        self.service = service or TreeService()
        self.refresh_delay = (
            refresh_delay if refresh_delay is not None else get_settings().tree_refresh_delay_seconds
        )
        self._entries: List[RemoteTreeEntry] = []
        self._generation = 0
        self._pending: Optional[asyncio.Task] = None
        self.loaded_at: Optional[float] = None
        self.last_error: Optional[ContentError] = None

    @property
    def entries(self) -> List[RemoteTreeEntry]:
        return list(self._entries)

    @property
    def loaded(self) -> bool:
        return self.loaded_at is not None

    async def refresh(self) -> List[RemoteTreeEntry]:
        """Fetch the tree and replace the cached listing.

        When two refreshes overlap, only the one started last may replace
        the listing; an older response arriving late is dropped.
        """
        self._generation += 1
        generation = self._generation
        try:
            entries = await self.service.list_files(self.session)
        except ContentError as e:
            if generation == self._generation:
                self.last_error = e
            raise

        if generation != self._generation:
            logger.debug(f"Dropping stale tree listing for {self.session.repo}")
            return self.entries

        self._entries = entries
        self.loaded_at = time.monotonic()
        self.last_error = None
        return self.entries

    async def ensure_loaded(self) -> List[RemoteTreeEntry]:
        if not self.loaded:
            return await self.refresh()
        return self.entries

    def schedule_refresh(self, delay: Optional[float] = None) -> asyncio.Task:
        """Refresh after ``delay`` seconds, superseding any refresh still waiting."""
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        delay = self.refresh_delay if delay is None else delay
        self._pending = asyncio.create_task(self._delayed_refresh(delay))
        return self._pending

    async def _delayed_refresh(self, delay: float) -> None:
        await asyncio.sleep(delay)
        try:
            await self.refresh()
        except ContentError as e:
            # stays visible through last_error; the next refresh retries
            logger.warning(f"Scheduled tree refresh for {self.session.repo} failed: {e!r}")

    async def wait_pending(self) -> None:
        """Wait for a scheduled refresh, if any."""
        if self._pending is not None:
            try:
                await self._pending
            except asyncio.CancelledError:
                pass

    def cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    def visible_entries(self) -> List[RemoteTreeEntry]:
        """Cached entries without folder placeholders."""
        return [entry for entry in self._entries if not is_placeholder(entry.path)]

    def search(self, query: str) -> List[RemoteTreeEntry]:
        """Case-insensitive substring match on the path; empty query lists everything."""
        needle = query.strip().lower()
        entries = self.visible_entries()
        if not needle:
            return entries
        return [entry for entry in entries if needle in entry.path.lower()]


# One cache per (login, repo, branch), least recently used first
_tree_caches: "OrderedDict[Tuple[str, str, str], TreeCache]" = OrderedDict()


def get_tree_cache(session: GitHubSession) -> TreeCache:
    """Get the tree cache for a session, creating it on first use."""
    key = (session.login, session.repo, session.branch)
    cache = _tree_caches.get(key)
    if cache is None or cache.session.token != session.token:
        if cache is not None:
            cache.cancel_pending()
        cache = TreeCache(session)
        _tree_caches[key] = cache
    _tree_caches.move_to_end(key)

    limit = get_settings().tree_cache_max_sessions
    while len(_tree_caches) > limit:
        _, evicted = _tree_caches.popitem(last=False)
        evicted.cancel_pending()
        logger.debug(f"Evicted tree cache for {evicted.session.login}/{evicted.session.repo}")
    return cache


def clear_tree_caches() -> None:
    """Drop every cache and cancel scheduled refreshes."""
    for cache in _tree_caches.values():
        cache.cancel_pending()
    _tree_caches.clear()
