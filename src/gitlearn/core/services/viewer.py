"""
File viewer state with a stale-response guard.

Each ``open`` issues a new ticket. A read that completes after the viewer
was closed or pointed somewhere else is discarded instead of overwriting
what is currently shown.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..errors import ContentError
from ..schemas.content import RemoteFile
from ..session import GitHubSession
from .interfaces import IContentService

logger = logging.getLogger(__name__)


class ViewTicket(BaseModel):
    model_config = ConfigDict(frozen=True)

    generation: int
    path: str
    ref: Optional[str] = None


class FileViewer:
    """What one viewer currently shows: a file, an error, or nothing."""

    def __init__(self, content: IContentService):
        self.content = content
        self._generation = 0
        self._current: Optional[ViewTicket] = None
        self.file: Optional[RemoteFile] = None
        self.error: Optional[ContentError] = None

    @property
    def is_open(self) -> bool:
        return self._current is not None

    @property
    def loading(self) -> bool:
        return self._current is not None and self.file is None and self.error is None

    def open(self, path: str, ref: Optional[str] = None) -> ViewTicket:
        self._generation += 1
        self._current = ViewTicket(generation=self._generation, path=path, ref=ref)
        self.file = None
        self.error = None
        return self._current

    def close(self) -> None:
        self._generation += 1
        self._current = None
        self.file = None
        self.error = None

    def is_current(self, ticket: ViewTicket) -> bool:
        return self._current is not None and ticket.generation == self._current.generation

    def apply(self, ticket: ViewTicket, file: RemoteFile) -> bool:
        if not self.is_current(ticket):
            logger.debug(f"Discarding late result for {ticket.path}")
            return False
        self.file = file
        return True

    def fail(self, ticket: ViewTicket, error: ContentError) -> bool:
        if not self.is_current(ticket):
            logger.debug(f"Discarding late error for {ticket.path}: {error!r}")
            return False
        self.error = error
        return True

    async def load(self, session: GitHubSession, path: str, ref: Optional[str] = None) -> Optional[RemoteFile]:
        """Open ``path`` and read it; returns None if the result arrived too late."""
        ticket = self.open(path, ref)
        try:
            file = await self.content.read_file(session, path, ref)
        except ContentError as e:
            if self.fail(ticket, e):
                raise
            return None
        return file if self.apply(ticket, file) else None
