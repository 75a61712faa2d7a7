"""
Service interfaces for the GitLearn application.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from ..schemas.common import HealthCheckResponse
from ..schemas.content import FolderChild, RemoteFile, RemoteTreeEntry, WriteResult
from ..schemas.records import (
    CommandResult,
    LearningRecordView,
    RecordCommand,
    RecordSaveRequest,
    RecordUpdateRequest,
    SearchFilters,
)
from ..session import GitHubSession


class IRecordStore(ABC):
    """Record-storage backend. List calls return rows; mutations raise on failure."""

    @abstractmethod
    async def list_records(self, owner_id: int) -> Sequence[Any]:
        """Records owned by ``owner_id``."""
        pass

    @abstractmethod
    async def list_tags(self) -> Sequence[Any]:
        """All tags."""
        pass

    @abstractmethod
    async def list_learning_tag_links(self) -> Sequence[Any]:
        """All record/tag join rows, in insertion order."""
        pass

    @abstractmethod
    async def list_categories(self) -> Sequence[Any]:
        """All categories."""
        pass

    @abstractmethod
    async def get_record(self, record_id: int, owner_id: Optional[int] = None) -> Optional[Any]:
        """One record, or None if it does not exist for that owner."""
        pass

    @abstractmethod
    async def create_record(self, record_data: Dict[str, Any]) -> Any:
        """Create a record, and its tag links from ``record_data["tags"]``, in one transaction."""
        pass

    @abstractmethod
    async def update_record(self, record_id: int, patch: Dict[str, Any], owner_id: int) -> Optional[Any]:
        """Patch a record; a ``tags`` entry replaces its tag set in the same transaction.

        None if the record does not exist for that owner.
        """
        pass

    @abstractmethod
    async def delete_record(self, record_id: int, owner_id: Optional[int] = None) -> bool:
        """Delete a record with its links."""
        pass

    @abstractmethod
    async def create_category(self, name: str) -> Any:
        """Create a category."""
        pass


class IContentService(ABC):
    """Read/write single blobs and emulate folders."""

    @abstractmethod
    async def read_file(self, session: GitHubSession, path: str, ref: Optional[str] = None) -> RemoteFile:
        """Read one blob."""
        pass

    @abstractmethod
    async def write_file(
        self,
        session: GitHubSession,
        path: str,
        content: Any,
        expected_sha: Optional[str] = None,
        **kwargs: Any,
    ) -> WriteResult:
        """Create or update one blob."""
        pass

    @abstractmethod
    async def create_folder(self, session: GitHubSession, folder_path: str) -> WriteResult:
        """Write a placeholder blob under ``folder_path``."""
        pass

    @abstractmethod
    async def list_folder_children(self, session: GitHubSession, folder_path: str = "") -> List[FolderChild]:
        """Single-level directory listing, placeholders removed."""
        pass


class ITreeService(ABC):
    """Recursive blob listing."""

    @abstractmethod
    async def list_files(self, session: GitHubSession, ref: Optional[str] = None) -> List[RemoteTreeEntry]:
        """All blob paths at ``ref``."""
        pass


class ISearchService(ABC):
    """Filtering and sorting of record views."""

    @abstractmethod
    def search(self, views: Sequence[LearningRecordView], filters: SearchFilters) -> List[LearningRecordView]:
        """Apply category, tag, text and sort stages."""
        pass


class IWorkbenchService(ABC):
    """Record workflows that touch both the record backend and the repository."""

    @abstractmethod
    async def refetch(self, owner_id: int) -> List[LearningRecordView]:
        """Reload the four collections and rebuild the index."""
        pass

    @abstractmethod
    async def save_record(self, session: GitHubSession, request: RecordSaveRequest) -> LearningRecordView:
        """Create a record, writing its file first if one was edited."""
        pass

    @abstractmethod
    async def update_record(
        self, session: GitHubSession, record_id: int, request: RecordUpdateRequest
    ) -> LearningRecordView:
        """Update a record, writing its file first if one was edited."""
        pass

    @abstractmethod
    async def handle(self, session: GitHubSession, command: RecordCommand) -> CommandResult:
        """Dispatch a view/edit/delete command."""
        pass


class IHealthService(ABC):
    """Health check service."""

    @abstractmethod
    async def get_health_status(self) -> HealthCheckResponse:
        """Get app health status."""
        pass

    @abstractmethod
    async def check_database_health(self) -> Dict[str, Any]:
        """Check DB connection."""
        pass

    @abstractmethod
    async def check_github_health(self) -> Dict[str, Any]:
        """Check GitHub reachability."""
        pass
