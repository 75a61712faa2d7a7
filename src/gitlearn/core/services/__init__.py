"""
Service layer interfaces and implementations.

The content services talk to GitHub; the record index and search service
are pure; the workbench ties records and repository content together.
"""

from .interfaces import (
    IContentService,
    IHealthService,
    IRecordStore,
    ISearchService,
    ITreeService,
    IWorkbenchService,
)

from .content_service import ContentService, is_placeholder
from .health_service import HealthService
from .record_index import RecordIndex, rebuild
from .search_service import SearchService
from .tree_service import TreeCache, TreeService, clear_tree_caches, get_tree_cache
from .viewer import FileViewer, ViewTicket
from .workbench_service import WorkbenchService

__all__ = [
    # Interfaces
    "IContentService",
    "IHealthService",
    "IRecordStore",
    "ISearchService",
    "ITreeService",
    "IWorkbenchService",

    # Implementations
    "ContentService",
    "HealthService",
    "RecordIndex",
    "SearchService",
    "TreeCache",
    "TreeService",
    "WorkbenchService",
    "FileViewer",
    "ViewTicket",

    # Helpers
    "clear_tree_caches",
    "get_tree_cache",
    "is_placeholder",
    "rebuild",
]
