"""
Pydantic schemas for records, repository content and common responses.
"""

from .common import ErrorResponse, HealthCheckResponse, PaginationResponse
from .content import (
    ContentSource,
    EntryType,
    FileWriteRequest,
    FolderChild,
    FolderCreateRequest,
    RemoteFile,
    RemoteTreeEntry,
    TreeResponse,
    WriteResult,
)
from .records import (
    CategoryCreate,
    CategoryRow,
    CommandKind,
    CommandResult,
    EditedFile,
    LearningRecordRow,
    LearningRecordView,
    LearningTagLinkRow,
    RecordCommand,
    RecordCreate,
    RecordSaveRequest,
    RecordUpdate,
    RecordUpdateRequest,
    SearchFilters,
    SearchResponse,
    TagRow,
)

__all__ = [
    # Common
    "PaginationResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    # Content
    "ContentSource",
    "EntryType",
    "RemoteFile",
    "RemoteTreeEntry",
    "FolderChild",
    "WriteResult",
    "FileWriteRequest",
    "FolderCreateRequest",
    "TreeResponse",
    # Records
    "LearningRecordRow",
    "TagRow",
    "LearningTagLinkRow",
    "CategoryRow",
    "LearningRecordView",
    "EditedFile",
    "RecordCreate",
    "RecordUpdate",
    "RecordSaveRequest",
    "RecordUpdateRequest",
    "CategoryCreate",
    "SearchFilters",
    "SearchResponse",
    "CommandKind",
    "RecordCommand",
    "CommandResult",
]
