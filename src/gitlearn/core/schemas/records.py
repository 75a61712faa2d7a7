"""
Learning record schemas.

Row schemas mirror what the record-storage backend returns; the view
schema is the denormalized projection built by the record index. Request
schemas define the API contracts for saving records, searching them and
dispatching record commands.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import PaginationResponse
from .content import RemoteFile


class LearningRecordRow(BaseModel):
    """A learning record as stored by the backend."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = Field(default=None, description="Absent until persisted")
    title: str
    explanatory_text: str = ""
    understanding_level: int = Field(default=3, ge=0, le=5)
    reference_url: Optional[str] = None
    category_id: Optional[int] = None
    github_path: Optional[str] = None
    commit_sha: Optional[str] = None
    created_at: Optional[datetime] = None
    owner_id: Optional[int] = None


class TagRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class LearningTagLinkRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    learning_id: int
    tag_id: int


class CategoryRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class LearningRecordView(LearningRecordRow):
    """Record joined with its tag names and category name. Read-only."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    tags: List[str] = Field(default_factory=list, description="Tag names, link order")
    category_name: Optional[str] = Field(default=None, description="Resolved category")


_TAG_PATTERN = re.compile(r"^[^\s,]+$")


def _validate_tag_names(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    cleaned = [tag.strip().lstrip("#") for tag in v]
    if len(cleaned) != len(set(cleaned)):
        raise ValueError("Duplicate tags are not allowed")
    for tag in cleaned:
        if len(tag) < 1 or len(tag) > 50:
            raise ValueError("Tags must be between 1 and 50 characters")
        if not _TAG_PATTERN.match(tag):
            raise ValueError("Tags cannot contain whitespace or commas")
    return cleaned


class EditedFile(BaseModel):
    """File change submitted together with a record."""

    path: str = Field(min_length=1, max_length=500)
    content: str = Field(description="Text, or base64 when content_is_base64 is set")
    sha: Optional[str] = Field(default=None, description="Sha observed when the file was read")
    content_is_base64: bool = Field(default=False)

    @field_validator("path")
    @classmethod
    def strip_path(cls, v):
        clean = v.strip().strip("/")
        if not clean:
            raise ValueError("Path cannot be empty")
        return clean


class RecordCreate(BaseModel):
    """Learning record creation request."""

    title: str = Field(min_length=1, max_length=200)
    explanatory_text: str = Field(default="")
    understanding_level: int = Field(default=3, ge=0, le=5)
    reference_url: Optional[str] = Field(default=None, max_length=500)
    category_id: Optional[int] = Field(default=None)
    tags: List[str] = Field(default_factory=list, max_length=20)
    github_path: Optional[str] = Field(default=None, max_length=500)
    created_at: Optional[datetime] = Field(default=None)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _validate_tag_names(v)

    @field_validator("reference_url", "github_path")
    @classmethod
    def blank_to_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v is not None else v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Go channels",
                "explanatory_text": "Unbuffered channels block until both sides are ready.",
                "understanding_level": 3,
                "reference_url": "https://go.dev/tour/concurrency/2",
                "category_id": 1,
                "tags": ["go", "concurrency"],
                "github_path": "go/channels.md",
            }
        }
    )


class RecordUpdate(BaseModel):
    """Learning record patch. Only fields that are set are applied."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    explanatory_text: Optional[str] = Field(default=None)
    understanding_level: Optional[int] = Field(default=None, ge=0, le=5)
    reference_url: Optional[str] = Field(default=None, max_length=500)
    category_id: Optional[int] = Field(default=None)
    tags: Optional[List[str]] = Field(default=None, max_length=20)
    github_path: Optional[str] = Field(default=None, max_length=500)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _validate_tag_names(v)


class RecordSaveRequest(BaseModel):
    """Create a record, optionally writing its file first."""

    record: RecordCreate
    edited_file: Optional[EditedFile] = None


class RecordUpdateRequest(BaseModel):
    """Update a record, optionally writing its file first."""

    record: RecordUpdate
    edited_file: Optional[EditedFile] = None


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


SortOrder = Literal["name-asc", "name-desc"]


class SearchFilters(BaseModel):
    """Compound filter applied by the query engine."""

    category: str = Field(default="all", description="'all' or an exact category name")
    tags: List[str] = Field(default_factory=list, description="All must be present")
    text: str = Field(default="", description="Substring of title or explanation")
    sort: SortOrder = Field(default="name-asc")

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v):
        # cleaned like stored tag names; set semantics, first occurrence order kept
        cleaned = (tag.strip().lstrip("#") for tag in v)
        return list(dict.fromkeys(tag for tag in cleaned if tag))


class SearchResponse(PaginationResponse[LearningRecordView]):
    """Search results."""

    filters_applied: Dict[str, Any] = Field(description="Filters that were applied")
    search_time_ms: Optional[float] = Field(default=None)


class CommandKind(str, Enum):
    VIEW = "view"
    EDIT = "edit"
    DELETE = "delete"


class RecordCommand(BaseModel):
    """Explicit action from the rendering layer."""

    kind: CommandKind
    id: Optional[int] = None
    path: Optional[str] = None
    ref: Optional[str] = None


class CommandResult(BaseModel):
    """What a command produced."""

    kind: CommandKind
    record: Optional[LearningRecordView] = None
    file: Optional[RemoteFile] = None
    file_error: Optional[str] = Field(
        default=None, description="Why the record's file could not be shown"
    )
    deleted: bool = False
