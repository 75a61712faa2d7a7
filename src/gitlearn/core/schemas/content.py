"""
Schemas for repository content: files, tree entries, folder listings and
write requests.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..codec import ContentKind


class ContentSource(str, Enum):
    """Where a RemoteFile's bytes are."""

    INLINE = "inline"      # base64 in ``content``
    REDIRECT = "redirect"  # too large for the API, fetch ``content_url``


class RemoteFile(BaseModel):
    """One blob as read from the repository."""

    path: str = Field(description="Repository path")
    sha: str = Field(description="Blob sha; pass back as expected_sha when writing")
    kind: ContentKind = Field(description="text, image or binary")
    source: ContentSource = Field(default=ContentSource.INLINE)
    content: Optional[str] = Field(default=None, description="Inline base64 (whitespace stripped)")
    content_url: Optional[str] = Field(default=None, description="Raw URL when not inline")
    text: Optional[str] = Field(default=None, description="Decoded text for text files")
    data_url: Optional[str] = Field(default=None, description="data: URL for inline images")
    language: str = Field(default="plaintext", description="Syntax highlighter hint")
    size: Optional[int] = Field(default=None, description="Size in bytes as reported by GitHub")
    ref: Optional[str] = Field(default=None, description="Ref the file was read at, if pinned")
    editable: bool = Field(default=True, description="False for pinned historical views")

    @property
    def is_redirect(self) -> bool:
        return self.source == ContentSource.REDIRECT


class RemoteTreeEntry(BaseModel):
    """A blob path from a recursive tree listing."""

    model_config = ConfigDict(frozen=True)

    path: str
    type: Literal["blob", "tree"] = "blob"
    sha: Optional[str] = None
    size: Optional[int] = None

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


class EntryType(str, Enum):
    """Single-level listing entry type."""

    DIRECTORY = "dir"
    FILE = "file"


class FolderChild(BaseModel):
    """One entry of a folder listing."""

    name: str
    path: str
    type: EntryType


class WriteResult(BaseModel):
    """Outcome of a successful blob write."""

    path: str
    sha: str = Field(description="New blob sha (the next expected_sha)")
    commit_sha: Optional[str] = Field(default=None, description="Commit that wrote it")


class FileWriteRequest(BaseModel):
    """Create or update a file."""

    path: str = Field(min_length=1, max_length=500)
    content: str = Field(description="Text, or base64 when content_is_base64 is set")
    expected_sha: Optional[str] = Field(default=None, description="Omit to create")
    content_is_base64: bool = Field(default=False)
    message: Optional[str] = Field(default=None, max_length=500, description="Commit message")

    @field_validator("path")
    @classmethod
    def validate_path(cls, v):
        clean = v.strip().strip("/")
        if not clean:
            raise ValueError("Path cannot be empty")
        if any(part in ("", ".", "..") for part in clean.split("/")):
            raise ValueError("Path segments cannot be empty, '.' or '..'")
        return clean


class FolderCreateRequest(BaseModel):
    """Create a folder by writing its placeholder blob."""

    path: str = Field(min_length=1, max_length=500)

    @field_validator("path")
    @classmethod
    def validate_path(cls, v):
        clean = v.strip().strip("/")
        if not clean:
            raise ValueError("Folder path cannot be empty")
        if any(part in ("", ".", "..") for part in clean.split("/")):
            raise ValueError("Path segments cannot be empty, '.' or '..'")
        return clean


class TreeResponse(BaseModel):
    """Blob listing for the sidebar."""

    ref: str
    entries: list[RemoteTreeEntry]
    total: int
