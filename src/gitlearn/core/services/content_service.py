"""Content service - the repository as a filesystem of single blobs.

Reads re-fetch on every call; nothing is cached between views. Writes use
GitHub's sha check for optimistic concurrency: the caller passes the sha
it read, and a stale one comes back as VersionConflict. This service never
retries or serializes writers itself.
"""

import binascii
import logging
from typing import Any, List, Optional, Union

from ...config import get_settings
from ..codec import (
    ContentKind,
    classify,
    collation_key,
    decode_transport,
    is_decode_failure,
    language_for,
    looks_binary,
    strip_transport,
    to_display_text,
    to_image_data_url,
    to_transport_base64,
)
from ..errors import AmbiguousPath, HistoryUnavailable, NotFound, VersionConflict, WriteRejected
from ..github import GitHubClient, get_github_client
from ..schemas.content import ContentSource, EntryType, FolderChild, RemoteFile, WriteResult
from ..session import GitHubSession
from .interfaces import IContentService

logger = logging.getLogger(__name__)

# placeholder names written by us or by other git tooling
_PLACEHOLDER_NAMES = frozenset({".keep", ".gitkeep"})


def is_placeholder(path: str) -> bool:
    """True for folder placeholder blobs, which listings must hide."""
    name = path.rstrip("/").rsplit("/", 1)[-1]
    return name in _PLACEHOLDER_NAMES or name == get_settings().placeholder_name


def _clean_path(path: str) -> str:
    return (path or "").strip().strip("/")


class ContentService(IContentService):
    """Content gateway implementation."""

    def __init__(self, client: Optional[GitHubClient] = None):
        self.client = client or get_github_client()
        self.settings = get_settings()

    async def read_file(self, session: GitHubSession, path: str, ref: Optional[str] = None) -> RemoteFile:
        """Read one blob at ``ref`` (branch tip when omitted).

        Images whose inline content GitHub left out (large files) come back
        as a redirect to the raw URL instead of failing to decode.
        """
        path = _clean_path(path)
        if not path:
            raise AmbiguousPath("The repository root is a directory", path="")

        pinned = bool(ref) and ref != session.branch
        try:
            data = await self.client.get_contents(session, path, ref)
        except NotFound as e:
            if pinned:
                raise HistoryUnavailable(
                    f"File history unavailable: {path} does not exist at {ref[:7]}", path=path
                ) from e
            raise

        if isinstance(data, list) or data.get("type") == "dir":
            raise AmbiguousPath(f"{path} is a directory, not a file", path=path)
        if data.get("type", "file") != "file":
            raise AmbiguousPath(f"{path} is a {data['type']}, not a file", path=path)

        return self._to_remote_file(session, path, data, ref if pinned else None)

    def _to_remote_file(
        self, session: GitHubSession, path: str, data: dict, ref: Optional[str]
    ) -> RemoteFile:
        kind = classify(path)
        inline = strip_transport(data.get("content") or "")
        omitted = data.get("encoding") == "none"
        common = {
            "path": path,
            "sha": data["sha"],
            "language": language_for(path),
            "size": data.get("size"),
            "ref": ref,
            "editable": ref is None,
        }

        if omitted or (kind == ContentKind.IMAGE and not inline):
            url = data.get("download_url") or self.client.raw_content_url(session, path, ref)
            logger.info(f"{path} has no inline content, redirecting to raw URL")
            return RemoteFile(kind=kind, source=ContentSource.REDIRECT, content_url=url, **common)

        if kind == ContentKind.IMAGE:
            return RemoteFile(kind=kind, content=inline, data_url=to_image_data_url(inline, path), **common)

        try:
            raw = decode_transport(inline)
        except (binascii.Error, ValueError):
            raw = b""
        if looks_binary(raw):
            return RemoteFile(kind=ContentKind.BINARY, content=inline, **common)

        text = to_display_text(inline)
        if is_decode_failure(text):
            logger.warning(f"{path} is not valid UTF-8, showing placeholder text")
        return RemoteFile(kind=kind, content=inline, text=text, **common)

    async def write_file(
        self,
        session: GitHubSession,
        path: str,
        content: Union[str, bytes],
        expected_sha: Optional[str] = None,
        *,
        kind: Optional[ContentKind] = None,
        branch: Optional[str] = None,
        message: Optional[str] = None,
        content_is_base64: bool = False,
        **kwargs: Any,
    ) -> WriteResult:
        """Create ``path`` (no expected_sha) or update it (expected_sha from the last read)."""
        path = _clean_path(path)
        if not path:
            raise WriteRejected("Path cannot be empty", path="")

        if content_is_base64:
            encoded = strip_transport(content if isinstance(content, str) else content.decode("ascii"))
            try:
                decode_transport(encoded)
            except (binascii.Error, ValueError) as e:
                raise WriteRejected("Content is not valid base64", path=path) from e
        else:
            encoded = to_transport_base64(content)

        kind = kind or classify(path)
        if message is None:
            message = f"Update {path}" if expected_sha else f"Create {path}"

        data = await self.client.put_contents(
            session,
            path,
            content=encoded,
            message=message,
            sha=expected_sha,
            branch=branch or session.branch,
        )

        new_sha = (data.get("content") or {}).get("sha")
        if not new_sha:
            raise WriteRejected("GitHub accepted the write but returned no blob sha", path=path)
        commit_sha = (data.get("commit") or {}).get("sha")

        logger.info(
            f"Wrote {path}",
            extra={"kind": kind.value, "is_new": expected_sha is None, "commit_sha": commit_sha},
        )
        return WriteResult(path=path, sha=new_sha, commit_sha=commit_sha)

    async def create_folder(self, session: GitHubSession, folder_path: str) -> WriteResult:
        """Make a folder appear by writing an empty placeholder blob inside it."""
        folder = _clean_path(folder_path)
        if not folder:
            raise WriteRejected("Folder path cannot be empty", path="")

        placeholder = f"{folder}/{self.settings.placeholder_name}"
        try:
            return await self.write_file(
                session, placeholder, b"", message=f"Create folder: {folder}"
            )
        except VersionConflict as e:
            raise WriteRejected(f"Folder {folder} already exists", path=folder) from e

    async def list_folder_children(self, session: GitHubSession, folder_path: str = "") -> List[FolderChild]:
        """One level of ``folder_path``: directories first, then by name."""
        folder = _clean_path(folder_path)
        try:
            data = await self.client.get_contents(session, folder)
        except NotFound:
            if not folder:
                # GitHub answers 404 for the root of a repository without commits
                return []
            raise

        if isinstance(data, dict):
            raise AmbiguousPath(f"{folder} is a file, not a directory", path=folder)

        children = [
            FolderChild(
                name=item["name"],
                path=item["path"],
                type=EntryType.DIRECTORY if item.get("type") == "dir" else EntryType.FILE,
            )
            for item in data
            if not is_placeholder(item["name"])
        ]
        children.sort(key=lambda c: (c.type != EntryType.DIRECTORY, collation_key(c.name)))
        return children
