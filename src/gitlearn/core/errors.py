"""
Typed failures of the GitHub-backed content layer.

Every content operation either returns a result or raises one of these.
The HTTP layer turns them into ``ErrorResponse`` bodies; nothing here is
retried automatically.
"""

from typing import Optional


class ContentError(Exception):
    """Base class for content-layer failures."""

    status_code = 500

    def __init__(self, detail: str, path: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.path = path

    @property
    def error(self) -> str:
        return type(self).__name__

    def __repr__(self) -> str:
        return f"<{self.error}(path={self.path!r}, detail={self.detail!r})>"


class RemoteUnavailable(ContentError):
    """Network, credential or rate-limit failure. The user may re-trigger the action."""

    status_code = 503


class NotFound(ContentError):
    """Path or ref does not exist."""

    status_code = 404


class HistoryUnavailable(NotFound):
    """A pinned version was requested for a path that no longer exists at that ref."""


class AmbiguousPath(ContentError):
    """Path names a directory where a blob was expected (or the reverse)."""

    status_code = 400


class VersionConflict(ContentError):
    """The expected sha no longer matches the remote. Re-read before retrying."""

    status_code = 409


class WriteRejected(ContentError):
    """Permissions, quota or malformed content. Terminal for this attempt."""

    status_code = 422


class EmptyRepository(ContentError):
    """The repository has no commits or no blobs. Callers treat this as an empty listing."""

    status_code = 200


class DecodeFailure(ContentError):
    """Content could not be interpreted as text."""

    status_code = 422


class InvalidCommand(ContentError):
    """A record command is missing the fields its kind requires."""

    status_code = 422
