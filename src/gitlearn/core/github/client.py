"""GitHub REST client.

Only the handful of calls the content layer needs: read a path, write a
blob, list a tree. HTTP statuses are translated into the typed failures
in ``core.errors`` here, so services never look at status codes.
"""

import logging
from typing import Any, Optional, Union
from urllib.parse import quote

import httpx

from ...config import get_settings
from ..errors import (
    EmptyRepository,
    NotFound,
    RemoteUnavailable,
    VersionConflict,
    WriteRejected,
)
from ..session import GitHubSession

logger = logging.getLogger(__name__)


def _remote_message(resp: httpx.Response) -> str:
    """GitHub puts a human readable reason in the 'message' field."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.reason_phrase


def _is_rate_limited(resp: httpx.Response) -> bool:
    if resp.status_code == 429:
        return True
    return resp.status_code == 403 and resp.headers.get("x-ratelimit-remaining") == "0"


class GitHubClient:
    """Thin async wrapper around GitHub's REST API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.github_api_url).rstrip("/")
        self.raw_url = settings.github_raw_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.github_timeout_seconds,
            transport=transport,
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": settings.github_api_version,
            },
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def contents_url(session: GitHubSession, path: str) -> str:
        encoded = quote(path.strip("/"), safe="/")
        return f"/repos/{session.login}/{session.repo}/contents/{encoded}".rstrip("/")

    def raw_content_url(self, session: GitHubSession, path: str, ref: Optional[str] = None) -> str:
        """Raw download URL, used when the API omits inline content."""
        encoded = quote(path.strip("/"), safe="/")
        return f"{self.raw_url}/{session.login}/{session.repo}/{ref or session.branch}/{encoded}"

    async def _request(
        self,
        method: str,
        url: str,
        session: GitHubSession,
        *,
        path: Optional[str] = None,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> httpx.Response:
        try:
            resp = await self._client.request(
                method,
                url,
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {session.token}"},
            )
        except httpx.TimeoutException as e:
            logger.warning(f"GitHub {method} {url} timed out: {e}")
            raise RemoteUnavailable("GitHub did not respond in time", path=path) from e
        except httpx.TransportError as e:
            logger.warning(f"GitHub {method} {url} failed: {e}")
            raise RemoteUnavailable(f"Could not reach GitHub: {e}", path=path) from e

        logger.debug(f"GitHub {method} {url} -> {resp.status_code}")
        return resp

    def _read_failure(self, resp: httpx.Response, path: Optional[str]) -> Exception:
        message = _remote_message(resp)
        if resp.status_code == 404:
            return NotFound(message or "Not Found", path=path)
        if _is_rate_limited(resp):
            reset = resp.headers.get("x-ratelimit-reset")
            detail = f"GitHub rate limit exceeded (resets at {reset})" if reset else "GitHub rate limit exceeded"
            return RemoteUnavailable(detail, path=path)
        return RemoteUnavailable(f"GitHub returned {resp.status_code}: {message}", path=path)

    async def get_contents(
        self, session: GitHubSession, path: str, ref: Optional[str] = None
    ) -> Union[dict, list]:
        """GET /repos/{owner}/{repo}/contents/{path}.

        Returns a dict for a file and a list for a directory.
        """
        # always name the branch: GitHub falls back to the repository default otherwise
        params = {"ref": ref or session.branch}
        resp = await self._request("GET", self.contents_url(session, path), session, path=path, params=params)
        if resp.status_code == 200:
            return resp.json()
        error = self._read_failure(resp, path)
        logger.warning(f"Read of {path!r} failed: {error!r}")
        raise error

    async def put_contents(
        self,
        session: GitHubSession,
        path: str,
        *,
        content: str,
        message: str,
        sha: Optional[str] = None,
        branch: Optional[str] = None,
    ) -> dict:
        """PUT /repos/{owner}/{repo}/contents/{path} - create or update one blob.

        ``content`` must already be base64.
        """
        payload: dict[str, Any] = {
            "message": message,
            "content": content,
            "branch": branch or session.branch,
        }
        if sha:
            payload["sha"] = sha

        resp = await self._request("PUT", self.contents_url(session, path), session, path=path, json=payload)
        if resp.status_code in (200, 201):
            return resp.json()

        remote = _remote_message(resp)
        if resp.status_code == 409:
            error: Exception = VersionConflict(
                f"{path} changed on GitHub since it was read: {remote}", path=path
            )
        elif resp.status_code == 422 and "sha" in remote.lower():
            # creating over an existing file, or a malformed sha
            error = VersionConflict(f"{path}: {remote}", path=path)
        elif resp.status_code == 401 or _is_rate_limited(resp):
            error = RemoteUnavailable(f"GitHub refused the credentials or rate limited: {remote}", path=path)
        else:
            error = WriteRejected(remote, path=path)

        logger.warning(f"Write of {path!r} failed: {error!r}")
        raise error

    async def get_tree(self, session: GitHubSession, ref: Optional[str] = None) -> dict:
        """GET /repos/{owner}/{repo}/git/trees/{ref}?recursive=true."""
        ref = ref or session.branch
        url = f"/repos/{session.login}/{session.repo}/git/trees/{quote(ref, safe='')}"
        resp = await self._request("GET", url, session, params={"recursive": "true"})
        if resp.status_code == 200:
            return resp.json()
        if resp.status_code == 409:
            # "Git Repository is empty."
            raise EmptyRepository(_remote_message(resp))

        error = self._read_failure(resp, None)
        # an unknown repo or ref is an unusable remote, not a missing file
        if isinstance(error, NotFound):
            error = RemoteUnavailable(
                f"Repository {session.login}/{session.repo} or ref {ref!r} not found"
            )
        logger.warning(f"Tree listing of {session.repo}@{ref} failed: {error!r}")
        raise error

    async def ping(self, session: Optional[GitHubSession] = None) -> int:
        """Hit the API root; returns the HTTP status."""
        headers = {"Authorization": f"Bearer {session.token}"} if session else None
        try:
            resp = await self._client.get("/", headers=headers)
        except httpx.HTTPError as e:
            raise RemoteUnavailable(f"Could not reach GitHub: {e}") from e
        return resp.status_code


# Singleton instance
_github_client: Optional[GitHubClient] = None


def get_github_client() -> GitHubClient:
    """Get GitHub client singleton."""
    global _github_client
    if _github_client is None:
        _github_client = GitHubClient()
    return _github_client


async def close_github_client() -> None:
    """Close and forget the singleton."""
    global _github_client
    if _github_client is not None:
        await _github_client.aclose()
        _github_client = None
