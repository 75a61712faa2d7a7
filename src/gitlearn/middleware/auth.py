"""GitHub session authentication.

The OAuth exchange happens elsewhere; requests arrive with the GitHub
token as a bearer credential plus the login it belongs to and the
record-backend user id.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.session import GitHubSession

LOGIN_HEADER = "X-GitHub-Login"
OWNER_HEADER = "X-Owner-Id"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


class GitHubBearer(HTTPBearer):
    """Bearer token plus identity headers -> GitHubSession."""

    def __init__(self):
        super(GitHubBearer, self).__init__(auto_error=False)

    async def __call__(self, request: Request) -> GitHubSession:
        credentials: Optional[HTTPAuthorizationCredentials] = await super().__call__(request)
        if not credentials or not credentials.credentials:
            raise _unauthorized("Missing GitHub access token")
        if credentials.scheme.lower() != "bearer":
            raise _unauthorized("Invalid authentication scheme")

        login = (request.headers.get(LOGIN_HEADER) or "").strip()
        if not login:
            raise _unauthorized(f"Missing {LOGIN_HEADER} header")

        owner_header = request.headers.get(OWNER_HEADER)
        owner_id = None
        if owner_header is not None:
            try:
                owner_id = int(owner_header)
            except ValueError:
                raise _unauthorized(f"Invalid {OWNER_HEADER} header")

        return GitHubSession.for_login(credentials.credentials, login, owner_id=owner_id)


github_bearer = GitHubBearer()


# Dependency for getting the GitHub session of the current request
async def get_github_session(session: GitHubSession = Depends(github_bearer)) -> GitHubSession:
    """Get current GitHub session."""
    return session


async def get_record_session(session: GitHubSession = Depends(github_bearer)) -> GitHubSession:
    """GitHub session that must also carry a record owner."""
    if session.owner_id is None:
        raise _unauthorized(f"Missing {OWNER_HEADER} header")
    return session
