"""Explicit session context passed into every core operation."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config import get_settings


def derive_repo_name(login: str, prefix: Optional[str] = None) -> str:
    """Repository name for a login: '<prefix>-<login>'."""
    prefix = prefix if prefix is not None else get_settings().repo_prefix
    return f"{prefix}-{login}"


class GitHubSession(BaseModel):
    """Credential plus the identity and repository it operates on."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(min_length=1, description="GitHub access token", repr=False)
    login: str = Field(min_length=1, description="Authenticated GitHub login")
    repo: str = Field(min_length=1, description="Repository name under the login")
    branch: str = Field(default="main", description="Branch all reads and writes target")
    owner_id: Optional[int] = Field(default=None, description="Record-backend user id")

    @classmethod
    def for_login(
        cls,
        token: str,
        login: str,
        owner_id: Optional[int] = None,
        branch: Optional[str] = None,
    ) -> "GitHubSession":
        """Build a session with the derived repository name and configured branch."""
        settings = get_settings()
        return cls(
            token=token,
            login=login,
            repo=derive_repo_name(login, settings.repo_prefix),
            branch=branch or settings.default_branch,
            owner_id=owner_id,
        )
