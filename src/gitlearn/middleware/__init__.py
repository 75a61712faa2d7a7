"""Middleware for authentication and other cross-cutting concerns."""

from .auth import GitHubBearer, get_github_session, get_record_session

__all__ = ["get_github_session", "get_record_session", "GitHubBearer"]
