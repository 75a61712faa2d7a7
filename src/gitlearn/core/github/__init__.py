"""Async GitHub REST client for the Contents and Git-Trees endpoints."""

from .client import GitHubClient, close_github_client, get_github_client

__all__ = ["GitHubClient", "get_github_client", "close_github_client"]
