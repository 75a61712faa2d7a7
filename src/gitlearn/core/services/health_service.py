"""Health service implementation."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ... import __version__
from ...config import get_settings
from ..errors import RemoteUnavailable
from ..github import GitHubClient, get_github_client
from ..schemas.common import HealthCheckResponse
from .interfaces import IHealthService


class HealthService(IHealthService):
    """Health check service implementation."""

    def __init__(self, session: AsyncSession, client: Optional[GitHubClient] = None):
        self.session = session
        self.client = client or get_github_client()
        self.settings = get_settings()

    async def get_health_status(self) -> HealthCheckResponse:
        """Get app health status."""
        db_health = await self.check_database_health()
        github_health = await self.check_github_health()

        overall_status = "healthy"
        if not db_health["connected"]:
            overall_status = "unhealthy"
        elif not github_health["connected"]:
            # records still work, repository content does not
            overall_status = "degraded"

        return HealthCheckResponse(
            status=overall_status,
            timestamp=datetime.now(timezone.utc),
            version=__version__,
            checks={"database": db_health, "github": github_health},
        )

    async def check_database_health(self) -> Dict[str, Any]:
        """Check DB connection."""
        try:
            start_time = asyncio.get_running_loop().time()
            result = await self.session.execute(text("SELECT 1"))
            result.scalar()
            response_time = (asyncio.get_running_loop().time() - start_time) * 1000

            return {
                "connected": True,
                "status": "healthy",
                "response_time_ms": round(response_time, 2),
            }
        except SQLAlchemyError as e:
            return {
                "connected": False,
                "status": "unhealthy",
                "error": str(e),
                "response_time_ms": 0.0,
            }

    async def check_github_health(self) -> Dict[str, Any]:
        """Check GitHub answers on the API root (unauthenticated)."""
        try:
            start_time = asyncio.get_running_loop().time()
            status_code = await self.client.ping()
            response_time = (asyncio.get_running_loop().time() - start_time) * 1000
        except RemoteUnavailable as e:
            return {
                "connected": False,
                "status": "unhealthy",
                "error": e.detail,
                "response_time_ms": None,
            }

        healthy = status_code < 500
        return {
            "connected": healthy,
            "status": "healthy" if healthy else "unhealthy",
            "http_status": status_code,
            "api_url": self.settings.github_api_url,
            "response_time_ms": round(response_time, 2),
        }
