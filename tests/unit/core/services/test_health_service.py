import pytest
from sqlalchemy.exc import OperationalError

from gitlearn.core.errors import RemoteUnavailable
from gitlearn.core.services.health_service import HealthService


class FakeScalarResult:
    def __init__(self, scalar_value):
        self._scalar_value = scalar_value
    def scalar(self):
        return self._scalar_value


class FakeSession:
    def __init__(self, ok=True):
        self.ok = ok
        self.executed = []
    async def execute(self, stmt):
        self.executed.append(stmt)
        if self.ok:
            return FakeScalarResult(1)
        raise OperationalError("SELECT 1", {}, Exception("db down"))


class DummyGitHub:
    def __init__(self, status=200, reachable=True):
        self.status = status
        self.reachable = reachable
        self.pings = 0
    async def ping(self, session=None):
        self.pings += 1
        if not self.reachable:
            raise RemoteUnavailable("Could not reach GitHub")
        return self.status


@pytest.mark.asyncio
async def test_get_health_status_all_ok():
    svc = HealthService(FakeSession(ok=True), client=DummyGitHub())

    resp = await svc.get_health_status()
    assert resp.status == "healthy"
    assert resp.checks["database"]["connected"] is True
    assert resp.checks["github"]["connected"] is True
    assert resp.version == "1.0.0"


@pytest.mark.asyncio
async def test_get_health_status_db_down():
    svc = HealthService(FakeSession(ok=False), client=DummyGitHub())

    resp = await svc.get_health_status()
    assert resp.status == "unhealthy"
    assert resp.checks["database"]["connected"] is False
    assert "db down" in resp.checks["database"]["error"]


@pytest.mark.asyncio
async def test_get_health_status_github_unreachable_is_degraded():
    github = DummyGitHub(reachable=False)
    svc = HealthService(FakeSession(ok=True), client=github)

    resp = await svc.get_health_status()
    assert resp.status == "degraded"
    assert resp.checks["github"]["error"] == "Could not reach GitHub"
    assert github.pings == 1


@pytest.mark.asyncio
async def test_github_5xx_is_unhealthy():
    svc = HealthService(FakeSession(ok=True), client=DummyGitHub(status=503))
    result = await svc.check_github_health()
    assert result["connected"] is False
    assert result["http_status"] == 503


@pytest.mark.asyncio
async def test_check_database_health_measures_time():
    session = FakeSession(ok=True)
    svc = HealthService(session, client=DummyGitHub())
    result = await svc.check_database_health()
    assert result["status"] == "healthy"
    assert result["response_time_ms"] >= 0
    assert len(session.executed) == 1
