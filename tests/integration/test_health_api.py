"""Health endpoints with SQLite and the in-memory remote."""


async def test_overall_health(async_client):
    body = (await async_client.get("/api/health/")).json()

    assert body["status"] == "healthy"
    assert body["checks"]["database"]["connected"] is True
    assert body["checks"]["github"]["http_status"] == 200


async def test_degraded_when_github_fails(async_client, fake_github):
    fake_github.fail_with = 503

    body = (await async_client.get("/api/health/")).json()

    assert body["status"] == "degraded"
    assert body["checks"]["github"]["connected"] is False


async def test_component_endpoints(async_client):
    assert (await async_client.get("/api/health/database")).json()["status"] == "healthy"
    assert (await async_client.get("/api/health/github")).json()["status"] == "healthy"


async def test_unprefixed_health(async_client):
    response = await async_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
