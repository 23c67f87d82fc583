import pytest
from httpx import ASGITransport, AsyncClient

from anistream.core.config import Settings
from anistream.db.session import Database
from anistream.main import create_app
from tests.fixtures.app import API
from tests.fixtures.db import TEST_DATABASE_URL


# ─────────────────────────────────────────────────────────────
# Probes
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_healthz_and_readyz(async_client: AsyncClient):
    assert (await async_client.get("/healthz")).json() == {"status": "ok"}
    ready = await async_client.get("/readyz")
    assert ready.status_code == 200
    assert ready.json() == {"status": "ready", "db": "ok"}


@pytest.mark.anyio
async def test_readyz_reports_unreachable_database(test_settings):
    broken = Database("sqlite+aiosqlite:////nonexistent-dir/anistream/readyz.db")
    app = create_app(test_settings, broken)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.get("/readyz")
    await broken.dispose()
    assert resp.status_code == 503
    assert resp.json()["db"] == "down"


# ─────────────────────────────────────────────────────────────
# Middleware
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_request_id_is_echoed_or_minted(async_client: AsyncClient):
    echoed = await async_client.get("/healthz", headers={"X-Request-ID": "abc-123"})
    assert echoed.headers["x-request-id"] == "abc-123"

    minted = await async_client.get("/healthz", headers={"X-Request-ID": "bad id with spaces"})
    assert minted.headers["x-request-id"] != "bad id with spaces"
    assert len(minted.headers["x-request-id"]) == 36


@pytest.mark.anyio
async def test_security_headers(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/genres")
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert resp.headers["x-frame-options"] == "DENY"
    assert "strict-transport-security" not in resp.headers
    assert "server" not in resp.headers


@pytest.mark.anyio
async def test_cors_allows_configured_origin_with_credentials(async_client: AsyncClient):
    resp = await async_client.options(
        f"{API}/animes",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "GET"},
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert resp.headers["access-control-allow-credentials"] == "true"


# ─────────────────────────────────────────────────────────────
# Error envelope
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_unknown_route_uses_message_envelope(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/nope")
    assert resp.status_code == 404
    assert resp.json() == {"message": "Not Found"}


@pytest.mark.anyio
async def test_malformed_json_is_a_validation_error(async_client: AsyncClient):
    resp = await async_client.post(
        f"{API}/login", content=b"{not json", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation failed"


@pytest.mark.anyio
async def test_bad_path_param_is_400(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/animes/not-a-number")
    assert resp.status_code == 400
    assert "anime_id" in resp.json()["error"]


# ─────────────────────────────────────────────────────────────
# Rate limiting
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_default_rate_limit_applies_and_skips_probes(database):
    settings = Settings(
        ENVIRONMENT="test",
        DATABASE_URL=TEST_DATABASE_URL,
        RATE_LIMIT_ENABLED=True,
        RATE_LIMIT_DEFAULT="2/minute",
    )
    app = create_app(settings, database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        codes = [(await client.get(f"{API}/genres")).status_code for _ in range(3)]
        probes = [(await client.get("/healthz")).status_code for _ in range(4)]
        limited = await client.get(f"{API}/genres")

    assert codes == [200, 200, 429]
    assert probes == [200, 200, 200, 200]
    assert limited.json()["message"] == "Too many requests"
