import pytest
from httpx import ASGITransport, AsyncClient
from slowapi import Limiter
from starlette.requests import Request

from anistream.core import limiter as limiter_module
from anistream.core.config import Settings
from anistream.core.limiter import get_rate_limit_key, should_exempt_request
from anistream.main import create_app
from tests.fixtures.app import API
from tests.fixtures.db import TEST_DATABASE_URL


def _request(path: str = "/api/genres", *, headers=(), client_host: str = "127.0.0.1", state=None) -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": path,
            "query_string": b"",
            "headers": [(k.lower().encode(), v.encode()) for k, v in headers],
            "client": (client_host, 50000),
            "state": state or {},
        }
    )


def _limited_settings(**overrides) -> Settings:
    return Settings(DATABASE_URL=TEST_DATABASE_URL, RATE_LIMIT_ENABLED=True, **overrides)


# ─────────────────────────────────────────────────────────────
# Startup
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_app_starts_with_rate_limiting_on(database):
    app = create_app(_limited_settings(ENVIRONMENT="production"), database)
    assert isinstance(app.state.limiter, Limiter)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.get(f"{API}/genres")
    assert resp.status_code == 200


@pytest.mark.anyio
async def test_disabled_limiter_is_not_installed(database):
    app = create_app(Settings(DATABASE_URL=TEST_DATABASE_URL, RATE_LIMIT_ENABLED=False), database)
    assert not hasattr(app.state, "limiter")


# ─────────────────────────────────────────────────────────────
# Keying
# ─────────────────────────────────────────────────────────────
def test_key_prefers_first_forwarded_hop():
    req = _request(headers=[("X-Forwarded-For", "203.0.113.7, 10.0.0.1"), ("X-Real-IP", "198.51.100.2")])
    assert get_rate_limit_key(req) == "ip:203.0.113.7"


def test_key_falls_back_to_real_ip_then_peer():
    assert get_rate_limit_key(_request(headers=[("X-Real-IP", "198.51.100.2")])) == "ip:198.51.100.2"
    assert get_rate_limit_key(_request(client_host="192.0.2.10")) == "ip:192.0.2.10"


def test_key_ignores_identity_on_request_state():
    req = _request(client_host="192.0.2.10", state={"user_id": 42})
    assert get_rate_limit_key(req) == "ip:192.0.2.10"


@pytest.mark.anyio
async def test_buckets_are_per_client_ip(database):
    app = create_app(_limited_settings(ENVIRONMENT="test", RATE_LIMIT_DEFAULT="1/minute"), database)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        first = await client.get(f"{API}/genres", headers={"X-Forwarded-For": "203.0.113.1"})
        second = await client.get(f"{API}/genres", headers={"X-Forwarded-For": "203.0.113.1"})
        other = await client.get(f"{API}/genres", headers={"X-Forwarded-For": "203.0.113.2"})

    assert [first.status_code, second.status_code, other.status_code] == [200, 429, 200]


# ─────────────────────────────────────────────────────────────
# Exemptions
# ─────────────────────────────────────────────────────────────
@pytest.mark.parametrize("path", ["/healthz", "/readyz", "/docs", "/docs/oauth2-redirect", "/openapi.json"])
def test_operational_paths_are_exempt(path):
    assert should_exempt_request(_request(path)) is True


def test_api_paths_are_not_exempt():
    assert should_exempt_request(_request(f"{API}/animes")) is False


@pytest.mark.anyio
async def test_trusted_ips_bypass_limits(database, monkeypatch):
    monkeypatch.setattr(limiter_module, "TRUSTED_IPS", {"10.0.0.9"})
    app = create_app(_limited_settings(ENVIRONMENT="test", RATE_LIMIT_DEFAULT="1/minute"), database)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        trusted = [
            (await client.get(f"{API}/genres", headers={"X-Forwarded-For": "10.0.0.9"})).status_code
            for _ in range(3)
        ]
        untrusted = [
            (await client.get(f"{API}/genres", headers={"X-Forwarded-For": "10.0.0.10"})).status_code
            for _ in range(2)
        ]

    assert trusted == [200, 200, 200]
    assert untrusted == [200, 429]
