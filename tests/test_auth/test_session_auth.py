import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from anistream.core.security import hash_session_token
from anistream.db.models import User, UserSession
from anistream.schemas.enums import UserStatus
from tests.fixtures.app import API
from tests.fixtures.users import DEFAULT_PASSWORD


def register_body(username="newbie", email="newbie@example.com", password="secret123", confirm=None) -> dict:
    return {
        "username": username,
        "email": email,
        "password": password,
        "confirmPassword": password if confirm is None else confirm,
    }


# ─────────────────────────────────────────────────────────────
# /register
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_register_creates_user_and_session(async_client: AsyncClient, database):
    resp = await async_client.post(f"{API}/register", json=register_body())
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["username"] == "newbie"
    assert body["role"] == "User"
    assert body["status"] == "Active"
    assert "password" not in body
    assert "sid" in resp.cookies

    me = await async_client.get(f"{API}/user")
    assert me.status_code == 200
    assert me.json()["id"] == body["id"]

    async with database.session() as s:
        stored = await s.scalar(select(User.password).where(User.id == body["id"]))
    assert stored != "secret123"
    assert "." in stored


@pytest.mark.anyio
async def test_register_duplicate_username_and_email(async_client: AsyncClient, create_user):
    await create_user("taken", email="taken@example.com")

    resp = await async_client.post(f"{API}/register", json=register_body(username="taken", email="other@example.com"))
    assert resp.status_code == 400
    assert resp.json()["message"] == "Username already exists"

    resp = await async_client.post(f"{API}/register", json=register_body(username="fresh", email="taken@example.com"))
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email already exists"


@pytest.mark.anyio
async def test_register_validation_errors_are_field_level(async_client: AsyncClient):
    resp = await async_client.post(
        f"{API}/register", json=register_body(username="ab", email="not-an-email", password="123")
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation failed"
    assert "username" in body["error"]
    assert "email" in body["error"]
    assert body["error"]["password"] == ["Password must be at least 6 characters"]


@pytest.mark.anyio
async def test_register_password_mismatch(async_client: AsyncClient):
    resp = await async_client.post(f"{API}/register", json=register_body(confirm="different1"))
    assert resp.status_code == 400
    assert "Passwords don't match" in str(resp.json()["error"])


# ─────────────────────────────────────────────────────────────
# /login, /logout, /user
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_login_success_sets_cookie_and_stores_hashed_token(async_client: AsyncClient, create_user, database):
    user = await create_user("viewer")
    resp = await async_client.post(
        f"{API}/login",
        json={"username": "viewer", "password": DEFAULT_PASSWORD},
        headers={"User-Agent": "pytest-browser"},
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["username"] == "viewer"
    assert resp.headers["cache-control"].startswith("no-store")
    token = resp.cookies["sid"]

    async with database.session() as s:
        row = await s.scalar(select(UserSession).where(UserSession.user_id == user.id))
    assert row.token_hash == hash_session_token(token)
    assert row.token_hash != token
    assert row.device_info == "pytest-browser"


@pytest.mark.anyio
@pytest.mark.parametrize("username, password", [("viewer", "wrong-pass"), ("ghost", DEFAULT_PASSWORD)])
async def test_login_failures_share_one_message(async_client: AsyncClient, create_user, username, password):
    await create_user("viewer")
    resp = await async_client.post(f"{API}/login", json={"username": username, "password": password})
    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid username or password"}
    assert "sid" not in resp.cookies


@pytest.mark.anyio
async def test_blocked_user_cannot_log_in(async_client: AsyncClient, create_user):
    await create_user("banned", status=UserStatus.BLOCKED)
    resp = await async_client.post(f"{API}/login", json={"username": "banned", "password": DEFAULT_PASSWORD})
    assert resp.status_code == 403
    assert resp.json()["message"] == "Account is blocked"


@pytest.mark.anyio
async def test_remember_me_uses_long_ttl(async_client: AsyncClient, create_user, test_settings):
    await create_user("viewer")
    resp = await async_client.post(
        f"{API}/login", json={"username": "viewer", "password": DEFAULT_PASSWORD, "rememberMe": True}
    )
    assert resp.status_code == 200
    cookie = resp.headers["set-cookie"].lower()
    assert f"max-age={test_settings.SESSION_REMEMBER_TTL_SECONDS}" in cookie
    assert "httponly" in cookie


@pytest.mark.anyio
async def test_current_user_requires_session(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/user")
    assert resp.status_code == 401
    assert resp.json() == {"message": "Unauthorized"}


@pytest.mark.anyio
async def test_forged_cookie_is_unauthenticated(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/user", headers={"Cookie": "sid=not-a-real-token"})
    assert resp.status_code == 401


@pytest.mark.anyio
async def test_logout_deletes_server_session(user_client, database):
    client, user = user_client
    resp = await client.post(f"{API}/logout")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Logged out"}

    async with database.session() as s:
        count = await s.scalar(select(func.count()).select_from(UserSession).where(UserSession.user_id == user.id))
    assert count == 0
    assert (await client.get(f"{API}/user")).status_code == 401


@pytest.mark.anyio
async def test_logout_without_session_is_harmless(async_client: AsyncClient):
    resp = await async_client.post(f"{API}/logout")
    assert resp.status_code == 200
