import pytest
from sqlalchemy import func, select

from anistream.db.models import User, UserSession
from tests.fixtures.app import API
from tests.fixtures.users import DEFAULT_PASSWORD


@pytest.mark.anyio
async def test_list_users_hides_passwords(admin_client, create_user):
    client, admin = admin_client
    await create_user("member")
    resp = await client.get(f"{API}/users")
    assert resp.status_code == 200
    users = resp.json()
    assert {u["username"] for u in users} == {"boss", "member"}
    assert all("password" not in u for u in users)
    assert resp.headers["cache-control"] == "no-store"


@pytest.mark.anyio
async def test_promote_and_block(admin_client, signed_in, database):
    admin, _ = admin_client
    member, member_user = await signed_in("member")

    promoted = await admin.patch(f"{API}/users/{member_user.id}", json={"role": "Manager"})
    assert promoted.status_code == 200
    assert promoted.json()["role"] == "Manager"

    blocked = await admin.patch(f"{API}/users/{member_user.id}", json={"status": "Blocked"})
    assert blocked.status_code == 200
    assert blocked.json()["status"] == "Blocked"

    async with database.session() as s:
        sessions = await s.scalar(
            select(func.count()).select_from(UserSession).where(UserSession.user_id == member_user.id)
        )
    assert sessions == 0
    assert (await member.get(f"{API}/user")).status_code == 401

    again = await member.post(f"{API}/login", json={"username": "member", "password": DEFAULT_PASSWORD})
    assert again.status_code == 403


@pytest.mark.anyio
async def test_patch_validation_and_missing(admin_client):
    client, _ = admin_client
    bad = await client.patch(f"{API}/users/1", json={"role": "Overlord"})
    assert bad.status_code == 400
    assert "role" in bad.json()["error"]
    assert (await client.patch(f"{API}/users/99999", json={"role": "User"})).status_code == 404


@pytest.mark.anyio
async def test_delete_user(admin_client, create_user, database):
    client, admin = admin_client
    member = await create_user("member")

    assert (await client.delete(f"{API}/users/{member.id}")).status_code == 204
    assert (await client.delete(f"{API}/users/{member.id}")).status_code == 404
    async with database.session() as s:
        assert await s.get(User, member.id) is None


@pytest.mark.anyio
async def test_admin_cannot_delete_self(admin_client):
    client, admin = admin_client
    resp = await client.delete(f"{API}/users/{admin.id}")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot delete your own account"


@pytest.mark.anyio
async def test_user_sessions_list_and_revoke(admin_client, signed_in):
    admin, admin_user = admin_client
    member, member_user = await signed_in("member")

    own = (await admin.get(f"{API}/user-sessions")).json()
    assert [s["userId"] for s in own] == [admin_user.id]

    theirs = (await admin.get(f"{API}/user-sessions", params={"userId": str(member_user.id)})).json()
    assert len(theirs) == 1
    assert "tokenHash" not in theirs[0]

    assert (await admin.delete(f"{API}/user-sessions/{theirs[0]['id']}")).status_code == 204
    assert (await admin.delete(f"{API}/user-sessions/{theirs[0]['id']}")).status_code == 404
    assert (await member.get(f"{API}/user")).status_code == 401
