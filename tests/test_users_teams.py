import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from supabase import AuthApiError

from app.models import Role
from app.services import roles
from app.services import users as user_service


@pytest.fixture
def supabase_mock(monkeypatch):
    """Supabase admin client whose auth.admin.create_user is mocked."""
    client = MagicMock()
    client.auth.admin.create_user = AsyncMock()

    async def fake_admin():
        return client

    monkeypatch.setattr(user_service, "supabase_admin", fake_admin)
    return client


@pytest.mark.asyncio
async def test_list_users_requires_staff(client, staff, customer):
    listed = await client.get("/api/v1/users", headers=staff.headers)
    assert listed.status_code == 200
    assert {u["email"] for u in listed.json()} == {"admin@autocrm.com", staff.email, customer.email}

    assert (await client.get("/api/v1/users", headers=customer.headers)).status_code == 403


@pytest.mark.asyncio
async def test_admin_changes_role(client, admin, customer, db_session):
    response = await client.patch(
        f"/api/v1/users/{customer.user_id}/role", json={"role": "staff"}, headers=admin.headers
    )
    assert response.status_code == 200
    assert response.json()["role"] == "staff"

    row = await roles.get_user_role(db_session, customer.user_id)
    await db_session.refresh(row)
    assert row.role == Role.STAFF


@pytest.mark.asyncio
async def test_role_change_requires_admin(client, staff, customer):
    response = await client.patch(
        f"/api/v1/users/{customer.user_id}/role", json={"role": "admin"}, headers=staff.headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_role_change_for_unknown_user(client, admin):
    response = await client.patch(
        f"/api/v1/users/{uuid.uuid4()}/role", json={"role": "staff"}, headers=admin.headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_create_staff_account(client, admin, supabase_mock):
    new_id = uuid.uuid4()
    supabase_mock.auth.admin.create_user.return_value = SimpleNamespace(
        user=SimpleNamespace(id=str(new_id))
    )

    response = await client.post(
        "/api/v1/users/staff", json={"email": "New.Agent@autocrm.com"}, headers=admin.headers
    )

    assert response.status_code == 201
    body = response.json()
    assert body["user_id"] == str(new_id)
    assert body["email"] == "new.agent@autocrm.com"
    assert body["role"] == "staff"
    assert len(body["temporary_password"]) >= 16

    attributes = supabase_mock.auth.admin.create_user.await_args.args[0]
    assert attributes["email_confirm"] is True
    assert attributes["password"] == body["temporary_password"]


@pytest.mark.asyncio
async def test_create_staff_account_rejected_by_platform(client, admin, supabase_mock):
    supabase_mock.auth.admin.create_user.side_effect = AuthApiError(
        "User already registered", 422, "email_exists"
    )

    response = await client.post(
        "/api/v1/users/staff", json={"email": "dup@autocrm.com"}, headers=admin.headers
    )
    assert response.status_code == 502


@pytest.mark.asyncio
async def test_create_staff_account_for_known_email(client, admin, customer, supabase_mock):
    response = await client.post(
        "/api/v1/users/staff", json={"email": customer.email}, headers=admin.headers
    )
    assert response.status_code == 409
    supabase_mock.auth.admin.create_user.assert_not_awaited()


@pytest.mark.asyncio
async def test_team_lifecycle(client, admin, staff):
    created = await client.post(
        "/api/v1/teams",
        json={"name": "  Tier   One ", "description": "First line"},
        headers=admin.headers,
    )
    assert created.status_code == 201
    team = created.json()
    assert team["name"] == "Tier One"

    duplicate = await client.post("/api/v1/teams", json={"name": "Tier One"}, headers=admin.headers)
    assert duplicate.status_code == 409

    assigned = await client.patch(
        f"/api/v1/users/{staff.user_id}/role", json={"team_id": team["id"]}, headers=admin.headers
    )
    assert assigned.json()["team_id"] == team["id"]

    listed = await client.get("/api/v1/teams", headers=staff.headers)
    assert [t["name"] for t in listed.json()] == ["Tier One"]

    deleted = await client.delete(f"/api/v1/teams/{team['id']}", headers=admin.headers)
    assert deleted.status_code == 204

    users = await client.get("/api/v1/users", headers=admin.headers)
    member = next(u for u in users.json() if u["user_id"] == str(staff.user_id))
    assert member["team_id"] is None


@pytest.mark.asyncio
async def test_blank_team_name_is_rejected(client, admin):
    response = await client.post("/api/v1/teams", json={"name": "   "}, headers=admin.headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_team_changes_require_admin(client, staff):
    response = await client.post("/api/v1/teams", json={"name": "Rogue"}, headers=staff.headers)
    assert response.status_code == 403
