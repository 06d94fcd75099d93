import uuid
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app.api import deps
from app.models import Role
from app.services import roles
from app.services.roles import RoleCreationError
from app.utils.jwt_manager import create_access_token


@pytest.mark.asyncio
async def test_first_user_becomes_admin(db_session):
    role = await roles.resolve_user_role(db_session, uuid.uuid4(), "first@example.com")
    assert role == Role.ADMIN


@pytest.mark.asyncio
async def test_later_users_get_default_roles(db_session):
    await roles.resolve_user_role(db_session, uuid.uuid4(), "first@example.com")

    assert await roles.resolve_user_role(db_session, uuid.uuid4(), "carol@example.com") == Role.CUSTOMER
    assert await roles.resolve_user_role(db_session, uuid.uuid4(), "dave@autocrm.com") == Role.STAFF


@pytest.mark.asyncio
async def test_elevated_requested_role_is_not_granted(db_session):
    await roles.resolve_user_role(db_session, uuid.uuid4(), "first@example.com")

    role = await roles.resolve_user_role(
        db_session, uuid.uuid4(), "mallory@example.com", requested_role="admin"
    )
    assert role == Role.CUSTOMER


@pytest.mark.asyncio
async def test_existing_role_is_kept(db_session):
    user_id = uuid.uuid4()
    await roles.resolve_user_role(db_session, uuid.uuid4(), "first@example.com")
    await roles.create_user_role(db_session, user_id, "erin@example.com", Role.STAFF)

    assert await roles.resolve_user_role(db_session, user_id, "erin@example.com") == Role.STAFF
    assert await roles.count_user_roles(db_session) == 2


def test_default_role_for_unknown_requested_role():
    assert roles.default_role_for("x@example.com", "superuser") == Role.CUSTOMER
    assert roles.default_role_for("x@AutoCRM.com") == Role.STAFF


class FailingSession:
    """Session double whose commits always fail."""

    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    def add(self, _):
        pass

    async def commit(self):
        self.commits += 1
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    async def rollback(self):
        self.rollbacks += 1

    async def scalar(self, _):
        return None


@pytest.mark.asyncio
async def test_role_creation_gives_up_after_three_attempts():
    db = FailingSession()

    with pytest.raises(RoleCreationError):
        await roles.create_user_role(
            db, uuid.uuid4(), "x@example.com", Role.CUSTOMER, retry_delay=0
        )

    assert db.commits == 3
    assert db.rollbacks == 3


@pytest.mark.asyncio
async def test_user_without_role_is_restricted(client, admin, monkeypatch):
    async def fail(*args, **kwargs):
        raise RoleCreationError("boom")

    monkeypatch.setattr(deps, "resolve_user_role", fail)
    token = create_access_token(uuid.uuid4(), "late@example.com")
    headers = {"Authorization": f"Bearer {token}"}

    me = await client.get("/api/v1/users/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["role"] is None

    tickets = await client.get("/api/v1/tickets", headers=headers)
    assert tickets.status_code == 403


@pytest.mark.asyncio
async def test_new_user_gets_role_on_first_request(client, admin, db_session):
    user_id = uuid.uuid4()
    token = create_access_token(user_id, "newbie@example.com", requested_role="customer")

    response = await client.get(
        "/api/v1/users/me", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 200
    assert response.json()["role"] == "customer"
    assert response.json()["is_staff_or_admin"] is False
    assert (await roles.get_user_role(db_session, user_id)).role == Role.CUSTOMER


@pytest.mark.asyncio
async def test_expired_and_invalid_tokens_are_rejected(client, admin):
    expired = create_access_token(
        admin.user_id, admin.email, expires_in=timedelta(seconds=-10)
    )
    response = await client.get(
        "/api/v1/users/me", headers={"Authorization": f"Bearer {expired}"}
    )
    assert response.status_code == 401

    response = await client.get(
        "/api/v1/users/me", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401

    response = await client.get("/api/v1/users/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_signup_check(client):
    response = await client.post("/api/v1/users/signup-check", json={"role": "admin"})
    assert response.json() == {"allowed": True, "first_user": True}


@pytest.mark.asyncio
async def test_signup_check_after_first_user(client, admin):
    staff = await client.post("/api/v1/users/signup-check", json={"role": "staff"})
    assert staff.json() == {"allowed": False, "first_user": False}

    customer = await client.post("/api/v1/users/signup-check", json={})
    assert customer.json() == {"allowed": True, "first_user": False}
