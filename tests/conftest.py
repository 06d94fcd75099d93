"""
Test configuration and fixtures.

Provides:
- An in-memory SQLite database shared by the app and the test (one per test)
- Access-token minting for customer, staff and admin users
- HTTPX AsyncClient bound to the FastAPI app
"""

import os
import sys
import uuid
from dataclasses import dataclass
from pathlib import Path

# Bootstrap to ensure tests can import app modules without modifying app import paths.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read at import time.
os.environ.update(
    {
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
        "REDIS_URL": "redis://localhost:6379/0",
        "SUPABASE_URL": "https://project.supabase.co",
        "SUPABASE_ANON_KEY": "anon-key",
        "SUPABASE_SERVICE_KEY": "service-key",
        "SUPABASE_JWT_SECRET": "test-jwt-secret-with-enough-length-for-hs256",
        "GOOGLE_API_KEY": "test-google-key",
        "RESEND_API_KEY": "re_test_key",
        "STAFF_EMAIL_DOMAIN": "autocrm.com",
        "ROLE_CREATE_RETRY_DELAY": "0",
    }
)

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config.db import get_db_session
from app.main import app
from app.models import Base, Role, UserRole
from app.services.view_settings import InMemoryViewSettingsStore, get_view_settings_store
from app.utils.jwt_manager import create_access_token


def pytest_configure(config):
    config.pluginmanager.unregister(name="anyio")


@pytest_asyncio.fixture(scope="function")
async def engine():
    """Provides a fresh in-memory database with all tables created."""
    db_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory):
    """Provides a session for arranging and inspecting data directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture(scope="function")
def view_settings_store():
    return InMemoryViewSettingsStore()


@pytest_asyncio.fixture(scope="function")
async def client(session_factory, view_settings_store):
    async def override_get_db_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_view_settings_store] = lambda: view_settings_store
    # No lifespan: the startup checks would reach out to Redis and Supabase.
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@dataclass
class TestUser:
    """A user with a stored role and a valid access token."""

    __test__ = False

    user_id: uuid.UUID
    email: str
    role: Role
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


async def _make_user(db_session: AsyncSession, email: str, role: Role) -> TestUser:
    user_id = uuid.uuid4()
    db_session.add(UserRole(user_id=user_id, email=email, role=role))
    await db_session.commit()
    return TestUser(user_id, email, role, create_access_token(user_id, email))


@pytest_asyncio.fixture(scope="function")
async def admin(db_session) -> TestUser:
    return await _make_user(db_session, "admin@autocrm.com", Role.ADMIN)


@pytest_asyncio.fixture(scope="function")
async def staff(db_session, admin) -> TestUser:
    return await _make_user(db_session, "agent@autocrm.com", Role.STAFF)


@pytest_asyncio.fixture(scope="function")
async def customer(db_session, admin) -> TestUser:
    return await _make_user(db_session, "alice@example.com", Role.CUSTOMER)


@pytest_asyncio.fixture(scope="function")
async def other_customer(db_session, admin) -> TestUser:
    return await _make_user(db_session, "bob@example.com", Role.CUSTOMER)


@pytest.fixture
def make_ticket(client):
    """Creates a ticket through the API as the given user."""

    async def _make(user: TestUser, **fields):
        payload = {"title": "Printer on fire", "description": "<p>Help</p>"}
        payload.update(fields)
        response = await client.post("/api/v1/tickets", json=payload, headers=user.headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
