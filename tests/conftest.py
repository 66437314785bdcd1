"""
ResourcePulse Backend - Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the whole suite.
How:   The environment is pointed at a throwaway SQLite file *before* any
       resource_pulse import, so the module-level engine that routes,
       the audit middleware and /health all use is the test engine.
       Every test gets freshly created tables.

Fixture Hierarchy:
    Function-scoped:
    ├── db_engine: creates/drops all tables, seeds default settings
    ├── db_session: an AsyncSession on the test database
    ├── test_client: HTTPX AsyncClient bound to the ASGI app
    ├── make_user: factory inserting a user with a given role
    ├── admin_headers / rm_headers / pm_headers / user_headers
    └── role_factory / project_factory / resource_factory (API-level helpers)

ASGITransport does not run the lifespan, so settings are seeded here.
"""

import os
import tempfile

_TEST_DB = os.path.join(tempfile.mkdtemp(prefix="resource_pulse_test_"), "test.db")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"
os.environ["JWT_SECRET"] = "test-access-secret-that-is-long-enough-0001"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret-that-is-long-enough-0002"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"

from typing import Dict  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from resource_pulse import database  # noqa: E402
from resource_pulse.database import Base  # noqa: E402
import resource_pulse.models  # noqa: E402,F401
from resource_pulse.models.user import User  # noqa: E402
from resource_pulse.security import auth_manager  # noqa: E402
from resource_pulse.services.settings_service import settings_service  # noqa: E402

TEST_PASSWORD = "correct-horse-battery"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """Fresh schema plus default settings for every test."""
    engine = database.engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with database.async_session_factory() as session:
        await settings_service.seed_defaults(session)
        await session.commit()

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled aiosqlite connections must not outlive this test's event loop
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    async with database.async_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(db_engine):
    """
    HTTPX AsyncClient wired straight into the FastAPI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from resource_pulse.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Users and tokens
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def make_user(db_engine):
    """Inserts a user and returns it; `is_active=False` for deactivated accounts."""
    counter = {"n": 0}

    async def _make(role: str = "user", email: str = None, is_active: bool = True) -> User:
        counter["n"] += 1
        async with database.async_session_factory() as session:
            user = User(
                email=email or f"{role}{counter['n']}@example.com",
                password_hash=auth_manager.hash_password(TEST_PASSWORD),
                first_name=role.replace("_", " ").title(),
                last_name="Tester",
                role=role,
                is_active=is_active,
            )
            session.add(user)
            await session.commit()
            return user

    return _make


def bearer(user: User) -> Dict[str, str]:
    token = auth_manager.create_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_user(make_user):
    return await make_user("admin")


@pytest_asyncio.fixture
async def admin_headers(admin_user):
    return bearer(admin_user)


@pytest_asyncio.fixture
async def rm_headers(make_user):
    return bearer(await make_user("resource_manager"))


@pytest_asyncio.fixture
async def pm_headers(make_user):
    return bearer(await make_user("project_manager"))


@pytest_asyncio.fixture
async def user_headers(make_user):
    return bearer(await make_user("user"))


# ══════════════════════════════════════════════════════════════════════════
# API-level factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def role_factory(test_client, admin_headers):
    async def _create(name: str = "Developer", **extra) -> dict:
        response = await test_client.post(
            "/api/roles", json={"name": name, **extra}, headers=admin_headers
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def project_factory(test_client, admin_headers):
    async def _create(name: str = "Apollo", client: str = "Acme", **extra) -> dict:
        response = await test_client.post(
            "/api/projects", json={"name": name, "client": client, **extra}, headers=admin_headers
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def resource_factory(test_client, admin_headers):
    async def _create(name: str = "Ada Lovelace", **extra) -> dict:
        response = await test_client.post(
            "/api/resources", json={"name": name, **extra}, headers=admin_headers
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def headers_for():
    """Builds an Authorization header for any user returned by `make_user`."""
    return bearer


@pytest.fixture
def user_password():
    return TEST_PASSWORD


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for service unit tests that need no database.

    Usage:
        async def test_delete_role_in_use(mock_db_session):
            mock_db_session.scalar.return_value = 2
            ...
    """
    from unittest.mock import AsyncMock, MagicMock

    session = AsyncMock()
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session
