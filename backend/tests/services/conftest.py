"""Service test fixtures — async DB, isolated settings and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db and get_settings overridden: uploads land under tmp_path
    - db_manager patched for code paths that bypass get_db (readiness check)

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - Users are seeded with a real bcrypt hash only where login needs one
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from app.config import Settings, get_settings
from app.core.domain_types import AccountStatus, Role
from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
from app.infrastructure.security import create_access_token, hash_password
from app.models.user import User
from app.services.user_admin import to_authenticated_user
import app.infrastructure.database as db_module
from app.main import app

TEST_SECRET = "service-test-secret"


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret=TEST_SECRET,
        upload_root=tmp_path / "uploads",
    )


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory, test_settings):
    """FastAPI test client with DB and settings dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def make_user(test_db):
    """Factory: insert a user and return it."""
    async def _make(
        email: str,
        role: Role = Role.USER,
        status: AccountStatus = AccountStatus.ACTIVE,
        password: str | None = None,
        **fields,
    ) -> User:
        user = User(
            email=email,
            role=role.value,
            account_status=status.value,
            password_hash=hash_password(password) if password else "!",
            **fields,
        )
        test_db.add(user)
        await test_db.commit()
        await test_db.refresh(user)
        return user
    return _make


@pytest.fixture
async def admin_user(make_user):
    return await make_user(
        "root@throwback.com", Role.ADMIN, first_name="Root", last_name="Admin",
    )


@pytest.fixture
async def editor_user(make_user):
    return await make_user("editor@throwback.com", Role.EDITOR)


def _token_for(user: User) -> str:
    return create_access_token(to_authenticated_user(user), TEST_SECRET)


@pytest.fixture
def auth_headers():
    """Factory: Bearer header carrying a signed token for user."""
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {_token_for(user)}"}
    return _headers


@pytest.fixture
def admin_headers(admin_user, auth_headers):
    return auth_headers(admin_user)
