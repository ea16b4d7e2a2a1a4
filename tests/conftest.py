"""
Pytest fixtures for World-Kernel tests.

Uses a temp-file SQLite database so the test session and the app's own
sessions share one database (in-memory SQLite is per-connection).
"""

import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, List, Optional

_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
TEST_DB_PATH = _tmp.name
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-0123456789"
os.environ["ENVIRONMENT"] = "test"

from worldkernel.config import get_settings  # noqa: E402

get_settings.cache_clear()

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from worldkernel.core.identity.jwt import create_access_token  # noqa: E402
from worldkernel.core.identity.password import PasswordHasher  # noqa: E402
from worldkernel.core.models import Base, Kernel, Profile, User  # noqa: E402
from worldkernel.database import async_session_maker, engine  # noqa: E402

TEST_PASSWORD = "Password123"
# Cheap hash shared by fixture accounts; signup tests exercise the real cost
TEST_PASSWORD_HASH = PasswordHasher.hash(TEST_PASSWORD, rounds=4)

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def pytest_sessionfinish(session, exitstatus):
    """Remove the temp database and its WAL files."""
    for suffix in ("", "-wal", "-shm"):
        path = TEST_DB_PATH + suffix
        if os.path.exists(path):
            os.unlink(path)


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh tables for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session(database) -> AsyncGenerator[AsyncSession, None]:
    """Session on the test database."""
    async with async_session_maker() as session:
        yield session
        await session.rollback()


async def _create_profile(
    session: AsyncSession,
    username: str,
    display_name: Optional[str] = None,
) -> Profile:
    """Account + profile committed so app sessions can see them."""
    user = User(
        id=uuid.uuid4(),
        email=f"{username}@example.com",
        password_hash=TEST_PASSWORD_HASH,
    )
    session.add(user)
    await session.flush()
    profile = Profile(id=user.id, username=username, display_name=display_name)
    session.add(profile)
    await session.commit()
    return profile


async def _create_kernel(
    session: AsyncSession,
    author: Profile,
    title: str = "A Kernel",
    minutes: int = 0,
    parent: Optional[Kernel] = None,
    tags: Optional[List[str]] = None,
    description: str = "Some world-building.",
    license: str = "open",
) -> Kernel:
    """Kernel row with a fixed creation time ``minutes`` after BASE_TIME."""
    created = BASE_TIME + timedelta(minutes=minutes)
    kernel = Kernel(
        id=uuid.uuid4(),
        title=title,
        description=description,
        author_id=author.id,
        parent_id=parent.id if parent else None,
        tags=tags or [],
        license=license,
        created_at=created,
        updated_at=created,
    )
    session.add(kernel)
    await session.commit()
    return kernel


def _auth_headers(profile: Profile) -> dict:
    """Bearer header for a profile."""
    token = create_access_token(user_id=profile.id, username=profile.username)
    return {"Authorization": f"Bearer {token.access_token}"}


@pytest_asyncio.fixture
async def author(db_session: AsyncSession) -> Profile:
    return await _create_profile(db_session, "ursula", display_name="Ursula")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> Profile:
    return await _create_profile(db_session, "vera")


@pytest_asyncio.fixture
async def client(database) -> AsyncGenerator[AsyncClient, None]:
    """Async client against the app, sharing the test database."""
    from worldkernel.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def api_prefix() -> str:
    return get_settings().api_v1_prefix


@pytest.fixture
def create_profile():
    """``await create_profile(session, username)``"""
    return _create_profile


@pytest.fixture
def create_kernel():
    """``await create_kernel(session, author, title=..., minutes=..., parent=...)``"""
    return _create_kernel


@pytest.fixture
def auth_headers():
    """``auth_headers(profile)`` -> bearer header dict"""
    return _auth_headers
