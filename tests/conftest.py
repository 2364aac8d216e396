from __future__ import annotations

import os
import uuid
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from teamleave.db import build_engine, get_session
from teamleave.main import app
from teamleave.models import Profile, Role, SQLModel, UserRole
from teamleave.schemas.auth import ActorContext
from teamleave.services import events

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

    MakeUser = Callable[..., Awaitable[ActorContext]]

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Create a fresh database for each test.

    The default is an in-memory SQLite database; set TEST_DATABASE_URL to run
    against PostgreSQL.
    """
    _engine = build_engine(TEST_DATABASE_URL)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Yield a database session for the test."""
    async with AsyncSession(bind=engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _reset_listeners() -> Iterator[None]:
    yield
    events.clear_listeners()


@pytest.fixture
def make_user(db_session: AsyncSession) -> MakeUser:
    """Factory that inserts a profile with roles and returns its actor context."""

    async def _make_user(*roles: Role, full_name: str = "Test User", email: str | None = None) -> ActorContext:
        user_id = uuid.uuid4()
        db_session.add(Profile(id=user_id, full_name=full_name, email=email or f"{user_id.hex[:12]}@example.com"))
        await db_session.flush()
        granted = roles or (Role.STAFF,)
        for role in granted:
            db_session.add(UserRole(user_id=user_id, role=role.value))
        await db_session.commit()
        return ActorContext(user_id=user_id, roles=frozenset(granted))

    return _make_user
