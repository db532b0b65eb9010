"""Pytest configuration and fixtures."""

import os

# Settings are cached on first import, so configure them before the app loads
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["RATE_LIMIT_ENABLED"] = "false"

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from gridmaze.main import app
from gridmaze.core.maze_engine import TUTORIAL_LEVEL
from gridmaze.db.database import Base, get_db
from gridmaze.models.level import Level
from gridmaze.services.level_locks import LevelLockRegistry
from gridmaze.services.level_service import LevelService, get_level_service


# Worked example: marker at (2, 1), exit at (0, 3)
TUTORIAL_GRID = TUTORIAL_LEVEL


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Create a test database engine.

    A file database with one connection per session, so concurrent sessions
    behave like separate requests.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine) -> async_sessionmaker:
    """Session factory bound to the test database."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def test_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def level_service() -> LevelService:
    """Level service with its own lock registry."""
    return LevelService(locks=LevelLockRegistry())


@pytest_asyncio.fixture(scope="function")
async def client(session_maker, level_service) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_level_service] = lambda: level_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def tutorial_level(test_session) -> Level:
    """Store the worked-example level."""
    level = Level(
        grid=[list(row) for row in TUTORIAL_GRID],
        rows=5,
        cols=5,
        marker_row=2,
        marker_col=1,
    )
    test_session.add(level)
    await test_session.commit()
    await test_session.refresh(level)
    return level
