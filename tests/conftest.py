"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory SQLite database, seeded groups, fixed clock, service mocks
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import uuid
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from academy_scheduler.application.adapters.clock import FixedClock
from academy_scheduler.configs.scheduling import SchedulingSettings
from academy_scheduler.core.enums import GroupStatus


@pytest_asyncio.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    Foreign keys are enforced so ON DELETE rules behave as on PostgreSQL.

    Yields:
        AsyncSession: Test database session with cleanup (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    from academy_scheduler.boundary.db.connection import enable_sqlite_foreign_keys
    from academy_scheduler.boundary.db.create_tables import create_all_tables, drop_all_tables

    # Use SQLite in-memory database for tests
    engine = enable_sqlite_foreign_keys(
        create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )

    await create_all_tables(engine)

    # Create session factory
    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    # Create session for test
    async with async_session() as session:
        yield session
        await session.rollback()

    # Cleanup
    await drop_all_tables(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def sqlite_file_engine(tmp_path, monkeypatch):
    """
    Configured application engine pointed at a SQLite file.

    Goes through get_async_engine() so the development engine setup is what
    gets exercised. Sessions from get_async_session_factory() each get their
    own connection.

    Yields:
        AsyncEngine: Engine with all tables created
    """
    from academy_scheduler.boundary.db import connection
    from academy_scheduler.boundary.db.create_tables import create_all_tables
    from academy_scheduler.configs.database import DatabaseSettings

    settings = SimpleNamespace(
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'academy.db'}")
    )
    monkeypatch.setattr(connection, "get_settings", lambda: settings)
    connection.get_async_engine.cache_clear()
    connection.get_async_session_factory.cache_clear()

    engine = connection.get_async_engine()
    await create_all_tables(engine)
    yield engine

    await engine.dispose()
    connection.get_async_engine.cache_clear()
    connection.get_async_session_factory.cache_clear()


@pytest.fixture
def make_group(test_async_db):
    """
    Factory inserting a group row and committing it.

    Returns:
        Callable: async (status=OPEN, subject_id=None) -> GroupModel
    """
    from academy_scheduler.boundary.db.CRUD.group_crud import group_crud

    async def _make(status: GroupStatus = GroupStatus.OPEN, subject_id: uuid.UUID | None = None):
        group = await group_crud.create(
            test_async_db,
            name=f"Group {uuid.uuid4().hex[:6]}",
            subject_id=subject_id or uuid.uuid4(),
            status=status,
        )
        await test_async_db.commit()
        return group

    return _make


@pytest_asyncio.fixture
async def open_group(make_group):
    """Provide an OPEN group."""
    return await make_group()


@pytest_asyncio.fixture
async def cancelled_group(make_group):
    """Provide a CANCELLED group."""
    return await make_group(status=GroupStatus.CANCELLED)


@pytest.fixture
def scheduling_settings() -> SchedulingSettings:
    """Provide default scheduling settings, independent of the environment."""
    return SchedulingSettings(
        grid_start_hour=8,
        grid_end_hour=22,
        pixels_per_hour=60,
        snap_granularity=30,
        default_block_minutes=120,
        default_generation_days=28,
        max_generation_days=366,
    )


@pytest.fixture
def fixed_clock() -> FixedClock:
    """Provide a clock frozen on Wednesday 3 January 2024, 10:00."""
    return FixedClock(datetime(2024, 1, 3, 10, 0))


@pytest.fixture
def mock_schedule_service():
    """
    Create mock ScheduleService for testing.

    Returns:
        AsyncMock: Mocked ScheduleService with async methods
    """
    return AsyncMock()


@pytest.fixture
def mock_session_service():
    """
    Create mock SessionService for testing.

    Returns:
        AsyncMock: Mocked SessionService with async methods
    """
    return AsyncMock()
