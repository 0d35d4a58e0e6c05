"""
Dependency injection container.

Factory functions for FastAPI dependencies.

Dependencies: academy_scheduler.configs, academy_scheduler.application, academy_scheduler.boundary
System role: DI container for service injection
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from academy_scheduler.application.adapters import (
    Clock,
    GroupDirectory,
    SqlGroupDirectory,
    SystemClock,
)
from academy_scheduler.application.services import (
    GenerationService,
    GridService,
    ScheduleService,
    SessionService,
)
from academy_scheduler.boundary.db import get_async_db
from academy_scheduler.configs import Settings, get_settings


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


@lru_cache
def get_clock() -> Clock:
    """Get wall clock singleton."""
    return SystemClock()


def get_group_directory(db: AsyncSession = Depends(get_async_db)) -> GroupDirectory:
    """
    Get group directory bound to the request's database session.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        GroupDirectory: Group lookup
    """
    return SqlGroupDirectory(db)


def get_schedule_service(
    db: AsyncSession = Depends(get_async_db),
    groups: GroupDirectory = Depends(get_group_directory),
) -> ScheduleService:
    """
    Get schedule service instance.

    Args:
        db: Async database session (injected via Depends)
        groups: Group directory (injected via Depends)

    Returns:
        ScheduleService: Schedule service instance
    """
    return ScheduleService(db=db, groups=groups)


def get_session_service(
    db: AsyncSession = Depends(get_async_db),
    groups: GroupDirectory = Depends(get_group_directory),
    settings: Settings = Depends(get_settings_dependency),
) -> SessionService:
    """
    Get session service instance.

    Args:
        db: Async database session (injected via Depends)
        groups: Group directory (injected via Depends)
        settings: Application settings (injected via Depends)

    Returns:
        SessionService: Session service instance
    """
    return SessionService(db=db, groups=groups, settings=settings.scheduling)


def get_generation_service(
    db: AsyncSession = Depends(get_async_db),
    groups: GroupDirectory = Depends(get_group_directory),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_settings_dependency),
) -> GenerationService:
    """
    Get generation service instance.

    Args:
        db: Async database session (injected via Depends)
        groups: Group directory (injected via Depends)
        clock: Clock for the default date range (injected via Depends)
        settings: Application settings (injected via Depends)

    Returns:
        GenerationService: Generation service instance
    """
    return GenerationService(db=db, groups=groups, clock=clock, settings=settings.scheduling)


def get_grid_service(
    db: AsyncSession = Depends(get_async_db),
    groups: GroupDirectory = Depends(get_group_directory),
    settings: Settings = Depends(get_settings_dependency),
) -> GridService:
    """
    Get grid service instance.

    Args:
        db: Async database session (injected via Depends)
        groups: Group directory (injected via Depends)
        settings: Application settings (injected via Depends)

    Returns:
        GridService: Grid service instance
    """
    return GridService(db=db, groups=groups, settings=settings.scheduling)
