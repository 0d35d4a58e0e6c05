"""
Database table creation script.

Creates all tables defined in ORM models using SQLAlchemy metadata.

Dependencies: sqlalchemy, academy_scheduler.configs
System role: Database schema initialization

Usage:
    python -m academy_scheduler.boundary.db.create_tables
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from academy_scheduler.boundary.db.base import Base
from academy_scheduler.boundary.db.connection import get_async_engine

# Import all models to register them with Base.metadata
from academy_scheduler.boundary.db import models  # noqa: F401

logger = logging.getLogger(__name__)


async def create_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: issues CREATE TABLE IF NOT EXISTS for each model, so safe
    to run multiple times. Existing tables remain unchanged.

    Args:
        engine: Engine to use, defaults to the configured one

    Raises:
        SQLAlchemyError: If database connection fails or table creation fails
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Scheduling tables created", extra={"tables": sorted(Base.metadata.tables)})


async def drop_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Drop all database tables and their data.

    WARNING: Irreversible data loss. Only use in development environments.
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.info("Scheduling tables dropped")


def main() -> None:
    """Console entry point: create tables on the configured database."""
    from academy_scheduler.configs import get_settings
    from academy_scheduler.observability import configure_logging

    configure_logging(get_settings().log_level)
    asyncio.run(create_all_tables())


if __name__ == "__main__":
    main()
