"""
Base CRUD operations for the scheduler tables.

Primary-key helpers shared by the schedule, session, transition and group
CRUD singletons. Every method flushes and none commits: the calling service
owns the transaction, so a failed operation can be rolled back as a whole.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Any, Generic, Iterable, TypeVar
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from academy_scheduler.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Primary-key operations for one mapped table.

    Type Parameters:
        ModelT: Mapped class with a UUID ``id`` column
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **fields: Any) -> ModelT:
        """
        Insert one row and load server-side defaults.

        Args:
            session: Async database session
            **fields: Column values

        Returns:
            Inserted instance with id and timestamps populated
        """
        instance = self.model(**fields)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def create_many(
        self,
        session: AsyncSession,
        rows: Iterable[dict[str, Any]],
    ) -> list[ModelT]:
        """
        Insert a batch of rows in a single flush.

        A unique-index violation surfaces as IntegrityError from the flush,
        leaving the caller to roll the whole batch back.

        Returns:
            Inserted instances in input order
        """
        instances = [self.model(**row) for row in rows]
        if not instances:
            return []
        session.add_all(instances)
        await session.flush()
        return instances

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        stmt = select(self.model).where(self.model.id == id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def exists(self, session: AsyncSession, id: UUID) -> bool:
        stmt = select(self.model.id).where(self.model.id == id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def update_by_id(
        self,
        session: AsyncSession,
        id: UUID,
        **fields: Any,
    ) -> ModelT | None:
        """
        Unconditional update by primary key.

        The returned row replaces any copy already in the identity map, so
        callers holding the instance see the new values.

        Returns:
            Updated instance, or None when no row has that id
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values(**fields)
            .returning(self.model)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_by_id(self, session: AsyncSession, id: UUID) -> bool:
        """Delete by primary key; False when no row matched."""
        stmt = delete(self.model).where(self.model.id == id)
        result = await session.execute(stmt)
        return result.rowcount > 0
