"""
Class session CRUD operations.

Provides Create, Read, Update, Delete operations for ClassSessionModel
with filtered listing, slot lookups for generation and guarded
(status + version) updates for lifecycle transitions.

Dependencies: sqlalchemy, academy_scheduler.boundary.db.models
System role: Session persistence operations
"""

from datetime import date, time
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from academy_scheduler.boundary.db.CRUD.base_crud import BaseCRUD
from academy_scheduler.boundary.db.models.session_model import ClassSessionModel
from academy_scheduler.core.enums import SessionMode, SessionStatus, SessionType


class SessionCRUD(BaseCRUD[ClassSessionModel]):
    """
    CRUD operations for ClassSessionModel.

    Extends BaseCRUD with filtered queries, per-group slot lookups and
    compare-and-set updates keyed on (id, status, version).
    """

    def __init__(self) -> None:
        """Initialize SessionCRUD with ClassSessionModel."""
        super().__init__(ClassSessionModel)

    def _filtered(
        self,
        stmt: Select,
        group_id: UUID | None = None,
        subject_id: UUID | None = None,
        schedule_id: UUID | None = None,
        status: SessionStatus | None = None,
        type: SessionType | None = None,
        mode: SessionMode | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> Select:
        model = ClassSessionModel
        if group_id is not None:
            stmt = stmt.where(model.group_id == group_id)
        if subject_id is not None:
            stmt = stmt.where(model.subject_id == subject_id)
        if schedule_id is not None:
            stmt = stmt.where(model.schedule_id == schedule_id)
        if status is not None:
            stmt = stmt.where(model.status == status)
        if type is not None:
            stmt = stmt.where(model.type == type)
        if mode is not None:
            stmt = stmt.where(model.mode == mode)
        if date_from is not None:
            stmt = stmt.where(model.date >= date_from)
        if date_to is not None:
            stmt = stmt.where(model.date <= date_to)
        return stmt

    async def search(
        self,
        session: AsyncSession,
        limit: int | None = None,
        offset: int = 0,
        **filters: Any,
    ) -> Sequence[ClassSessionModel]:
        """
        Retrieve sessions matching optional filters.

        Args:
            session: Async database session
            limit: Maximum number of sessions to return
            offset: Number of sessions to skip
            **filters: group_id, subject_id, schedule_id, status, type, mode,
                date_from, date_to (inclusive)

        Returns:
            Sessions ordered by date then start time
        """
        stmt = self._filtered(select(ClassSessionModel), **filters)
        stmt = stmt.order_by(ClassSessionModel.date, ClassSessionModel.start_time).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count(self, session: AsyncSession, **filters: Any) -> int:
        """
        Count sessions matching the same filters as search().

        Returns:
            Number of matching sessions
        """
        stmt = self._filtered(select(func.count(ClassSessionModel.id)), **filters)
        result = await session.execute(stmt)
        return int(result.scalar_one())

    async def taken_slots(
        self,
        session: AsyncSession,
        group_id: UUID,
        date_from: date,
        date_to: date,
    ) -> set[tuple[date, time]]:
        """
        (date, start_time) pairs occupied by the group's sessions in a range.

        Args:
            session: Async database session
            group_id: Group UUID
            date_from: First date (inclusive)
            date_to: Last date (inclusive)

        Returns:
            Occupied slots, any type and status
        """
        stmt = select(ClassSessionModel.date, ClassSessionModel.start_time).where(
            ClassSessionModel.group_id == group_id,
            ClassSessionModel.date >= date_from,
            ClassSessionModel.date <= date_to,
        )
        result = await session.execute(stmt)
        return {(row.date, row.start_time) for row in result}

    async def get_at_slot(
        self,
        session: AsyncSession,
        group_id: UUID,
        on_date: date,
        start_time: time,
        exclude_id: UUID | None = None,
    ) -> ClassSessionModel | None:
        """
        Session of a group starting at a given date and time.

        Args:
            session: Async database session
            group_id: Group UUID
            on_date: Calendar date
            start_time: Start time
            exclude_id: Session to ignore (the one being moved)

        Returns:
            The occupying session, None if the slot is free
        """
        stmt = select(ClassSessionModel).where(
            ClassSessionModel.group_id == group_id,
            ClassSessionModel.date == on_date,
            ClassSessionModel.start_time == start_time,
        )
        if exclude_id is not None:
            stmt = stmt.where(ClassSessionModel.id != exclude_id)
        result = await session.execute(stmt.limit(1))
        return result.scalar_one_or_none()

    async def compare_and_set(
        self,
        session: AsyncSession,
        id: UUID,
        expected_status: SessionStatus,
        expected_version: int,
        **values: Any,
    ) -> ClassSessionModel | None:
        """
        Update a session only if it still has the status and version read.

        Bumps the version. A None result means another writer got there
        first (or the row is gone); the caller re-reads to tell which.

        Args:
            session: Async database session
            id: Session UUID
            expected_status: Status the caller validated against
            expected_version: Version the caller read
            **values: Columns to set

        Returns:
            Updated ClassSessionModel, None if the guard did not match
        """
        stmt = (
            update(ClassSessionModel)
            .where(
                ClassSessionModel.id == id,
                ClassSessionModel.status == expected_status,
                ClassSessionModel.version == expected_version,
            )
            .values(version=ClassSessionModel.version + 1, **values)
            .returning(ClassSessionModel)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def delete_if(
        self,
        session: AsyncSession,
        id: UUID,
        expected_status: SessionStatus,
        expected_version: int,
    ) -> bool:
        """
        Delete a session only if it still has the status and version read.

        Returns:
            True if deleted, False if the guard did not match
        """
        stmt = delete(ClassSessionModel).where(
            ClassSessionModel.id == id,
            ClassSessionModel.status == expected_status,
            ClassSessionModel.version == expected_version,
        )
        result = await session.execute(stmt)
        return result.rowcount > 0


session_crud = SessionCRUD()
