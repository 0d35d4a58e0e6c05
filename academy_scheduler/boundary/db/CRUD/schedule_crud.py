"""
Weekly schedule CRUD operations.

Provides Create, Read, Update, Delete operations for WeeklyScheduleModel
with group- and day-scoped queries used by overlap validation and
session generation.

Dependencies: sqlalchemy, academy_scheduler.boundary.db.models
System role: Weekly schedule persistence operations
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

from academy_scheduler.boundary.db.CRUD.base_crud import BaseCRUD
from academy_scheduler.boundary.db.models.schedule_model import WeeklyScheduleModel
from academy_scheduler.core.enums import Classroom, DayOfWeek

# Enum columns are stored as names, so order days explicitly.
_DAY_ORDER = case(
    {day: day.weekday for day in DayOfWeek},
    value=WeeklyScheduleModel.day_of_week,
)


class ScheduleCRUD(BaseCRUD[WeeklyScheduleModel]):
    """
    CRUD operations for WeeklyScheduleModel.

    Listing methods return schedules in natural order: day, then start time.
    """

    def __init__(self) -> None:
        """Initialize ScheduleCRUD with WeeklyScheduleModel."""
        super().__init__(WeeklyScheduleModel)

    async def get_by_group(
        self,
        session: AsyncSession,
        group_id: UUID,
    ) -> Sequence[WeeklyScheduleModel]:
        """
        Retrieve every schedule of a group.

        Args:
            session: Async database session
            group_id: Owning group UUID

        Returns:
            Schedules ordered by day then start time
        """
        stmt = (
            select(WeeklyScheduleModel)
            .where(WeeklyScheduleModel.group_id == group_id)
            .order_by(_DAY_ORDER, WeeklyScheduleModel.start_time)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_siblings(
        self,
        session: AsyncSession,
        group_id: UUID,
        day_of_week: DayOfWeek,
        exclude_id: UUID | None = None,
    ) -> Sequence[WeeklyScheduleModel]:
        """
        Retrieve the group's schedules on one day, optionally excluding one.

        Args:
            session: Async database session
            group_id: Owning group UUID
            day_of_week: Day to look at
            exclude_id: Schedule being updated, left out of the result

        Returns:
            Schedules ordered by start time
        """
        stmt = select(WeeklyScheduleModel).where(
            WeeklyScheduleModel.group_id == group_id,
            WeeklyScheduleModel.day_of_week == day_of_week,
        )
        if exclude_id is not None:
            stmt = stmt.where(WeeklyScheduleModel.id != exclude_id)
        stmt = stmt.order_by(WeeklyScheduleModel.start_time)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def search(
        self,
        session: AsyncSession,
        day_of_week: DayOfWeek | None = None,
        classroom: Classroom | None = None,
        group_id: UUID | None = None,
    ) -> Sequence[WeeklyScheduleModel]:
        """
        Retrieve schedules across groups for the global grid.

        Args:
            session: Async database session
            day_of_week: Optional day filter
            classroom: Optional classroom filter
            group_id: Optional group filter

        Returns:
            Schedules ordered by day then start time
        """
        stmt = select(WeeklyScheduleModel)
        if day_of_week is not None:
            stmt = stmt.where(WeeklyScheduleModel.day_of_week == day_of_week)
        if classroom is not None:
            stmt = stmt.where(WeeklyScheduleModel.classroom == classroom)
        if group_id is not None:
            stmt = stmt.where(WeeklyScheduleModel.group_id == group_id)
        stmt = stmt.order_by(_DAY_ORDER, WeeklyScheduleModel.start_time)
        result = await session.execute(stmt)
        return result.scalars().all()


schedule_crud = ScheduleCRUD()
