"""
Grid service orchestrator.

Builds the weekly schedule grid and the weekly session grid, and validates
drag relocation on them before delegating the write to the schedule or
session service. Grid collisions are per classroom across all groups; the
registry's own rules (per-group overlap, lifecycle, versions) still apply
when the move is written.

Dependencies: academy_scheduler.core.grid, academy_scheduler.application.services
System role: Grid layout and move use case orchestration
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from academy_scheduler.application.adapters.group_directory import (
    GroupDirectory,
    SqlGroupDirectory,
)
from academy_scheduler.application.services.schedule_service import ScheduleService
from academy_scheduler.application.services.session_service import SessionService
from academy_scheduler.boundary.db.CRUD.schedule_crud import schedule_crud
from academy_scheduler.boundary.db.CRUD.session_crud import session_crud
from academy_scheduler.boundary.db.models.schedule_model import WeeklyScheduleModel
from academy_scheduler.boundary.db.models.session_model import ClassSessionModel
from academy_scheduler.configs import get_settings
from academy_scheduler.configs.scheduling import SchedulingSettings
from academy_scheduler.core import grid, time_grid
from academy_scheduler.core.enums import Classroom, DayOfWeek
from academy_scheduler.core.exceptions import ValidationError
from academy_scheduler.core.grid import Buckets, GridItem, Placement

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WeekGrid:
    """Session grid for one week."""

    week_start: date
    dates: dict[DayOfWeek, date]
    buckets: Buckets


class GridService:
    """Grid layout and relocation orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        groups: GroupDirectory | None = None,
        settings: SchedulingSettings | None = None,
    ) -> None:
        """
        Initialize grid service with async database session.

        Args:
            db: Async SQLAlchemy session
            groups: Group lookup (defaults to the groups table)
            settings: Scheduling settings (defaults to application settings)
        """
        self.db = db
        self.groups = groups or SqlGroupDirectory(db)
        self.settings = settings or get_settings().scheduling
        self.schedules = ScheduleService(db, self.groups)
        self.sessions = SessionService(db, self.groups, self.settings)

    # ------------------------------------------------------------------ #
    # Layout
    # ------------------------------------------------------------------ #

    async def schedule_grid(
        self,
        classroom: Classroom | None = None,
        group_id: UUID | None = None,
    ) -> Buckets:
        """
        Weekly schedules bucketed by day and classroom.

        Args:
            classroom: Show only this classroom
            group_id: Show only this group's schedules

        Returns:
            Buckets: day -> classroom -> schedules sorted by start time
        """
        schedules = await schedule_crud.search(self.db, group_id=group_id)
        return grid.bucket(grid.schedule_items(schedules), classroom)

    async def _week_sessions(
        self,
        monday: date,
        group_id: UUID | None = None,
    ) -> Sequence[ClassSessionModel]:
        return await session_crud.search(
            self.db,
            group_id=group_id,
            date_from=monday,
            date_to=monday + timedelta(days=len(DayOfWeek) - 1),
        )

    async def session_grid(
        self,
        week_start: date,
        classroom: Classroom | None = None,
        group_id: UUID | None = None,
    ) -> WeekGrid:
        """
        Sessions of the week containing week_start, bucketed by day and classroom.

        Args:
            week_start: Any date in the wanted week
            classroom: Show only this classroom
            group_id: Show only this group's sessions

        Returns:
            WeekGrid: Monday of the week, date of each day and the buckets
        """
        monday = grid.week_start_for(week_start)
        sessions = await self._week_sessions(monday, group_id)
        return WeekGrid(
            week_start=monday,
            dates=grid.week_dates(monday),
            buckets=grid.bucket(grid.session_items(sessions), classroom),
        )

    # ------------------------------------------------------------------ #
    # Relocation
    # ------------------------------------------------------------------ #

    def _placement(
        self,
        items: Sequence[GridItem],
        current: GridItem,
        day: DayOfWeek,
        start_time: time_grid.TimeLike | None,
        end_time: time_grid.TimeLike | None,
        classroom: Classroom | None,
        pointer_offset: float | None,
    ) -> Placement:
        if pointer_offset is not None:
            return grid.propose_move(
                items,
                current.id,
                day,
                pointer_offset,
                classroom,
                grid_start_hour=self.settings.grid_start_hour,
                pixels_per_hour=self.settings.pixels_per_hour,
                granularity=self.settings.snap_granularity,
            )
        if start_time is None:
            raise ValidationError(
                "Either start_time or pointer_offset is required", field="start_time"
            )
        start = time_grid.to_minutes(start_time)
        end = time_grid.to_minutes(end_time) if end_time is not None else start + current.duration
        if end >= time_grid.MINUTES_PER_DAY:
            raise ValidationError("Moved block would end after midnight", field="end_time")
        return grid.place(items, current.id, day, start, end, classroom)

    async def move_schedule(
        self,
        schedule_id: UUID,
        day: DayOfWeek | str,
        start_time: time_grid.TimeLike | None = None,
        end_time: time_grid.TimeLike | None = None,
        classroom: Classroom | str | None = None,
        pointer_offset: float | None = None,
    ) -> WeeklyScheduleModel:
        """
        Relocate a weekly schedule on the grid.

        The destination is either explicit (start_time, optional end_time) or
        a pointer offset snapped to the configured granularity. Duration is
        kept when no end is given.

        Returns:
            WeeklyScheduleModel: Updated schedule

        Raises:
            ScheduleNotFound: Unknown schedule
            PlacementConflict: Destination classroom is occupied at that time
            ScheduleConflict: Overlaps another schedule of the same group
            InvalidTimeFormat: Malformed or inverted times
        """
        schedule = await self.schedules.get_schedule(schedule_id)
        items = grid.schedule_items(await schedule_crud.search(self.db))
        current = GridItem.from_schedule(schedule)
        placement = self._placement(
            items,
            current,
            DayOfWeek(day),
            start_time,
            end_time,
            Classroom(classroom) if classroom is not None else None,
            pointer_offset,
        )
        logger.info(
            "Schedule move validated",
            extra={
                "schedule_id": str(schedule_id),
                "day_of_week": placement.item.day.value,
                "start_time": placement.item.start_time,
                "classroom": placement.item.classroom.value,
            },
        )
        if not placement.moved and placement.item.end == placement.previous.end:
            return schedule
        return await self.schedules.update_schedule(
            schedule_id,
            day_of_week=placement.item.day,
            start_time=placement.item.start_time,
            end_time=placement.item.end_time,
            classroom=placement.item.classroom,
        )

    async def move_session(
        self,
        session_id: UUID,
        day: DayOfWeek | str,
        start_time: time_grid.TimeLike | None = None,
        end_time: time_grid.TimeLike | None = None,
        classroom: Classroom | str | None = None,
        pointer_offset: float | None = None,
        expected_version: int | None = None,
    ) -> ClassSessionModel:
        """
        Relocate a session within its week on the grid.

        Returns:
            ClassSessionModel: Updated session

        Raises:
            SessionNotFound: Unknown session
            ValidationError: Session falls on a Sunday (not on the grid)
            PlacementConflict: Destination classroom is occupied at that time
            InvalidTransition: Session is no longer SCHEDULED
            StaleVersion: Session changed since expected_version
        """
        session = await self.sessions.get_session(session_id)
        current = GridItem.from_session(session)
        if current is None:
            raise ValidationError("Sunday sessions are not on the weekly grid", field="date")
        monday = grid.week_start_for(session.date)
        items = grid.session_items(await self._week_sessions(monday))
        placement = self._placement(
            items,
            current,
            DayOfWeek(day),
            start_time,
            end_time,
            Classroom(classroom) if classroom is not None else None,
            pointer_offset,
        )
        logger.info(
            "Session move validated",
            extra={
                "session_id": str(session_id),
                "date": placement.item.date.isoformat(),
                "start_time": placement.item.start_time,
                "classroom": placement.item.classroom.value,
            },
        )
        if not placement.moved and placement.item.end == placement.previous.end:
            return session
        return await self.sessions.update_session(
            session_id,
            expected_version=expected_version,
            date=placement.item.date,
            start_time=placement.item.start_time,
            end_time=placement.item.end_time,
            classroom=placement.item.classroom,
        )
