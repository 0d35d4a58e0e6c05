"""
Weekly schedule service orchestrator.

Coordinates the weekly schedule registry: create, update, delete and list
the recurring (day, time, classroom) patterns of a group, keeping a group's
schedules free of overlaps on any single day.

Dependencies: academy_scheduler.boundary.db.CRUD, academy_scheduler.core
System role: Schedule registry use case orchestration
"""

import logging
from datetime import time
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from academy_scheduler.application.adapters.group_directory import (
    GroupDirectory,
    SqlGroupDirectory,
    require_group,
)
from academy_scheduler.boundary.db.CRUD.schedule_crud import schedule_crud
from academy_scheduler.boundary.db.models.schedule_model import WeeklyScheduleModel
from academy_scheduler.core import time_grid
from academy_scheduler.core.enums import Classroom, DayOfWeek
from academy_scheduler.core.exceptions import (
    ScheduleConflict,
    ScheduleNotFound,
    SchedulingError,
    ValidationError,
)
from academy_scheduler.core.grid import overlaps

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"day_of_week", "start_time", "end_time", "classroom"})


class ScheduleService:
    """Weekly schedule registry orchestrator."""

    def __init__(self, db: AsyncSession, groups: GroupDirectory | None = None) -> None:
        """
        Initialize schedule service with async database session.

        Args:
            db: Async SQLAlchemy session
            groups: Group lookup (defaults to the groups table)
        """
        self.db = db
        self.groups = groups or SqlGroupDirectory(db)

    async def _ensure_no_overlap(
        self,
        group_id: UUID,
        day_of_week: DayOfWeek,
        start_time: time,
        end_time: time,
        exclude_id: UUID | None = None,
    ) -> None:
        siblings = await schedule_crud.get_siblings(
            self.db, group_id, day_of_week, exclude_id=exclude_id
        )
        start = time_grid.to_minutes(start_time)
        end = time_grid.to_minutes(end_time)
        for sibling in siblings:
            other_start = time_grid.to_minutes(sibling.start_time)
            other_end = time_grid.to_minutes(sibling.end_time)
            if overlaps(start, end, other_start, other_end):
                raise ScheduleConflict(
                    sibling.id,
                    day_of_week,
                    time_grid.minutes_to_time(max(start, other_start)),
                    time_grid.minutes_to_time(min(end, other_end)),
                )

    async def create_schedule(
        self,
        group_id: UUID,
        day_of_week: DayOfWeek | str,
        start_time: time_grid.TimeLike,
        end_time: time_grid.TimeLike,
        classroom: Classroom | str,
    ) -> WeeklyScheduleModel:
        """
        Create a weekly schedule for a group.

        Args:
            group_id: Owning group UUID
            day_of_week: MONDAY..SATURDAY
            start_time: Start time ("HH:MM" or time)
            end_time: End time, after start_time
            classroom: Venue

        Returns:
            WeeklyScheduleModel: Created schedule

        Raises:
            GroupNotFound: Unknown group
            GroupCancelled: Group is cancelled
            InvalidTimeFormat: Malformed times or start >= end
            ScheduleConflict: Overlaps another schedule of the group that day
        """
        try:
            await require_group(self.groups, group_id)
            day = DayOfWeek(day_of_week)
            start = time_grid.parse_time(start_time)
            end = time_grid.parse_time(end_time)
            time_grid.validate_range(start, end)
            await self._ensure_no_overlap(group_id, day, start, end)

            schedule = await schedule_crud.create(
                self.db,
                group_id=group_id,
                day_of_week=day,
                start_time=start,
                end_time=end,
                classroom=Classroom(classroom),
            )
            await self.db.commit()
            logger.info(
                "Schedule created",
                extra={
                    "schedule_id": str(schedule.id),
                    "group_id": str(group_id),
                    "day_of_week": day.value,
                },
            )
            return schedule
        except SchedulingError:
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "Failed to create schedule",
                extra={"error": str(e), "group_id": str(group_id)},
            )
            raise

    async def get_schedule(self, schedule_id: UUID) -> WeeklyScheduleModel:
        """
        Get schedule by ID.

        Raises:
            ScheduleNotFound: Unknown schedule
        """
        schedule = await schedule_crud.get_by_id(self.db, schedule_id)
        if schedule is None:
            raise ScheduleNotFound(schedule_id)
        return schedule

    async def list_schedules(self, group_id: UUID) -> Sequence[WeeklyScheduleModel]:
        """
        List a group's schedules ordered by day then start time.

        Raises:
            GroupNotFound: Unknown group
        """
        await require_group(self.groups, group_id, allow_cancelled=True)
        return await schedule_crud.get_by_group(self.db, group_id)

    async def list_all_schedules(
        self,
        day_of_week: DayOfWeek | None = None,
        classroom: Classroom | None = None,
        group_id: UUID | None = None,
    ) -> Sequence[WeeklyScheduleModel]:
        """List schedules across groups, for the global grid."""
        return await schedule_crud.search(
            self.db,
            day_of_week=day_of_week,
            classroom=classroom,
            group_id=group_id,
        )

    async def update_schedule(
        self,
        schedule_id: UUID,
        **fields: Any,
    ) -> WeeklyScheduleModel:
        """
        Update a schedule with partial fields.

        Omitted (or None) fields keep their value. The merged schedule is
        validated against the group's other schedules.

        Args:
            schedule_id: Schedule UUID
            **fields: day_of_week, start_time, end_time, classroom

        Returns:
            WeeklyScheduleModel: Updated schedule

        Raises:
            ScheduleNotFound: Unknown schedule
            GroupCancelled: Owning group is cancelled
            ValidationError: Unknown field
            InvalidTimeFormat: Malformed times or start >= end
            ScheduleConflict: Overlaps a sibling schedule
        """
        try:
            unknown = set(fields) - UPDATABLE_FIELDS
            if unknown:
                raise ValidationError(
                    f"Cannot update fields: {', '.join(sorted(unknown))}",
                    field=sorted(unknown)[0],
                )
            schedule = await schedule_crud.get_by_id(self.db, schedule_id)
            if schedule is None:
                raise ScheduleNotFound(schedule_id)
            await require_group(self.groups, schedule.group_id)

            updates = {key: value for key, value in fields.items() if value is not None}
            day = DayOfWeek(updates.get("day_of_week", schedule.day_of_week))
            start = time_grid.parse_time(updates.get("start_time", schedule.start_time))
            end = time_grid.parse_time(updates.get("end_time", schedule.end_time))
            classroom = Classroom(updates.get("classroom", schedule.classroom))
            time_grid.validate_range(start, end)

            if not updates:
                return schedule

            await self._ensure_no_overlap(
                schedule.group_id, day, start, end, exclude_id=schedule_id
            )
            updated = await schedule_crud.update_by_id(
                self.db,
                schedule_id,
                day_of_week=day,
                start_time=start,
                end_time=end,
                classroom=classroom,
            )
            if updated is None:
                raise ScheduleNotFound(schedule_id)
            await self.db.commit()
            logger.info(
                "Schedule updated",
                extra={"schedule_id": str(schedule_id), "updates": sorted(updates)},
            )
            return updated
        except SchedulingError:
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "Failed to update schedule",
                extra={"error": str(e), "schedule_id": str(schedule_id)},
            )
            raise

    async def delete_schedule(self, schedule_id: UUID) -> bool:
        """
        Delete a schedule definition.

        Sessions generated from it stay; their schedule_id becomes NULL.

        Returns:
            bool: True if deleted

        Raises:
            ScheduleNotFound: Unknown schedule
            GroupCancelled: Owning group is cancelled
        """
        try:
            schedule = await schedule_crud.get_by_id(self.db, schedule_id)
            if schedule is None:
                raise ScheduleNotFound(schedule_id)
            await require_group(self.groups, schedule.group_id)

            await schedule_crud.delete_by_id(self.db, schedule_id)
            await self.db.commit()
            logger.info("Schedule deleted", extra={"schedule_id": str(schedule_id)})
            return True
        except SchedulingError:
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "Failed to delete schedule",
                extra={"error": str(e), "schedule_id": str(schedule_id)},
            )
            raise
