"""
Weekly schedule ORM model.

A recurring weekly time block of one group in one classroom.
Source rows for session generation.

Dependencies: sqlalchemy, academy_scheduler.boundary.db.base
System role: Weekly schedule registry persistence
"""

import uuid
from datetime import time

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Index, Time
from sqlalchemy.orm import Mapped, mapped_column

from academy_scheduler.boundary.db.base import Base, UUIDMixin, TimestampMixin
from academy_scheduler.core.enums import Classroom, DayOfWeek


class WeeklyScheduleModel(Base, UUIDMixin, TimestampMixin):
    """
    Weekly schedule ORM model.

    Attributes:
        id: UUID primary key (auto-generated)
        group_id: Owning group
        day_of_week: MONDAY..SATURDAY
        start_time: Start of the block (minute precision)
        end_time: End of the block, strictly after start_time
        classroom: Venue the block is held in
        created_at: Creation timestamp (UTC)
        updated_at: Last modification timestamp (UTC)

    Constraints:
        start_time < end_time (CHECK)
        Non-overlap per group and day is enforced by ScheduleService
        because it is a range predicate, not an equality.

    Deleting a schedule leaves generated sessions in place; their
    schedule_id is set to NULL.
    """

    __tablename__ = "weekly_schedules"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_weekly_schedules_time_range"),
        Index("ix_weekly_schedules_group_day", "group_id", "day_of_week"),
    )

    group_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("groups.id"),
        nullable=False,
        doc="Owning group",
    )

    day_of_week: Mapped[DayOfWeek] = mapped_column(
        Enum(DayOfWeek, native_enum=False),
        nullable=False,
    )

    start_time: Mapped[time] = mapped_column(Time, nullable=False)

    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    classroom: Mapped[Classroom] = mapped_column(
        Enum(Classroom, native_enum=False),
        nullable=False,
    )
