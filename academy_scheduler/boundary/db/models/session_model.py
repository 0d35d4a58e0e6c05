"""
Class session ORM model.

A concrete, dated occurrence of a class, generated from a weekly schedule
or created manually. Named ClassSessionModel to keep it apart from the
SQLAlchemy session.

Dependencies: sqlalchemy, academy_scheduler.boundary.db.base
System role: Session persistence and lifecycle state
"""

import uuid
import datetime as dt

from sqlalchemy import CheckConstraint, Date, Enum, ForeignKey, Index, Time, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy_scheduler.boundary.db.base import Base, UUIDMixin, TimestampMixin, VersionMixin
from academy_scheduler.core import time_grid
from academy_scheduler.core.enums import Classroom, SessionMode, SessionStatus, SessionType


class ClassSessionModel(Base, UUIDMixin, TimestampMixin, VersionMixin):
    """
    Class session ORM model.

    Attributes:
        id: UUID primary key (auto-generated, preserved across postponement)
        subject_id: Subject taught
        group_id: Owning group, NULL for SCHEDULING sessions
        schedule_id: Originating weekly schedule, NULL for manual sessions
        classroom: Venue
        date: Calendar date of the occurrence
        start_time: Start time (minute precision)
        end_time: End time, strictly after start_time
        status: Lifecycle state
        type: REGULAR/EXTRA/SCHEDULING
        mode: IN_PERSON/ONLINE/DUAL
        postponed_to_date: Set only when status is POSTPONED
        version: Optimistic-concurrency counter
        transitions: Append-only lifecycle history

    Constraints:
        (group_id, date, start_time) UNIQUE among schedule-derived rows
        start_time < end_time (CHECK)
    """

    __tablename__ = "class_sessions"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_class_sessions_time_range"),
        Index(
            "uq_class_sessions_group_date_start",
            "group_id",
            "date",
            "start_time",
            unique=True,
            postgresql_where=text("schedule_id IS NOT NULL"),
            sqlite_where=text("schedule_id IS NOT NULL"),
        ),
        Index("ix_class_sessions_date", "date"),
        Index("ix_class_sessions_subject", "subject_id"),
    )

    subject_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        doc="Subject taught in this session",
    )

    group_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("groups.id"),
        nullable=True,
        default=None,
        doc="Owning group (NULL for ad-hoc scheduling sessions)",
    )

    schedule_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("weekly_schedules.id", ondelete="SET NULL"),
        nullable=True,
        default=None,
        doc="Weekly schedule this session was generated from",
    )

    classroom: Mapped[Classroom] = mapped_column(
        Enum(Classroom, native_enum=False),
        nullable=False,
    )

    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    start_time: Mapped[dt.time] = mapped_column(Time, nullable=False)

    end_time: Mapped[dt.time] = mapped_column(Time, nullable=False)

    status: Mapped[SessionStatus] = mapped_column(
        Enum(SessionStatus, native_enum=False),
        nullable=False,
        default=SessionStatus.SCHEDULED,
    )

    type: Mapped[SessionType] = mapped_column(
        Enum(SessionType, native_enum=False),
        nullable=False,
        default=SessionType.REGULAR,
    )

    mode: Mapped[SessionMode] = mapped_column(
        Enum(SessionMode, native_enum=False),
        nullable=False,
        default=SessionMode.IN_PERSON,
    )

    postponed_to_date: Mapped[dt.date | None] = mapped_column(
        Date,
        nullable=True,
        default=None,
    )

    # Relationships
    transitions = relationship(
        "SessionTransitionModel",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SessionTransitionModel.occurred_at",
    )

    @property
    def duration_minutes(self) -> int:
        return time_grid.duration_minutes(self.start_time, self.end_time)
