"""
Session transition ORM model.

Append-only history of lifecycle transitions and direct edits. Keeps the
slot a session occupied before each step, so a moved class can still be
traced back to the date it was originally planned for.

Dependencies: sqlalchemy, academy_scheduler.boundary.db.base
System role: Session audit trail
"""

import uuid
from datetime import date, datetime, time, timezone

from sqlalchemy import Date, DateTime, Enum, ForeignKey, String, Time, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy_scheduler.boundary.db.base import Base, UUIDMixin
from academy_scheduler.core.enums import Classroom, SessionMode, SessionStatus


class SessionTransitionModel(Base, UUIDMixin):
    """
    One lifecycle step of a class session.

    Attributes:
        id: UUID primary key
        session_id: Session the step applied to (rows go with the session)
        group_id: Copy of the session's group for per-group history queries
        action: start/complete/cancel/postpone, or update for a direct edit
        from_status: Status before the step
        to_status: Status after the step
        previous_date: Session date before the step
        previous_start_time: Start time before the step
        previous_end_time: End time before the step
        previous_classroom: Classroom before the step
        previous_mode: Mode before the step
        occurred_at: When the step was recorded (UTC)
    """

    __tablename__ = "session_transitions"

    session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("class_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    group_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        index=True,
    )

    action: Mapped[str] = mapped_column(String(32), nullable=False)

    from_status: Mapped[SessionStatus] = mapped_column(
        Enum(SessionStatus, native_enum=False),
        nullable=False,
    )

    to_status: Mapped[SessionStatus] = mapped_column(
        Enum(SessionStatus, native_enum=False),
        nullable=False,
    )

    previous_date: Mapped[date] = mapped_column(Date, nullable=False)

    previous_start_time: Mapped[time] = mapped_column(Time, nullable=False)

    previous_end_time: Mapped[time] = mapped_column(Time, nullable=False)

    previous_classroom: Mapped[Classroom] = mapped_column(
        Enum(Classroom, native_enum=False),
        nullable=False,
    )

    previous_mode: Mapped[SessionMode] = mapped_column(
        Enum(SessionMode, native_enum=False),
        nullable=False,
    )

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    session = relationship("ClassSessionModel", back_populates="transitions")
