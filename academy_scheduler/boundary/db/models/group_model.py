"""
Group reference ORM model.

Read-only mapping of the groups table owned by group administration.
The scheduler only reads existence, status and subject from it.

Dependencies: sqlalchemy, academy_scheduler.boundary.db.base
System role: Group lookup for schedule and session guards
"""

import uuid

from sqlalchemy import Enum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from academy_scheduler.boundary.db.base import Base, UUIDMixin, TimestampMixin
from academy_scheduler.core.enums import GroupStatus


class GroupModel(Base, UUIDMixin, TimestampMixin):
    """
    Academic group as seen by the scheduler.

    Attributes:
        id: UUID primary key
        name: Display name
        subject_id: Subject the group studies (copied onto generated sessions)
        status: OPEN/CLOSED/CANCELLED; cancelled groups block mutations
    """

    __tablename__ = "groups"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Group display name",
    )

    subject_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        doc="Subject taught to this group",
    )

    status: Mapped[GroupStatus] = mapped_column(
        Enum(GroupStatus, native_enum=False),
        nullable=False,
        default=GroupStatus.OPEN,
    )
