"""
Group directory adapter.

The scheduler does not own groups. It needs three facts about one: that it
exists, which subject it studies and whether it was cancelled. GroupDirectory
is the protocol services depend on; SqlGroupDirectory reads the shared
groups table.

Dependencies: academy_scheduler.boundary.db.CRUD.group_crud
System role: Read-only lookup of collaborator-owned groups
"""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from academy_scheduler.boundary.db.CRUD.group_crud import group_crud
from academy_scheduler.core.enums import GroupStatus
from academy_scheduler.core.exceptions import GroupCancelled, GroupNotFound


@dataclass(frozen=True)
class GroupRef:
    """What the scheduler knows about a group."""

    id: UUID
    subject_id: UUID
    status: GroupStatus

    @property
    def is_cancelled(self) -> bool:
        return self.status is GroupStatus.CANCELLED


class GroupDirectory(Protocol):
    """Lookup of groups by id."""

    async def get_group(self, group_id: UUID) -> GroupRef | None:
        ...


class SqlGroupDirectory:
    """
    GroupDirectory backed by the groups table.

    Shares the caller's database session so lookups happen inside the same
    transaction as the mutation they guard.
    """

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize directory with async database session.

        Args:
            db: Async SQLAlchemy session
        """
        self.db = db

    async def get_group(self, group_id: UUID) -> GroupRef | None:
        group = await group_crud.get_by_id(self.db, group_id)
        if group is None:
            return None
        return GroupRef(
            id=group.id,
            subject_id=group.subject_id,
            status=GroupStatus(group.status),
        )


async def require_group(
    directory: GroupDirectory,
    group_id: UUID,
    allow_cancelled: bool = False,
) -> GroupRef:
    """
    Resolve a group or fail.

    Args:
        directory: Group lookup
        group_id: Group UUID
        allow_cancelled: Accept cancelled groups (read paths)

    Returns:
        GroupRef: The resolved group

    Raises:
        GroupNotFound: Unknown group
        GroupCancelled: Group is cancelled and allow_cancelled is False
    """
    group = await directory.get_group(group_id)
    if group is None:
        raise GroupNotFound(group_id)
    if group.is_cancelled and not allow_cancelled:
        raise GroupCancelled(group_id)
    return group
