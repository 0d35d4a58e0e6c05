"""
Session transition CRUD operations.

Append-only access to the lifecycle history. No update or delete helpers
are exposed beyond the inherited ones; rows leave only with their session.

Dependencies: sqlalchemy, academy_scheduler.boundary.db.models
System role: Session audit trail persistence
"""

from datetime import date, time
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academy_scheduler.boundary.db.CRUD.base_crud import BaseCRUD
from academy_scheduler.boundary.db.models.session_model import ClassSessionModel
from academy_scheduler.boundary.db.models.transition_model import SessionTransitionModel
from academy_scheduler.core.enums import SessionStatus
from academy_scheduler.core.lifecycle import RELOCATING_ACTIONS


class TransitionCRUD(BaseCRUD[SessionTransitionModel]):
    """CRUD operations for SessionTransitionModel."""

    def __init__(self) -> None:
        """Initialize TransitionCRUD with SessionTransitionModel."""
        super().__init__(SessionTransitionModel)

    async def record(
        self,
        session: AsyncSession,
        before: ClassSessionModel,
        action: str,
        to_status: SessionStatus,
    ) -> SessionTransitionModel:
        """
        Append one history row describing a session before a transition.

        Args:
            session: Async database session
            before: Snapshot of the session as it was before the step
            action: Lifecycle action name
            to_status: Status after the step

        Returns:
            The created history row
        """
        return await self.create(
            session,
            session_id=before.id,
            group_id=before.group_id,
            action=action,
            from_status=before.status,
            to_status=to_status,
            previous_date=before.date,
            previous_start_time=before.start_time,
            previous_end_time=before.end_time,
            previous_classroom=before.classroom,
            previous_mode=before.mode,
        )

    async def get_by_session(
        self,
        session: AsyncSession,
        session_id: UUID,
    ) -> Sequence[SessionTransitionModel]:
        """
        History of one session, oldest first.

        Args:
            session: Async database session
            session_id: Session UUID

        Returns:
            Transition rows in the order they happened
        """
        stmt = (
            select(SessionTransitionModel)
            .where(SessionTransitionModel.session_id == session_id)
            .order_by(SessionTransitionModel.occurred_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def vacated_slots(
        self,
        session: AsyncSession,
        group_id: UUID,
        date_from: date,
        date_to: date,
    ) -> set[tuple[date, time]]:
        """
        Slots a group's sessions were moved away from, within a range.

        Covers postponements and direct edits of date or time, so generation
        does not recreate an occurrence that now lives elsewhere.

        Args:
            session: Async database session
            group_id: Group UUID
            date_from: First original date (inclusive)
            date_to: Last original date (inclusive)

        Returns:
            (previous_date, previous_start_time) pairs
        """
        stmt = select(
            SessionTransitionModel.previous_date,
            SessionTransitionModel.previous_start_time,
        ).where(
            SessionTransitionModel.group_id == group_id,
            SessionTransitionModel.action.in_(sorted(RELOCATING_ACTIONS)),
            SessionTransitionModel.previous_date >= date_from,
            SessionTransitionModel.previous_date <= date_to,
        )
        result = await session.execute(stmt)
        return {(row.previous_date, row.previous_start_time) for row in result}


transition_crud = TransitionCRUD()
