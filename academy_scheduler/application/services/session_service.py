"""
Class session service orchestrator.

Coordinates session lifecycle operations (start, complete, cancel, postpone,
delete), manual session creation and edits, and session queries.

Every lifecycle step is a compare-and-set on (id, status, version): a
concurrent writer makes the update match nothing and the step fails without
touching state. Successful steps append a history row.

Dependencies: academy_scheduler.boundary.db.CRUD, academy_scheduler.core
System role: Session use case orchestration
"""

import logging
from datetime import date
from typing import Any, NoReturn, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from academy_scheduler.application.adapters.group_directory import (
    GroupDirectory,
    SqlGroupDirectory,
    require_group,
)
from academy_scheduler.boundary.db.CRUD.schedule_crud import schedule_crud
from academy_scheduler.boundary.db.CRUD.session_crud import session_crud
from academy_scheduler.boundary.db.CRUD.transition_crud import transition_crud
from academy_scheduler.boundary.db.models.session_model import ClassSessionModel
from academy_scheduler.boundary.db.models.transition_model import SessionTransitionModel
from academy_scheduler.configs import get_settings
from academy_scheduler.configs.scheduling import SchedulingSettings
from academy_scheduler.core import lifecycle, time_grid
from academy_scheduler.core.enums import (
    Classroom,
    DayOfWeek,
    SessionMode,
    SessionStatus,
    SessionType,
)
from academy_scheduler.core.exceptions import (
    InvalidTransition,
    PlacementConflict,
    SchedulingError,
    SessionNotFound,
    StaleVersion,
    ValidationError,
)
from academy_scheduler.core.generation import mode_for_classroom
from academy_scheduler.core.lifecycle import SessionAction, Transition

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"date", "start_time", "end_time", "classroom", "mode"})


class SessionService:
    """Class session orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        groups: GroupDirectory | None = None,
        settings: SchedulingSettings | None = None,
    ) -> None:
        """
        Initialize session service with async database session.

        Args:
            db: Async SQLAlchemy session
            groups: Group lookup (defaults to the groups table)
            settings: Scheduling settings (defaults to application settings)
        """
        self.db = db
        self.groups = groups or SqlGroupDirectory(db)
        self.settings = settings or get_settings().scheduling

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    async def get_session(self, session_id: UUID) -> ClassSessionModel:
        """
        Get session by ID.

        Raises:
            SessionNotFound: Unknown session
        """
        session = await session_crud.get_by_id(self.db, session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    async def list_sessions(
        self,
        limit: int | None = None,
        offset: int = 0,
        **filters: Any,
    ) -> tuple[Sequence[ClassSessionModel], int]:
        """
        List sessions matching filters, ordered by date then start time.

        Args:
            limit: Maximum number of sessions to return
            offset: Number of sessions to skip
            **filters: group_id, subject_id, schedule_id, status, type, mode,
                date_from, date_to

        Returns:
            tuple: (page of sessions, total matching)
        """
        filters = {key: value for key, value in filters.items() if value is not None}
        date_from, date_to = filters.get("date_from"), filters.get("date_to")
        if date_from is not None and date_to is not None and date_to < date_from:
            raise ValidationError("date_to must not be before date_from", field="date_to")

        sessions = await session_crud.search(self.db, limit=limit, offset=offset, **filters)
        total = await session_crud.count(self.db, **filters)
        return sessions, total

    async def list_sessions_by_group(
        self,
        group_id: UUID,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[ClassSessionModel]:
        """
        List a group's sessions.

        Raises:
            GroupNotFound: Unknown group
        """
        await require_group(self.groups, group_id, allow_cancelled=True)
        return await session_crud.search(self.db, limit=limit, offset=offset, group_id=group_id)

    async def list_sessions_by_subject(
        self,
        subject_id: UUID,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[ClassSessionModel]:
        """List sessions teaching a subject."""
        return await session_crud.search(
            self.db, limit=limit, offset=offset, subject_id=subject_id
        )

    async def get_history(self, session_id: UUID) -> Sequence[SessionTransitionModel]:
        """
        Lifecycle history of a session, oldest first.

        Raises:
            SessionNotFound: Unknown session
        """
        if not await session_crud.exists(self.db, session_id):
            raise SessionNotFound(session_id)
        return await transition_crud.get_by_session(self.db, session_id)

    # ------------------------------------------------------------------ #
    # Manual sessions
    # ------------------------------------------------------------------ #

    async def _ensure_slot_free(
        self,
        group_id: UUID | None,
        on_date: date,
        start_time: Any,
        classroom: Classroom,
        exclude_id: UUID | None = None,
    ) -> None:
        if group_id is None:
            return
        other = await session_crud.get_at_slot(
            self.db, group_id, on_date, start_time, exclude_id=exclude_id
        )
        if other is not None:
            raise PlacementConflict(
                other.id,
                day=DayOfWeek.from_date(on_date),
                classroom=classroom,
                details={
                    "group_id": group_id,
                    "date": on_date,
                    "start_time": time_grid.format_time(start_time),
                },
            )

    async def create_session(
        self,
        type: SessionType | str,
        classroom: Classroom | str,
        date: date,
        start_time: time_grid.TimeLike,
        end_time: time_grid.TimeLike,
        group_id: UUID | None = None,
        subject_id: UUID | None = None,
        mode: SessionMode | str | None = None,
    ) -> ClassSessionModel:
        """
        Create an EXTRA or SCHEDULING session by hand.

        EXTRA sessions belong to a group and inherit its subject unless one is
        given. SCHEDULING sessions have no group and need a subject. REGULAR
        sessions only come from generation.

        Args:
            type: EXTRA or SCHEDULING
            classroom: Venue
            date: Calendar date
            start_time: Start time
            end_time: End time, after start_time
            group_id: Owning group (EXTRA only)
            subject_id: Subject (required for SCHEDULING)
            mode: Attendance mode, derived from the classroom when omitted

        Returns:
            ClassSessionModel: Created session in SCHEDULED status

        Raises:
            ValidationError: Type/group/subject combination not allowed
            InvalidTimeFormat: Malformed times or start >= end
            GroupNotFound: Unknown group
            GroupCancelled: Group is cancelled
            PlacementConflict: The group already has a session at that slot
        """
        try:
            session_type = SessionType(type)
            if session_type is SessionType.REGULAR:
                raise ValidationError(
                    "Regular sessions are created by generation", field="type"
                )
            if session_type is SessionType.EXTRA:
                if group_id is None:
                    raise ValidationError("Extra sessions need a group", field="group_id")
                group = await require_group(self.groups, group_id)
                subject_id = subject_id or group.subject_id
            else:
                if group_id is not None:
                    raise ValidationError(
                        "Scheduling sessions have no group", field="group_id"
                    )
                if subject_id is None:
                    raise ValidationError(
                        "Scheduling sessions need a subject", field="subject_id"
                    )

            start = time_grid.parse_time(start_time)
            end = time_grid.parse_time(end_time)
            time_grid.validate_range(start, end)
            room = Classroom(classroom)
            await self._ensure_slot_free(group_id, date, start, room)

            session = await session_crud.create(
                self.db,
                subject_id=subject_id,
                group_id=group_id,
                classroom=room,
                date=date,
                start_time=start,
                end_time=end,
                type=session_type,
                mode=SessionMode(mode) if mode else mode_for_classroom(
                    room, self.settings.default_session_mode
                ),
                status=SessionStatus.SCHEDULED,
            )
            await self.db.commit()
            logger.info(
                "Session created",
                extra={
                    "session_id": str(session.id),
                    "session_type": session_type.value,
                    "group_id": str(group_id) if group_id else None,
                },
            )
            return session
        except SchedulingError:
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "Failed to create session",
                extra={"error": str(e), "group_id": str(group_id) if group_id else None},
            )
            raise

    async def update_session(
        self,
        session_id: UUID,
        expected_version: int | None = None,
        **fields: Any,
    ) -> ClassSessionModel:
        """
        Edit date, time, classroom or mode of a SCHEDULED session.

        A session generated from a weekly schedule keeps its weekday; moving
        it to another day is a postponement. The slot before the edit is kept
        in the session history.

        Args:
            session_id: Session UUID
            expected_version: Version the caller read (optional)
            **fields: date, start_time, end_time, classroom, mode

        Returns:
            ClassSessionModel: Updated session

        Raises:
            SessionNotFound: Unknown session
            InvalidTransition: Session is no longer SCHEDULED
            StaleVersion: Session changed since expected_version
            ValidationError: Unknown field or weekday change of a generated session
            InvalidTimeFormat: Malformed times or start >= end
            PlacementConflict: The group already has a session at the new slot
        """
        try:
            unknown = set(fields) - EDITABLE_FIELDS
            if unknown:
                raise ValidationError(
                    f"Cannot update fields: {', '.join(sorted(unknown))}",
                    field=sorted(unknown)[0],
                )
            session = await self.get_session(session_id)
            lifecycle.ensure_editable(session.status, session_id=session_id)
            version = self._check_version(session, expected_version)
            if session.group_id is not None:
                await require_group(self.groups, session.group_id)

            updates = {key: value for key, value in fields.items() if value is not None}
            if not updates:
                return session

            new_date = updates.get("date", session.date)
            start = time_grid.parse_time(updates.get("start_time", session.start_time))
            end = time_grid.parse_time(updates.get("end_time", session.end_time))
            room = Classroom(updates.get("classroom", session.classroom))
            mode = SessionMode(updates.get("mode", session.mode))
            time_grid.validate_range(start, end)

            if new_date != session.date and session.schedule_id is not None:
                schedule = await schedule_crud.get_by_id(self.db, session.schedule_id)
                if schedule is not None and DayOfWeek.from_date(new_date) != schedule.day_of_week:
                    raise ValidationError(
                        "A generated session must stay on its schedule's weekday; "
                        "postpone it instead",
                        field="date",
                        details={
                            "invariant": "date_matches_schedule_day",
                            "schedule_id": session.schedule_id,
                            "day_of_week": schedule.day_of_week,
                        },
                    )

            if (new_date, start) != (session.date, session.start_time):
                await self._ensure_slot_free(
                    session.group_id, new_date, start, room, exclude_id=session_id
                )

            await transition_crud.record(
                self.db, session, lifecycle.EDIT_ACTION, SessionStatus.SCHEDULED
            )
            updated = await session_crud.compare_and_set(
                self.db,
                session_id,
                expected_status=SessionStatus.SCHEDULED,
                expected_version=version,
                date=new_date,
                start_time=start,
                end_time=end,
                classroom=room,
                mode=mode,
            )
            if updated is None:
                await self._raise_lost_race(
                    session_id, SessionStatus.SCHEDULED, lifecycle.EDIT_ACTION, version
                )
            await self.db.commit()
            logger.info(
                "Session updated",
                extra={"session_id": str(session_id), "updates": sorted(updates)},
            )
            return updated
        except SchedulingError:
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "Failed to update session",
                extra={"error": str(e), "session_id": str(session_id)},
            )
            raise

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    @staticmethod
    def _check_version(session: ClassSessionModel, expected_version: int | None) -> int:
        if expected_version is not None and expected_version != session.version:
            raise StaleVersion(session.id, expected_version, session.version)
        return session.version

    async def _raise_lost_race(
        self,
        session_id: UUID,
        expected_status: SessionStatus,
        requested: str,
        expected_version: int,
    ) -> NoReturn:
        """Re-read after a guarded write matched nothing and raise the reason."""
        await self.db.rollback()
        current = await session_crud.get_by_id(self.db, session_id)
        if current is None:
            raise SessionNotFound(session_id)
        if current.status != expected_status:
            raise InvalidTransition(current.status, requested, session_id=session_id)
        raise StaleVersion(session_id, expected_version, current.version)

    async def _apply(
        self,
        session_id: UUID,
        action: SessionAction,
        expected_version: int | None = None,
        **values: Any,
    ) -> ClassSessionModel:
        """
        Run one lifecycle step: validate, write history, compare-and-set.

        Args:
            session_id: Session UUID
            action: Lifecycle action
            expected_version: Version the caller read (optional)
            **values: Extra columns to set with the new status

        Returns:
            ClassSessionModel: Session after the step
        """
        session = await self.get_session(session_id)
        plan: Transition = lifecycle.plan_transition(session.status, action, session_id)
        version = self._check_version(session, expected_version)

        await transition_crud.record(self.db, session, plan.action.value, plan.to_status)
        updated = await session_crud.compare_and_set(
            self.db,
            session_id,
            expected_status=plan.from_status,
            expected_version=version,
            status=plan.to_status,
            **values,
        )
        if updated is None:
            await self._raise_lost_race(session_id, plan.from_status, plan.action.value, version)
        await self.db.commit()
        logger.info(
            "Session transitioned",
            extra={
                "session_id": str(session_id),
                "action": plan.action.value,
                "from_status": plan.from_status.value,
                "to_status": plan.to_status.value,
            },
        )
        return updated

    async def _run(
        self,
        session_id: UUID,
        action: SessionAction,
        expected_version: int | None = None,
        **values: Any,
    ) -> ClassSessionModel:
        try:
            return await self._apply(session_id, action, expected_version, **values)
        except SchedulingError:
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "Failed to transition session",
                extra={"error": str(e), "session_id": str(session_id), "action": action.value},
            )
            raise

    async def start_session(
        self,
        session_id: UUID,
        expected_version: int | None = None,
    ) -> ClassSessionModel:
        """
        SCHEDULED -> IN_PROGRESS.

        Raises:
            SessionNotFound: Unknown session
            InvalidTransition: Session is not SCHEDULED
            StaleVersion: Session changed since expected_version
        """
        return await self._run(session_id, SessionAction.START, expected_version)

    async def complete_session(
        self,
        session_id: UUID,
        expected_version: int | None = None,
    ) -> ClassSessionModel:
        """
        IN_PROGRESS -> COMPLETED.

        Raises:
            SessionNotFound: Unknown session
            InvalidTransition: Session is not IN_PROGRESS
            StaleVersion: Session changed since expected_version
        """
        return await self._run(session_id, SessionAction.COMPLETE, expected_version)

    async def cancel_session(
        self,
        session_id: UUID,
        expected_version: int | None = None,
    ) -> ClassSessionModel:
        """
        SCHEDULED -> CANCELLED.

        Raises:
            SessionNotFound: Unknown session
            InvalidTransition: Session is not SCHEDULED
            StaleVersion: Session changed since expected_version
        """
        return await self._run(session_id, SessionAction.CANCEL, expected_version)

    async def postpone_session(
        self,
        session_id: UUID,
        new_date: date,
        new_start_time: time_grid.TimeLike | None = None,
        new_end_time: time_grid.TimeLike | None = None,
        new_classroom: Classroom | str | None = None,
        new_mode: SessionMode | str | None = None,
        expected_version: int | None = None,
    ) -> ClassSessionModel:
        """
        SCHEDULED -> POSTPONED, relocating the session in place.

        The id is preserved. Omitted values keep the session's current ones.
        The previous slot is kept in the session history.

        Args:
            session_id: Session UUID
            new_date: Date the class moves to
            new_start_time: New start time (optional)
            new_end_time: New end time (optional)
            new_classroom: New venue (optional)
            new_mode: New attendance mode (optional)
            expected_version: Version the caller read (optional)

        Returns:
            ClassSessionModel: Postponed session

        Raises:
            SessionNotFound: Unknown session
            InvalidTransition: Session is not SCHEDULED
            StaleVersion: Session changed since expected_version
            GroupCancelled: The session's group is cancelled
            InvalidTimeFormat: Malformed times or start >= end
            PlacementConflict: The group already has a session at the new slot
        """
        try:
            session = await self.get_session(session_id)
            lifecycle.plan_transition(session.status, SessionAction.POSTPONE, session_id)
            if session.group_id is not None:
                await require_group(self.groups, session.group_id)

            start = time_grid.parse_time(
                new_start_time if new_start_time is not None else session.start_time
            )
            end = time_grid.parse_time(
                new_end_time if new_end_time is not None else session.end_time
            )
            time_grid.validate_range(start, end)
            room = Classroom(new_classroom or session.classroom)
            mode = SessionMode(new_mode or session.mode)
            await self._ensure_slot_free(
                session.group_id, new_date, start, room, exclude_id=session_id
            )

            return await self._apply(
                session_id,
                SessionAction.POSTPONE,
                expected_version,
                postponed_to_date=new_date,
                date=new_date,
                start_time=start,
                end_time=end,
                classroom=room,
                mode=mode,
            )
        except SchedulingError:
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "Failed to postpone session",
                extra={"error": str(e), "session_id": str(session_id)},
            )
            raise

    async def delete_session(
        self,
        session_id: UUID,
        expected_version: int | None = None,
    ) -> bool:
        """
        Hard-delete a SCHEDULED session and its history.

        Returns:
            bool: True if deleted

        Raises:
            SessionNotFound: Unknown session
            InvalidTransition: Session is not SCHEDULED
            StaleVersion: Session changed since expected_version
        """
        try:
            session = await self.get_session(session_id)
            plan = lifecycle.plan_transition(session.status, SessionAction.DELETE, session_id)
            version = self._check_version(session, expected_version)

            deleted = await session_crud.delete_if(
                self.db, session_id, plan.from_status, version
            )
            if not deleted:
                await self._raise_lost_race(session_id, plan.from_status, plan.action.value, version)
            await self.db.commit()
            logger.info("Session deleted", extra={"session_id": str(session_id)})
            return True
        except SchedulingError:
            await self.db.rollback()
            raise
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "Failed to delete session",
                extra={"error": str(e), "session_id": str(session_id)},
            )
            raise
