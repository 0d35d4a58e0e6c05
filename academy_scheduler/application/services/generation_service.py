"""
Session generation service orchestrator.

Materializes a group's weekly schedules into concrete sessions over a date
range. Generation is idempotent: slots the group already occupies, and slots
a session was postponed or edited away from, are skipped, so running it twice
creates nothing the second time.

Runs for the same group are serialized by an in-process asyncio lock. Across
processes the unique (group_id, date, start_time) index decides; the loser
rolls back its whole batch and gets a retryable Conflict.

Dependencies: academy_scheduler.boundary.db.CRUD, academy_scheduler.core.generation
System role: Generate/preview use case orchestration
"""

import asyncio
import logging
import weakref
from datetime import date, timedelta
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from academy_scheduler.application.adapters.clock import Clock, SystemClock
from academy_scheduler.application.adapters.group_directory import (
    GroupDirectory,
    GroupRef,
    SqlGroupDirectory,
    require_group,
)
from academy_scheduler.boundary.db.CRUD.schedule_crud import schedule_crud
from academy_scheduler.boundary.db.CRUD.session_crud import session_crud
from academy_scheduler.boundary.db.CRUD.transition_crud import transition_crud
from academy_scheduler.boundary.db.models.session_model import ClassSessionModel
from academy_scheduler.configs import get_settings
from academy_scheduler.configs.scheduling import SchedulingSettings
from academy_scheduler.core.exceptions import Conflict, SchedulingError
from academy_scheduler.core.generation import (
    ExpansionResult,
    SessionCandidate,
    expand_schedules,
    validate_date_range,
)
from academy_scheduler.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)

# One lock per group, shared by every service instance in the process. An
# entry lives only while some caller holds or awaits the lock.
_group_locks: weakref.WeakValueDictionary[UUID, asyncio.Lock] = weakref.WeakValueDictionary()


def group_lock(group_id: UUID) -> asyncio.Lock:
    lock = _group_locks.get(group_id)
    if lock is None:
        lock = asyncio.Lock()
        _group_locks[group_id] = lock
    return lock


class GenerationService:
    """Session generation orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        groups: GroupDirectory | None = None,
        clock: Clock | None = None,
        settings: SchedulingSettings | None = None,
    ) -> None:
        """
        Initialize generation service with async database session.

        Args:
            db: Async SQLAlchemy session
            groups: Group lookup (defaults to the groups table)
            clock: Source of "today" for the default range
            settings: Scheduling settings (defaults to application settings)
        """
        self.db = db
        self.groups = groups or SqlGroupDirectory(db)
        self.clock = clock or SystemClock()
        self.settings = settings or get_settings().scheduling

    def resolve_range(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> tuple[date, date]:
        """
        Fill in omitted range bounds and validate the result.

        A missing start is today; a missing end is start plus the configured
        default length.

        Raises:
            InvalidDateRange: Inverted or longer than max_generation_days
        """
        start_date = start_date or self.clock.today()
        end_date = end_date or start_date + timedelta(
            days=self.settings.default_generation_days - 1
        )
        validate_date_range(start_date, end_date, self.settings.max_generation_days)
        return start_date, end_date

    async def _expand(
        self,
        group: GroupRef,
        start_date: date,
        end_date: date,
    ) -> ExpansionResult:
        schedules = await schedule_crud.get_by_group(self.db, group.id)
        if not schedules:
            return ExpansionResult()
        taken = await session_crud.taken_slots(self.db, group.id, start_date, end_date)
        taken |= await transition_crud.vacated_slots(
            self.db, group.id, start_date, end_date
        )
        return expand_schedules(
            schedules,
            start_date,
            end_date,
            subject_id=group.subject_id,
            default_mode=self.settings.default_session_mode,
            taken_slots=taken,
        )

    async def preview_sessions(
        self,
        group_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[SessionCandidate]:
        """
        Sessions generate_sessions would create, without writing anything.

        Args:
            group_id: Group UUID
            start_date: First date (inclusive), defaults to today
            end_date: Last date (inclusive), defaults to the configured window

        Returns:
            list[SessionCandidate]: Candidates ordered by date then schedule

        Raises:
            GroupNotFound: Unknown group
            InvalidDateRange: Inverted or too long range
        """
        start_date, end_date = self.resolve_range(start_date, end_date)
        group = await require_group(self.groups, group_id, allow_cancelled=True)
        result = await self._expand(group, start_date, end_date)
        logger.info(
            "Sessions previewed",
            extra={
                "group_id": str(group_id),
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
                "candidates": len(result.candidates),
                "skipped": len(result.skipped),
            },
        )
        return result.candidates

    async def generate_sessions(
        self,
        group_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[ClassSessionModel]:
        """
        Create the sessions a group's schedules call for in a date range.

        All new sessions are written in one transaction. Existing sessions are
        never modified.

        Args:
            group_id: Group UUID
            start_date: First date (inclusive), defaults to today
            end_date: Last date (inclusive), defaults to the configured window

        Returns:
            list[ClassSessionModel]: Created sessions, ordered by date then schedule

        Raises:
            GroupNotFound: Unknown group
            GroupCancelled: Group is cancelled
            InvalidDateRange: Inverted or too long range
            Conflict: Another process generated for the group at the same time
        """
        start_date, end_date = self.resolve_range(start_date, end_date)
        async with group_lock(group_id):
            try:
                group = await require_group(self.groups, group_id)
                result = await self._expand(group, start_date, end_date)
                sessions = await session_crud.create_many(
                    self.db, (candidate.as_fields() for candidate in result.candidates)
                )
                await self.db.commit()
            except IntegrityError as e:
                await self.db.rollback()
                logger.warning(
                    "Session generation collided, batch rolled back",
                    extra={"group_id": str(group_id), "error": str(e.orig)},
                )
                raise Conflict(
                    group_id,
                    details={
                        "start_date": start_date,
                        "end_date": end_date,
                    },
                ) from e
            except SchedulingError:
                await self.db.rollback()
                raise
            except Exception as e:
                await self.db.rollback()
                logger.error(
                    "Failed to generate sessions",
                    extra={"error": str(e), "group_id": str(group_id)},
                )
                raise

        log_with_context(
            logger,
            logging.INFO,
            "Sessions generated",
            group_id=group_id,
            start_date=start_date,
            end_date=end_date,
            created_count=len(sessions),
            skipped_count=len(result.skipped),
        )
        return sessions
