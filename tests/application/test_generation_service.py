"""
Test suite for GenerationService.

Covers idempotent generation, preview, default ranges, skipping of slots a
session was postponed or edited away from, per-group serialization and the
collision path that rolls a batch back.

System role: Verification of session generation use cases
"""

import asyncio
import gc
import uuid
from datetime import date, time
from unittest.mock import AsyncMock, patch

import pytest

from academy_scheduler.application.services import generation_service as generation_service_module
from academy_scheduler.application.services.generation_service import (
    GenerationService,
    group_lock,
)
from academy_scheduler.application.services.schedule_service import ScheduleService
from academy_scheduler.application.services.session_service import SessionService
from academy_scheduler.boundary.db.connection import get_async_session_factory
from academy_scheduler.boundary.db.CRUD.group_crud import group_crud
from academy_scheduler.boundary.db.CRUD.session_crud import session_crud
from academy_scheduler.core.enums import (
    Classroom,
    DayOfWeek,
    SessionMode,
    SessionStatus,
    SessionType,
)
from academy_scheduler.core.exceptions import (
    Conflict,
    GroupCancelled,
    GroupNotFound,
    InvalidDateRange,
)


@pytest.fixture
def generation_service(test_async_db, fixed_clock, scheduling_settings) -> GenerationService:
    """Provide GenerationService with a frozen clock."""
    return GenerationService(test_async_db, clock=fixed_clock, settings=scheduling_settings)


@pytest.fixture
def add_schedule(test_async_db):
    """Factory creating a weekly schedule through ScheduleService."""
    service = ScheduleService(test_async_db)

    async def _add(group, day=DayOfWeek.MONDAY, start="09:00", end="11:00",
                   classroom=Classroom.AULA_PORTAL1):
        return await service.create_schedule(group.id, day, start, end, classroom)

    return _add


class TestGenerateSessions:
    """Test suite for GenerationService.generate_sessions()."""

    @pytest.mark.asyncio
    async def test_generate_should_create_one_session_per_matching_day(
        self, generation_service: GenerationService, add_schedule, open_group
    ) -> None:
        """Test Mon 09:00-11:00 over 1-14 Jan 2024 creates sessions on Jan 1 and Jan 8."""
        # Arrange
        schedule = await add_schedule(open_group)

        # Act
        sessions = await generation_service.generate_sessions(
            open_group.id, date(2024, 1, 1), date(2024, 1, 14)
        )

        # Assert
        assert [s.date for s in sessions] == [date(2024, 1, 1), date(2024, 1, 8)]
        for session in sessions:
            assert session.schedule_id == schedule.id
            assert session.subject_id == open_group.subject_id
            assert session.type is SessionType.REGULAR
            assert session.status is SessionStatus.SCHEDULED
            assert session.mode is SessionMode.IN_PERSON
            assert (session.start_time, session.end_time) == (time(9, 0), time(11, 0))

    @pytest.mark.asyncio
    async def test_generate_twice_should_create_nothing_new(
        self, generation_service: GenerationService, add_schedule, open_group, test_async_db
    ) -> None:
        """Test a second run over the same range is a no-op."""
        # Arrange
        await add_schedule(open_group)
        await add_schedule(open_group, DayOfWeek.THURSDAY, "18:00", "20:00")
        first = await generation_service.generate_sessions(
            open_group.id, date(2024, 1, 1), date(2024, 1, 31)
        )

        # Act
        second = await generation_service.generate_sessions(
            open_group.id, date(2024, 1, 1), date(2024, 1, 31)
        )

        # Assert
        assert len(first) == 9
        assert second == []
        assert await session_crud.count(test_async_db, group_id=open_group.id) == 9

    @pytest.mark.asyncio
    async def test_generate_overlapping_ranges_should_only_fill_gaps(
        self, generation_service: GenerationService, add_schedule, open_group
    ) -> None:
        """Test extending a generated range adds only the new dates."""
        # Arrange
        await add_schedule(open_group)
        await generation_service.generate_sessions(
            open_group.id, date(2024, 1, 1), date(2024, 1, 14)
        )

        # Act
        added = await generation_service.generate_sessions(
            open_group.id, date(2024, 1, 8), date(2024, 1, 21)
        )

        # Assert
        assert [s.date for s in added] == [date(2024, 1, 15)]

    @pytest.mark.asyncio
    async def test_generated_sessions_should_match_schedule_weekday(
        self, generation_service: GenerationService, add_schedule, open_group
    ) -> None:
        """Test every session falls on its schedule's day and slots are unique."""
        # Arrange
        schedules = [
            await add_schedule(open_group, DayOfWeek.TUESDAY, "08:00", "10:00"),
            await add_schedule(open_group, DayOfWeek.TUESDAY, "14:00", "16:00"),
            await add_schedule(open_group, DayOfWeek.SATURDAY, "09:00", "12:00"),
        ]
        days = {s.id: s.day_of_week for s in schedules}

        # Act
        sessions = await generation_service.generate_sessions(
            open_group.id, date(2024, 3, 1), date(2024, 4, 30)
        )

        # Assert
        assert sessions
        assert all(DayOfWeek.from_date(s.date) is days[s.schedule_id] for s in sessions)
        slots = [(s.date, s.start_time) for s in sessions]
        assert len(slots) == len(set(slots))

    @pytest.mark.asyncio
    async def test_virtual_schedule_should_generate_online_sessions(
        self, generation_service: GenerationService, add_schedule, open_group
    ) -> None:
        """Test sessions in the virtual room are ONLINE."""
        # Arrange
        await add_schedule(open_group, classroom=Classroom.AULA_VIRTUAL)

        # Act
        sessions = await generation_service.generate_sessions(
            open_group.id, date(2024, 1, 1), date(2024, 1, 7)
        )

        # Assert
        assert [s.mode for s in sessions] == [SessionMode.ONLINE]

    @pytest.mark.asyncio
    async def test_generate_without_dates_should_use_default_window(
        self, generation_service: GenerationService, add_schedule, open_group
    ) -> None:
        """Test today (Wed 3 Jan 2024) plus 28 days covers four Mondays."""
        # Arrange
        await add_schedule(open_group)

        # Act
        sessions = await generation_service.generate_sessions(open_group.id)

        # Assert
        assert [s.date for s in sessions] == [
            date(2024, 1, 8),
            date(2024, 1, 15),
            date(2024, 1, 22),
            date(2024, 1, 29),
        ]

    @pytest.mark.asyncio
    async def test_postponed_origin_should_not_be_regenerated(
        self,
        generation_service: GenerationService,
        add_schedule,
        open_group,
        test_async_db,
        scheduling_settings,
    ) -> None:
        """Test the slot a session was postponed away from stays empty."""
        # Arrange
        await add_schedule(open_group)
        group_id = open_group.id
        sessions = await generation_service.generate_sessions(
            group_id, date(2024, 1, 1), date(2024, 1, 14)
        )
        session_service = SessionService(test_async_db, settings=scheduling_settings)
        await session_service.postpone_session(sessions[0].id, new_date=date(2024, 1, 3))

        # Act
        regenerated = await generation_service.generate_sessions(
            group_id, date(2024, 1, 1), date(2024, 1, 14)
        )

        # Assert
        assert regenerated == []
        assert await session_crud.count(test_async_db, group_id=group_id) == 2

    @pytest.mark.asyncio
    async def test_edited_session_slot_should_not_be_regenerated(
        self,
        generation_service: GenerationService,
        add_schedule,
        open_group,
        test_async_db,
        scheduling_settings,
    ) -> None:
        """Test a generated session moved to another time is not recreated at its old slot."""
        # Arrange
        schedule = await add_schedule(open_group)
        group_id, schedule_id = open_group.id, schedule.id
        sessions = await generation_service.generate_sessions(
            group_id, date(2024, 1, 1), date(2024, 1, 7)
        )
        session_service = SessionService(test_async_db, settings=scheduling_settings)
        await session_service.update_session(
            sessions[0].id, start_time="12:00", end_time="14:00"
        )

        # Act
        regenerated = await generation_service.generate_sessions(
            group_id, date(2024, 1, 1), date(2024, 1, 7)
        )

        # Assert
        assert regenerated == []
        remaining = await session_crud.search(test_async_db, schedule_id=schedule_id)
        assert [(s.date, s.start_time) for s in remaining] == [(date(2024, 1, 1), time(12, 0))]

    @pytest.mark.asyncio
    async def test_group_without_schedules_should_generate_nothing(
        self, generation_service: GenerationService, open_group
    ) -> None:
        """Test an empty registry yields an empty batch."""
        # Act
        sessions = await generation_service.generate_sessions(
            open_group.id, date(2024, 1, 1), date(2024, 12, 31)
        )

        # Assert
        assert sessions == []

    @pytest.mark.asyncio
    async def test_generate_should_refuse_cancelled_group(
        self, generation_service: GenerationService, cancelled_group
    ) -> None:
        """Test cancelled groups get no new sessions."""
        # Act & Assert
        with pytest.raises(GroupCancelled):
            await generation_service.generate_sessions(
                cancelled_group.id, date(2024, 1, 1), date(2024, 1, 14)
            )

    @pytest.mark.asyncio
    async def test_generate_should_refuse_unknown_group(
        self, generation_service: GenerationService
    ) -> None:
        """Test an unknown group raises GroupNotFound."""
        # Act & Assert
        with pytest.raises(GroupNotFound):
            await generation_service.generate_sessions(
                uuid.uuid4(), date(2024, 1, 1), date(2024, 1, 14)
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "start,end",
        [(date(2024, 1, 14), date(2024, 1, 1)), (date(2024, 1, 1), date(2025, 6, 1))],
    )
    async def test_generate_should_reject_bad_ranges(
        self, generation_service: GenerationService, open_group, start: date, end: date
    ) -> None:
        """Test inverted ranges and ranges over the limit are refused."""
        # Act & Assert
        with pytest.raises(InvalidDateRange):
            await generation_service.generate_sessions(open_group.id, start, end)

    @pytest.mark.asyncio
    async def test_unique_index_collision_should_roll_back_batch(
        self, generation_service: GenerationService, add_schedule, open_group, test_async_db
    ) -> None:
        """Test a concurrent writer's row makes the whole batch fail with a retryable Conflict."""
        # Arrange
        schedule = await add_schedule(open_group)
        group_id = open_group.id
        await session_crud.create(
            test_async_db,
            group_id=group_id,
            subject_id=open_group.subject_id,
            schedule_id=schedule.id,
            classroom=Classroom.AULA_PORTAL1,
            date=date(2024, 1, 8),
            start_time=time(9, 0),
            end_time=time(11, 0),
            type=SessionType.REGULAR,
            mode=SessionMode.IN_PERSON,
            status=SessionStatus.SCHEDULED,
        )
        await test_async_db.commit()

        # Act & Assert
        with patch.object(session_crud, "taken_slots", AsyncMock(return_value=set())):
            with pytest.raises(Conflict) as exc_info:
                await generation_service.generate_sessions(
                    group_id, date(2024, 1, 1), date(2024, 1, 14)
                )

        assert exc_info.value.retryable is True
        assert await session_crud.count(test_async_db, group_id=group_id) == 1


class TestPreviewSessions:
    """Test suite for GenerationService.preview_sessions() and resolve_range()."""

    @pytest.mark.asyncio
    async def test_preview_should_not_write(
        self, generation_service: GenerationService, add_schedule, open_group, test_async_db
    ) -> None:
        """Test preview lists candidates and leaves the table untouched."""
        # Arrange
        await add_schedule(open_group)

        # Act
        candidates = await generation_service.preview_sessions(
            open_group.id, date(2024, 1, 1), date(2024, 1, 14)
        )

        # Assert
        assert [c.date for c in candidates] == [date(2024, 1, 1), date(2024, 1, 8)]
        assert await session_crud.count(test_async_db, group_id=open_group.id) == 0

    @pytest.mark.asyncio
    async def test_preview_should_match_generate(
        self, generation_service: GenerationService, add_schedule, open_group
    ) -> None:
        """Test generate creates exactly what preview announced."""
        # Arrange
        await add_schedule(open_group)
        await add_schedule(open_group, DayOfWeek.FRIDAY, "17:00", "19:00")
        preview = await generation_service.preview_sessions(
            open_group.id, date(2024, 1, 1), date(2024, 1, 31)
        )

        # Act
        created = await generation_service.generate_sessions(
            open_group.id, date(2024, 1, 1), date(2024, 1, 31)
        )

        # Assert
        assert [(c.date, c.start_time) for c in preview] == [
            (s.date, s.start_time) for s in created
        ]

    @pytest.mark.asyncio
    async def test_preview_should_allow_cancelled_group(
        self, generation_service: GenerationService, cancelled_group
    ) -> None:
        """Test preview is a read path."""
        # Act
        candidates = await generation_service.preview_sessions(
            cancelled_group.id, date(2024, 1, 1), date(2024, 1, 14)
        )

        # Assert
        assert candidates == []

    def test_resolve_range_should_default_from_clock(
        self, generation_service: GenerationService
    ) -> None:
        """Test the default window starts today and spans the configured days."""
        # Act
        start, end = generation_service.resolve_range()

        # Assert
        assert (start, end) == (date(2024, 1, 3), date(2024, 1, 30))

    def test_resolve_range_should_extend_explicit_start(
        self, generation_service: GenerationService
    ) -> None:
        """Test a start without an end gets the default length."""
        # Act
        start, end = generation_service.resolve_range(date(2024, 2, 1))

        # Assert
        assert end == date(2024, 2, 28)


class TestGroupSerialization:
    """Test suite for per-group serialization of generate_sessions()."""

    @pytest.mark.asyncio
    async def test_concurrent_runs_for_one_group_should_not_duplicate(
        self, sqlite_file_engine, fixed_clock, scheduling_settings
    ) -> None:
        """Test two simultaneous runs on separate sessions create each slot once."""
        # Arrange
        SessionFactory = get_async_session_factory()
        async with SessionFactory() as db:
            group = await group_crud.create(db, name="Group A", subject_id=uuid.uuid4())
            await db.commit()
            await ScheduleService(db).create_schedule(
                group.id, DayOfWeek.MONDAY, "09:00", "11:00", Classroom.AULA_PORTAL1
            )
        group_id = group.id

        async def run():
            async with SessionFactory() as db:
                service = GenerationService(
                    db, clock=fixed_clock, settings=scheduling_settings
                )
                return await service.generate_sessions(
                    group_id, date(2024, 1, 1), date(2024, 1, 14)
                )

        # Act
        results = await asyncio.gather(run(), run(), return_exceptions=True)

        # Assert
        created = [r for r in results if isinstance(r, list)]
        assert sorted(len(r) for r in created) in ([0, 2], [2])
        assert all(isinstance(r, (list, Conflict)) for r in results)
        async with SessionFactory() as db:
            sessions = await session_crud.search(db, group_id=group_id)
        assert [(s.date, s.start_time) for s in sessions] == [
            (date(2024, 1, 1), time(9, 0)),
            (date(2024, 1, 8), time(9, 0)),
        ]

    def test_group_lock_should_be_shared_while_held_and_released_after(self) -> None:
        """Test callers get the same lock for a group, and the entry goes once unused."""
        # Arrange
        group_id = uuid.uuid4()

        # Act
        lock = group_lock(group_id)
        same = group_lock(group_id)

        # Assert
        assert same is lock
        assert group_lock(uuid.uuid4()) is not lock
        del lock, same
        gc.collect()
        assert group_id not in generation_service_module._group_locks
