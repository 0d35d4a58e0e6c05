"""
Test suite for SessionService.

Covers manual creation rules, edits, the lifecycle state machine with its
history trail, postponement and optimistic concurrency. Runs against
in-memory SQLite.

System role: Verification of session use cases
"""

import uuid
from datetime import date, time

import pytest
from sqlalchemy import update

from academy_scheduler.application.services.session_service import SessionService
from academy_scheduler.boundary.db.CRUD.group_crud import group_crud
from academy_scheduler.boundary.db.CRUD.schedule_crud import schedule_crud
from academy_scheduler.boundary.db.CRUD.session_crud import session_crud
from academy_scheduler.boundary.db.models.session_model import ClassSessionModel
from academy_scheduler.core.enums import (
    Classroom,
    DayOfWeek,
    GroupStatus,
    SessionMode,
    SessionStatus,
    SessionType,
)
from academy_scheduler.core.exceptions import (
    GroupCancelled,
    InvalidTimeFormat,
    InvalidTransition,
    PlacementConflict,
    SessionNotFound,
    StaleVersion,
    ValidationError,
)


@pytest.fixture
def session_service(test_async_db, scheduling_settings) -> SessionService:
    """Provide SessionService bound to the test database."""
    return SessionService(test_async_db, settings=scheduling_settings)


@pytest.fixture
def extra_session(session_service: SessionService, open_group):
    """Factory creating an EXTRA session for the open group."""

    async def _make(on: date = date(2024, 1, 8), start: str = "09:00", end: str = "11:00"):
        return await session_service.create_session(
            type=SessionType.EXTRA,
            classroom=Classroom.AULA_PORTAL1,
            date=on,
            start_time=start,
            end_time=end,
            group_id=open_group.id,
        )

    return _make


class TestCreateSession:
    """Test suite for SessionService.create_session()."""

    @pytest.mark.asyncio
    async def test_extra_session_should_inherit_group_subject(
        self, session_service: SessionService, open_group
    ) -> None:
        """Test an EXTRA session takes the group's subject and starts SCHEDULED."""
        # Act
        session = await session_service.create_session(
            type="EXTRA",
            classroom="AULA_PORTAL2",
            date=date(2024, 1, 8),
            start_time="18:00",
            end_time="20:00",
            group_id=open_group.id,
        )

        # Assert
        assert session.subject_id == open_group.subject_id
        assert session.status is SessionStatus.SCHEDULED
        assert session.type is SessionType.EXTRA
        assert session.schedule_id is None
        assert session.mode is SessionMode.IN_PERSON
        assert session.version == 1

    @pytest.mark.asyncio
    async def test_virtual_classroom_should_default_to_online(
        self, session_service: SessionService, open_group
    ) -> None:
        """Test mode follows the classroom when not given."""
        # Act
        session = await session_service.create_session(
            type=SessionType.EXTRA,
            classroom=Classroom.AULA_VIRTUAL,
            date=date(2024, 1, 8),
            start_time="18:00",
            end_time="20:00",
            group_id=open_group.id,
        )

        # Assert
        assert session.mode is SessionMode.ONLINE

    @pytest.mark.asyncio
    async def test_scheduling_session_should_have_no_group(
        self, session_service: SessionService
    ) -> None:
        """Test SCHEDULING sessions are stored with a subject and no group."""
        # Arrange
        subject_id = uuid.uuid4()

        # Act
        session = await session_service.create_session(
            type=SessionType.SCHEDULING,
            classroom=Classroom.AULA_PORTAL1,
            date=date(2024, 1, 8),
            start_time="10:00",
            end_time="11:00",
            subject_id=subject_id,
            mode=SessionMode.DUAL,
        )

        # Assert
        assert session.group_id is None
        assert session.subject_id == subject_id
        assert session.mode is SessionMode.DUAL

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "session_type,with_group,with_subject,field",
        [
            (SessionType.REGULAR, True, False, "type"),
            (SessionType.EXTRA, False, True, "group_id"),
            (SessionType.SCHEDULING, True, True, "group_id"),
            (SessionType.SCHEDULING, False, False, "subject_id"),
        ],
    )
    async def test_create_session_should_reject_bad_combinations(
        self,
        session_service: SessionService,
        open_group,
        session_type: SessionType,
        with_group: bool,
        with_subject: bool,
        field: str,
    ) -> None:
        """Test type, group and subject must agree."""
        # Act & Assert
        with pytest.raises(ValidationError) as exc_info:
            await session_service.create_session(
                type=session_type,
                classroom=Classroom.AULA_PORTAL1,
                date=date(2024, 1, 8),
                start_time="10:00",
                end_time="11:00",
                group_id=open_group.id if with_group else None,
                subject_id=uuid.uuid4() if with_subject else None,
            )

        assert exc_info.value.details["field"] == field

    @pytest.mark.asyncio
    async def test_create_session_should_reject_inverted_times(
        self, session_service: SessionService, open_group
    ) -> None:
        """Test start must precede end."""
        # Act & Assert
        with pytest.raises(InvalidTimeFormat):
            await session_service.create_session(
                type=SessionType.EXTRA,
                classroom=Classroom.AULA_PORTAL1,
                date=date(2024, 1, 8),
                start_time="11:00",
                end_time="10:00",
                group_id=open_group.id,
            )

    @pytest.mark.asyncio
    async def test_create_session_should_reject_taken_group_slot(
        self, session_service: SessionService, extra_session, open_group
    ) -> None:
        """Test a group cannot have two sessions starting at the same date and time."""
        # Arrange
        existing = await extra_session()
        existing_id, group_id = existing.id, open_group.id

        # Act & Assert
        with pytest.raises(PlacementConflict) as exc_info:
            await session_service.create_session(
                type=SessionType.EXTRA,
                classroom=Classroom.AULA_VIRTUAL,
                date=date(2024, 1, 8),
                start_time="09:00",
                end_time="10:00",
                group_id=group_id,
            )

        assert exc_info.value.conflicting_item_id == existing_id

    @pytest.mark.asyncio
    async def test_create_session_should_reject_cancelled_group(
        self, session_service: SessionService, cancelled_group
    ) -> None:
        """Test cancelled groups get no new sessions."""
        # Act & Assert
        with pytest.raises(GroupCancelled):
            await session_service.create_session(
                type=SessionType.EXTRA,
                classroom=Classroom.AULA_PORTAL1,
                date=date(2024, 1, 8),
                start_time="09:00",
                end_time="10:00",
                group_id=cancelled_group.id,
            )


class TestLifecycle:
    """Test suite for start/complete/cancel transitions."""

    @pytest.mark.asyncio
    async def test_start_then_complete_should_bump_version_and_record_history(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test the happy path SCHEDULED -> IN_PROGRESS -> COMPLETED."""
        # Arrange
        session = await extra_session()

        # Act
        started = await session_service.start_session(session.id, expected_version=1)
        completed = await session_service.complete_session(session.id, expected_version=2)

        # Assert
        assert started.id == completed.id == session.id
        assert completed.status is SessionStatus.COMPLETED
        assert completed.version == 3
        history = await session_service.get_history(session.id)
        assert [(h.action, h.from_status, h.to_status) for h in history] == [
            ("start", SessionStatus.SCHEDULED, SessionStatus.IN_PROGRESS),
            ("complete", SessionStatus.IN_PROGRESS, SessionStatus.COMPLETED),
        ]

    @pytest.mark.asyncio
    async def test_start_completed_session_should_fail_and_leave_state(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test an illegal action raises and changes nothing."""
        # Arrange
        session = await extra_session()
        session_id = session.id
        await session_service.start_session(session_id)
        await session_service.complete_session(session_id)

        # Act & Assert
        with pytest.raises(InvalidTransition) as exc_info:
            await session_service.start_session(session_id)

        assert exc_info.value.current is SessionStatus.COMPLETED
        reloaded = await session_service.get_session(session_id)
        assert reloaded.status is SessionStatus.COMPLETED
        assert reloaded.version == 3
        assert len(await session_service.get_history(session_id)) == 2

    @pytest.mark.asyncio
    async def test_complete_scheduled_session_should_be_refused(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test a class cannot finish before it starts."""
        # Arrange
        session = await extra_session()

        # Act & Assert
        with pytest.raises(InvalidTransition):
            await session_service.complete_session(session.id)

    @pytest.mark.asyncio
    async def test_cancel_should_be_terminal(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test a cancelled session accepts no further actions."""
        # Arrange
        session = await extra_session()
        session_id = session.id
        cancelled = await session_service.cancel_session(session_id)

        # Act & Assert
        assert cancelled.status is SessionStatus.CANCELLED
        for action in (
            session_service.start_session,
            session_service.cancel_session,
            session_service.delete_session,
        ):
            with pytest.raises(InvalidTransition):
                await action(session_id)

    @pytest.mark.asyncio
    async def test_stale_expected_version_should_raise(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test a caller holding an old version is told so."""
        # Arrange
        session = await extra_session()
        session_id = session.id

        # Act & Assert
        with pytest.raises(StaleVersion) as exc_info:
            await session_service.start_session(session_id, expected_version=5)

        assert exc_info.value.details["actual_version"] == 1
        reloaded = await session_service.get_session(session_id)
        assert reloaded.status is SessionStatus.SCHEDULED

    @pytest.mark.asyncio
    async def test_concurrent_writer_should_make_guarded_update_fail(
        self, session_service: SessionService, extra_session, test_async_db
    ) -> None:
        """Test a row changed behind the loaded object is detected by the guard."""
        # Arrange
        session = await extra_session()
        session_id = session.id
        await test_async_db.execute(
            update(ClassSessionModel)
            .where(ClassSessionModel.id == session_id)
            .values(version=2)
            .execution_options(synchronize_session=False)
        )
        await test_async_db.commit()

        # Act & Assert
        with pytest.raises(StaleVersion) as exc_info:
            await session_service.start_session(session_id)

        assert exc_info.value.details["expected_version"] == 1
        assert exc_info.value.details["actual_version"] == 2
        assert list(await session_service.get_history(session_id)) == []

    @pytest.mark.asyncio
    async def test_unknown_session_should_raise_not_found(
        self, session_service: SessionService
    ) -> None:
        """Test lifecycle calls on a missing id raise SessionNotFound."""
        # Act & Assert
        with pytest.raises(SessionNotFound):
            await session_service.start_session(uuid.uuid4())


class TestPostponeSession:
    """Test suite for SessionService.postpone_session()."""

    @pytest.mark.asyncio
    async def test_postpone_should_relocate_in_place(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test the id is preserved, the slot moves and the old slot is in history."""
        # Arrange
        session = await extra_session(on=date(2024, 1, 8), start="09:00", end="11:00")
        session_id = session.id

        # Act
        postponed = await session_service.postpone_session(
            session_id,
            new_date=date(2024, 1, 10),
            new_start_time="15:00",
            new_end_time="17:00",
        )

        # Assert
        assert postponed.id == session_id
        assert postponed.status is SessionStatus.POSTPONED
        assert postponed.postponed_to_date == date(2024, 1, 10)
        assert postponed.date == date(2024, 1, 10)
        assert (postponed.start_time, postponed.end_time) == (time(15, 0), time(17, 0))
        assert postponed.classroom is Classroom.AULA_PORTAL1
        history = await session_service.get_history(session_id)
        assert len(history) == 1
        assert history[0].action == "postpone"
        assert (history[0].previous_date, history[0].previous_start_time) == (
            date(2024, 1, 8),
            time(9, 0),
        )

    @pytest.mark.asyncio
    async def test_postpone_should_keep_times_when_omitted(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test only the date changes when nothing else is given."""
        # Arrange
        session = await extra_session(start="18:00", end="20:00")

        # Act
        postponed = await session_service.postpone_session(session.id, new_date=date(2024, 1, 12))

        # Assert
        assert (postponed.start_time, postponed.end_time) == (time(18, 0), time(20, 0))

    @pytest.mark.asyncio
    async def test_postpone_onto_taken_slot_should_conflict(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test a postponement cannot land on another session of the group."""
        # Arrange
        blocker = await extra_session(on=date(2024, 1, 10), start="09:00", end="11:00")
        moving = await extra_session(on=date(2024, 1, 8), start="09:00", end="11:00")
        blocker_id, moving_id = blocker.id, moving.id

        # Act & Assert
        with pytest.raises(PlacementConflict) as exc_info:
            await session_service.postpone_session(moving_id, new_date=date(2024, 1, 10))

        assert exc_info.value.conflicting_item_id == blocker_id
        reloaded = await session_service.get_session(moving_id)
        assert reloaded.status is SessionStatus.SCHEDULED
        assert reloaded.date == date(2024, 1, 8)

    @pytest.mark.asyncio
    async def test_postponed_session_should_not_be_postponed_again(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test POSTPONED is terminal for the original occurrence."""
        # Arrange
        session = await extra_session()
        session_id = session.id
        await session_service.postpone_session(session_id, new_date=date(2024, 1, 9))

        # Act & Assert
        with pytest.raises(InvalidTransition):
            await session_service.postpone_session(session_id, new_date=date(2024, 1, 11))

    @pytest.mark.asyncio
    async def test_postpone_should_refuse_cancelled_group(
        self, session_service: SessionService, extra_session, open_group, test_async_db
    ) -> None:
        """Test a cancelled group's session cannot be moved by postponement."""
        # Arrange
        session = await extra_session(on=date(2024, 1, 8))
        session_id = session.id
        await group_crud.update_by_id(test_async_db, open_group.id, status=GroupStatus.CANCELLED)
        await test_async_db.commit()

        # Act & Assert
        with pytest.raises(GroupCancelled):
            await session_service.postpone_session(session_id, new_date=date(2024, 1, 10))

        reloaded = await session_service.get_session(session_id)
        assert reloaded.status is SessionStatus.SCHEDULED
        assert reloaded.date == date(2024, 1, 8)
        assert await session_service.get_history(session_id) == []


class TestDeleteSession:
    """Test suite for SessionService.delete_session()."""

    @pytest.mark.asyncio
    async def test_delete_scheduled_session_should_remove_it(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test a SCHEDULED session is hard-deleted."""
        # Arrange
        session = await extra_session()
        session_id = session.id

        # Act
        deleted = await session_service.delete_session(session_id, expected_version=1)

        # Assert
        assert deleted is True
        with pytest.raises(SessionNotFound):
            await session_service.get_session(session_id)

    @pytest.mark.asyncio
    async def test_delete_started_session_should_be_refused(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test only SCHEDULED sessions can be deleted."""
        # Arrange
        session = await extra_session()
        session_id = session.id
        await session_service.start_session(session_id)

        # Act & Assert
        with pytest.raises(InvalidTransition) as exc_info:
            await session_service.delete_session(session_id)

        assert exc_info.value.requested == "delete"
        assert (await session_service.get_session(session_id)).status is SessionStatus.IN_PROGRESS


class TestUpdateSession:
    """Test suite for SessionService.update_session()."""

    @pytest.mark.asyncio
    async def test_update_should_change_time_and_bump_version(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test editing a SCHEDULED session goes through the version guard and is recorded."""
        # Arrange
        session = await extra_session()

        # Act
        updated = await session_service.update_session(
            session.id, expected_version=1, start_time="10:00", end_time="12:00"
        )

        # Assert
        assert (updated.start_time, updated.end_time) == (time(10, 0), time(12, 0))
        assert updated.version == 2
        history = await session_service.get_history(session.id)
        assert [(h.action, h.from_status, h.to_status) for h in history] == [
            ("update", SessionStatus.SCHEDULED, SessionStatus.SCHEDULED)
        ]
        assert (history[0].previous_start_time, history[0].previous_end_time) == (
            time(9, 0),
            time(11, 0),
        )

    @pytest.mark.asyncio
    async def test_update_should_refuse_started_session(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test a session in progress cannot be edited."""
        # Arrange
        session = await extra_session()
        session_id = session.id
        await session_service.start_session(session_id)

        # Act & Assert
        with pytest.raises(InvalidTransition):
            await session_service.update_session(session_id, classroom=Classroom.AULA_VIRTUAL)

    @pytest.mark.asyncio
    async def test_update_should_keep_generated_session_on_schedule_day(
        self, session_service: SessionService, open_group, test_async_db
    ) -> None:
        """Test moving a schedule-derived session to another weekday is refused."""
        # Arrange
        schedule = await schedule_crud.create(
            test_async_db,
            group_id=open_group.id,
            day_of_week=DayOfWeek.MONDAY,
            start_time=time(9, 0),
            end_time=time(11, 0),
            classroom=Classroom.AULA_PORTAL1,
        )
        session = await session_crud.create(
            test_async_db,
            group_id=open_group.id,
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
        session_id = session.id

        # Act & Assert
        with pytest.raises(ValidationError) as exc_info:
            await session_service.update_session(session_id, date=date(2024, 1, 9))

        assert exc_info.value.details["invariant"] == "date_matches_schedule_day"
        moved = await session_service.update_session(session_id, date=date(2024, 1, 15))
        assert moved.date == date(2024, 1, 15)

    @pytest.mark.asyncio
    async def test_update_should_reject_unknown_fields(
        self, session_service: SessionService, extra_session
    ) -> None:
        """Test status cannot be set through an edit."""
        # Arrange
        session = await extra_session()

        # Act & Assert
        with pytest.raises(ValidationError):
            await session_service.update_session(session.id, status=SessionStatus.COMPLETED)


class TestQueries:
    """Test suite for session listing and history."""

    @pytest.mark.asyncio
    async def test_list_sessions_should_return_page_and_total(
        self, session_service: SessionService, extra_session, open_group
    ) -> None:
        """Test pagination leaves the total untouched."""
        # Arrange
        for day in (8, 9, 10):
            await extra_session(on=date(2024, 1, day))

        # Act
        items, total = await session_service.list_sessions(
            limit=2, offset=0, group_id=open_group.id, status=None
        )

        # Assert
        assert [s.date for s in items] == [date(2024, 1, 8), date(2024, 1, 9)]
        assert total == 3

    @pytest.mark.asyncio
    async def test_list_sessions_should_reject_inverted_dates(
        self, session_service: SessionService
    ) -> None:
        """Test date_to before date_from is a validation error."""
        # Act & Assert
        with pytest.raises(ValidationError):
            await session_service.list_sessions(
                date_from=date(2024, 2, 1), date_to=date(2024, 1, 1)
            )

    @pytest.mark.asyncio
    async def test_get_history_should_raise_for_unknown_session(
        self, session_service: SessionService
    ) -> None:
        """Test history of a missing session raises SessionNotFound."""
        # Act & Assert
        with pytest.raises(SessionNotFound):
            await session_service.get_history(uuid.uuid4())
