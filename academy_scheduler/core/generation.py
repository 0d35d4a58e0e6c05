"""
Session candidate expansion.

Turns a group's weekly schedules into the concrete sessions that should exist
over an inclusive date range. Pure: the caller supplies the slots that are
already taken and decides whether to persist the result.

Dependencies: academy_scheduler.core
System role: Algorithm behind generate/preview
"""

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from typing import Any, Iterable, Iterator, Protocol, Sequence

from academy_scheduler.core.enums import (
    Classroom,
    DayOfWeek,
    SessionMode,
    SessionStatus,
    SessionType,
)
from academy_scheduler.core.exceptions import InvalidDateRange

Slot = tuple[date, time]


class ScheduleLike(Protocol):
    """Fields of a weekly schedule the generator reads."""

    id: Any
    group_id: Any
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    classroom: Classroom


@dataclass(frozen=True)
class SessionCandidate:
    """A session the generator proposes; not yet persisted."""

    group_id: Any
    schedule_id: Any
    subject_id: Any
    classroom: Classroom
    date: date
    start_time: time
    end_time: time
    mode: SessionMode
    type: SessionType = SessionType.REGULAR
    status: SessionStatus = SessionStatus.SCHEDULED

    @property
    def slot(self) -> Slot:
        return (self.date, self.start_time)

    def as_fields(self) -> dict[str, Any]:
        """Column values for SessionModel."""
        return {
            "group_id": self.group_id,
            "schedule_id": self.schedule_id,
            "subject_id": self.subject_id,
            "classroom": self.classroom,
            "date": self.date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "mode": self.mode,
            "type": self.type,
            "status": self.status,
        }


@dataclass
class ExpansionResult:
    """Candidates to create plus the ones skipped as already present."""

    candidates: list[SessionCandidate] = field(default_factory=list)
    skipped: list[SessionCandidate] = field(default_factory=list)


def iter_dates(start_date: date, end_date: date) -> Iterator[date]:
    """Every calendar date in [start_date, end_date], ascending."""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def validate_date_range(start_date: date, end_date: date, max_days: int | None = None) -> int:
    """
    Check an inclusive generation range.

    Returns:
        int: Number of days in the range

    Raises:
        InvalidDateRange: end before start, or longer than max_days
    """
    if end_date < start_date:
        raise InvalidDateRange("End date must not be before start date", start_date, end_date)
    days = (end_date - start_date).days + 1
    if max_days is not None and days > max_days:
        raise InvalidDateRange(
            f"Range covers {days} days, limit is {max_days}", start_date, end_date
        )
    return days


def schedule_sort_key(schedule: ScheduleLike) -> tuple[int, time, str]:
    """Natural schedule ordering: day, then start time, then id for stability."""
    return (DayOfWeek(schedule.day_of_week).weekday, schedule.start_time, str(schedule.id))


def mode_for_classroom(classroom: Classroom, default_mode: SessionMode) -> SessionMode:
    """Virtual rooms always yield online sessions."""
    if Classroom(classroom).is_virtual:
        return SessionMode.ONLINE
    return default_mode


def expand_schedules(
    schedules: Sequence[ScheduleLike],
    start_date: date,
    end_date: date,
    *,
    subject_id: Any,
    default_mode: SessionMode = SessionMode.IN_PERSON,
    taken_slots: Iterable[Slot] = (),
) -> ExpansionResult:
    """
    Expand weekly schedules into session candidates.

    Candidates come out in ascending date order; within a date they follow
    the schedules' natural ordering. A candidate whose (date, start_time) is
    already taken, or was produced earlier in the same expansion, is skipped.

    Args:
        schedules: The group's weekly schedules
        start_date: First date (inclusive)
        end_date: Last date (inclusive)
        subject_id: Subject taught by the group
        default_mode: Mode for sessions in physical classrooms
        taken_slots: (date, start_time) pairs already occupied for the group

    Returns:
        ExpansionResult: Candidates to create and skipped duplicates
    """
    result = ExpansionResult()
    if not schedules:
        return result

    by_day: dict[DayOfWeek, list[ScheduleLike]] = {}
    for schedule in sorted(schedules, key=schedule_sort_key):
        by_day.setdefault(DayOfWeek(schedule.day_of_week), []).append(schedule)

    occupied: set[Slot] = set(taken_slots)
    for current in iter_dates(start_date, end_date):
        day = DayOfWeek.from_date(current)
        if day is None:
            continue
        for schedule in by_day.get(day, ()):
            candidate = SessionCandidate(
                group_id=schedule.group_id,
                schedule_id=schedule.id,
                subject_id=subject_id,
                classroom=Classroom(schedule.classroom),
                date=current,
                start_time=schedule.start_time,
                end_time=schedule.end_time,
                mode=mode_for_classroom(schedule.classroom, default_mode),
            )
            if candidate.slot in occupied:
                result.skipped.append(candidate)
                continue
            occupied.add(candidate.slot)
            result.candidates.append(candidate)
    return result
