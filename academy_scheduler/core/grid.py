"""
Schedule/session grid composer.

Buckets schedules or sessions by (day, classroom) for layout and validates
drag relocation against the destination bucket. Works in minutes; pointer
offsets are converted through time_grid before any overlap test.

Session grids are weekly: callers pass the sessions of a single week, since
buckets are keyed by day of week rather than by date.

Dependencies: academy_scheduler.core
System role: Layout and collision detection for weekly grids
"""

import datetime as dt
from dataclasses import dataclass, replace
from typing import Any, Iterable, Sequence

from academy_scheduler.core import time_grid
from academy_scheduler.core.enums import Classroom, DayOfWeek, SessionStatus
from academy_scheduler.core.exceptions import PlacementConflict

Buckets = dict[DayOfWeek, dict[Classroom, list["GridItem"]]]

# Cancelled sessions stay visible but free their slot.
NON_BLOCKING_STATUSES = frozenset({SessionStatus.CANCELLED})


@dataclass(frozen=True)
class GridItem:
    """A block on the weekly grid, either a schedule or a session."""

    id: Any
    day: DayOfWeek
    start: int
    end: int
    classroom: Classroom
    date: dt.date | None = None
    blocking: bool = True
    source: Any = None

    @property
    def start_time(self) -> str:
        return time_grid.minutes_to_time(self.start)

    @property
    def end_time(self) -> str:
        return time_grid.minutes_to_time(self.end)

    @property
    def duration(self) -> int:
        return self.end - self.start

    @classmethod
    def from_schedule(cls, schedule: Any) -> "GridItem":
        return cls(
            id=schedule.id,
            day=DayOfWeek(schedule.day_of_week),
            start=time_grid.to_minutes(schedule.start_time),
            end=time_grid.to_minutes(schedule.end_time),
            classroom=Classroom(schedule.classroom),
            source=schedule,
        )

    @classmethod
    def from_session(cls, session: Any) -> "GridItem | None":
        """Grid item for a session, None for Sunday sessions (no grid column)."""
        day = DayOfWeek.from_date(session.date)
        if day is None:
            return None
        return cls(
            id=session.id,
            day=day,
            start=time_grid.to_minutes(session.start_time),
            end=time_grid.to_minutes(session.end_time),
            classroom=Classroom(session.classroom),
            date=session.date,
            blocking=SessionStatus(session.status) not in NON_BLOCKING_STATUSES,
            source=session,
        )


@dataclass(frozen=True)
class Placement:
    """Validated destination of a moved item plus the resulting layout."""

    item: GridItem
    previous: GridItem
    buckets: Buckets

    @property
    def moved(self) -> bool:
        return (
            self.item.day != self.previous.day
            or self.item.start != self.previous.start
            or self.item.classroom != self.previous.classroom
        )


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval overlap: [a_start, a_end) and [b_start, b_end)."""
    return a_start < b_end and b_start < a_end


def empty_buckets(classrooms: Sequence[Classroom] = tuple(Classroom)) -> Buckets:
    return {day: {room: [] for room in classrooms} for day in DayOfWeek}


def bucket(
    items: Iterable[GridItem],
    classroom: Classroom | None = None,
) -> Buckets:
    """
    Arrange items by day and classroom.

    Every day Monday..Saturday is present with every classroom (or only the
    requested one). Items in a bucket are sorted by start time, then id.
    """
    classrooms = (Classroom(classroom),) if classroom is not None else tuple(Classroom)
    buckets = empty_buckets(classrooms)
    for item in items:
        if item.classroom not in buckets[item.day]:
            continue
        buckets[item.day][item.classroom].append(item)
    for rooms in buckets.values():
        for entries in rooms.values():
            entries.sort(key=lambda entry: (entry.start, str(entry.id)))
    return buckets


def schedule_items(schedules: Iterable[Any]) -> list[GridItem]:
    return [GridItem.from_schedule(schedule) for schedule in schedules]


def session_items(sessions: Iterable[Any]) -> list[GridItem]:
    items = (GridItem.from_session(session) for session in sessions)
    return [item for item in items if item is not None]


def find_collision(
    items: Iterable[GridItem],
    candidate: GridItem,
) -> GridItem | None:
    """First blocking item sharing the candidate's day and classroom that overlaps it."""
    for other in items:
        if other.id == candidate.id or not other.blocking:
            continue
        if other.day != candidate.day or other.classroom != candidate.classroom:
            continue
        if overlaps(candidate.start, candidate.end, other.start, other.end):
            return other
    return None


def place(
    items: Sequence[GridItem],
    item_id: Any,
    day: DayOfWeek,
    start: time_grid.TimeLike | int,
    end: time_grid.TimeLike | int,
    classroom: Classroom | None = None,
) -> Placement:
    """
    Validate moving one item to a new day, time range and classroom.

    Args:
        items: Every item currently on the grid
        item_id: ID of the item being moved
        day: Destination day
        start: Destination start (minutes or "HH:MM")
        end: Destination end (minutes or "HH:MM")
        classroom: Destination classroom, None keeps the current one

    Returns:
        Placement: Moved item and the updated buckets

    Raises:
        KeyError: item_id is not on the grid
        InvalidTimeFormat: Inverted or out-of-day range
        PlacementConflict: Destination overlaps another item
    """
    current = next((item for item in items if item.id == item_id), None)
    if current is None:
        raise KeyError(item_id)

    start_minutes = start if isinstance(start, int) else time_grid.to_minutes(start)
    end_minutes = end if isinstance(end, int) else time_grid.to_minutes(end)
    time_grid.validate_range(
        time_grid.minutes_to_time(start_minutes),
        time_grid.minutes_to_time(end_minutes),
    )

    day = DayOfWeek(day)
    new_date = None
    if current.date is not None:
        new_date = current.date + dt.timedelta(days=day.weekday - current.day.weekday)

    moved = replace(
        current,
        day=day,
        start=start_minutes,
        end=end_minutes,
        classroom=Classroom(classroom) if classroom is not None else current.classroom,
        date=new_date,
    )

    collision = find_collision(items, moved)
    if collision is not None:
        raise PlacementConflict(
            collision.id,
            day=moved.day,
            classroom=moved.classroom,
            details={
                "item_id": current.id,
                "proposed_start": moved.start_time,
                "proposed_end": moved.end_time,
                "conflicting_start": collision.start_time,
                "conflicting_end": collision.end_time,
            },
        )

    layout = [moved if item.id == item_id else item for item in items]
    return Placement(item=moved, previous=current, buckets=bucket(layout))


def propose_move(
    items: Sequence[GridItem],
    item_id: Any,
    day: DayOfWeek,
    pointer_offset: float,
    classroom: Classroom | None = None,
    *,
    grid_start_hour: int,
    pixels_per_hour: float,
    granularity: int = time_grid.DEFAULT_GRANULARITY,
) -> Placement:
    """
    Turn a drop at a pointer offset into a validated placement.

    The new start is snapped to granularity and the item keeps its duration.
    """
    current = next((item for item in items if item.id == item_id), None)
    if current is None:
        raise KeyError(item_id)
    start = time_grid.position_to_minutes(
        pointer_offset, grid_start_hour, pixels_per_hour, granularity
    )
    return place(items, item_id, day, start, start + current.duration, classroom)


def week_start_for(value: dt.date) -> dt.date:
    """Monday of the week containing value."""
    return value - dt.timedelta(days=value.weekday())


def week_dates(week_start: dt.date) -> dict[DayOfWeek, dt.date]:
    """Calendar date of each grid day in the week containing week_start."""
    monday = week_start_for(week_start)
    return {day: monday + dt.timedelta(days=day.weekday) for day in DayOfWeek}
