"""
Domain enumerations.

Shared by ORM models, pydantic schemas and the pure scheduling logic.
Values are the wire names.

Dependencies: None (pure domain layer)
System role: Vocabulary of the scheduling domain
"""

import enum
from datetime import date


class DayOfWeek(str, enum.Enum):
    """
    Days a weekly schedule can fall on.

    Sunday is not a teaching day and has no member. Declaration order is the
    natural weekday order used for sorting.
    """

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"

    @property
    def weekday(self) -> int:
        """Python weekday number (Monday == 0)."""
        return _DAY_ORDER.index(self)

    @classmethod
    def from_date(cls, value: date) -> "DayOfWeek | None":
        """Day for a calendar date, None on Sundays."""
        weekday = value.weekday()
        if weekday >= len(_DAY_ORDER):
            return None
        return _DAY_ORDER[weekday]


_DAY_ORDER: tuple[DayOfWeek, ...] = tuple(DayOfWeek)


class Classroom(str, enum.Enum):
    """Fixed set of physical and virtual venues."""

    AULA_PORTAL1 = "AULA_PORTAL1"
    AULA_PORTAL2 = "AULA_PORTAL2"
    AULA_VIRTUAL = "AULA_VIRTUAL"

    @property
    def is_virtual(self) -> bool:
        return self is Classroom.AULA_VIRTUAL


class SessionStatus(str, enum.Enum):
    """
    Session lifecycle states.

    SCHEDULED: Initial state, the class has not started
    IN_PROGRESS: The class is being held
    COMPLETED: Terminal, the class took place
    CANCELLED: Terminal, the class will not take place
    POSTPONED: Terminal for the original occurrence, relocated in place
    """

    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    POSTPONED = "POSTPONED"


class SessionType(str, enum.Enum):
    """
    Session origin.

    REGULAR: Generated from a weekly schedule
    EXTRA: Added manually to a group
    SCHEDULING: Ad-hoc session with no group
    """

    REGULAR = "REGULAR"
    EXTRA = "EXTRA"
    SCHEDULING = "SCHEDULING"


class SessionMode(str, enum.Enum):
    """How attendees join a session."""

    IN_PERSON = "IN_PERSON"
    ONLINE = "ONLINE"
    DUAL = "DUAL"


class GroupStatus(str, enum.Enum):
    """Group states reported by the group directory."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"
