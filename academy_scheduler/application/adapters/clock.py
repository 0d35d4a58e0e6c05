"""
Clock adapter.

Services ask the clock for "today" (default generation range) and "now"
(visual status) so tests can pin both.

Dependencies: datetime (stdlib)
System role: Time source for services
"""

from datetime import date, datetime
from typing import Protocol


class Clock(Protocol):
    """Source of the current local date and time."""

    def today(self) -> date:
        ...

    def now(self) -> datetime:
        ...


class SystemClock:
    """Local wall clock, naive datetimes (the wire format has no time zones)."""

    def today(self) -> date:
        return date.today()

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Clock frozen at a given instant."""

    def __init__(self, instant: datetime) -> None:
        self.instant = instant

    def today(self) -> date:
        return self.instant.date()

    def now(self) -> datetime:
        return self.instant
