"""Supporting adapters."""

from .clock import Clock, FixedClock, SystemClock
from .group_directory import GroupDirectory, GroupRef, SqlGroupDirectory, require_group

__all__ = [
    "Clock",
    "FixedClock",
    "GroupDirectory",
    "GroupRef",
    "SqlGroupDirectory",
    "SystemClock",
    "require_group",
]
