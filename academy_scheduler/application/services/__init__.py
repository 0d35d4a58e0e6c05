"""Service orchestrators."""

from .generation_service import GenerationService
from .grid_service import GridService, WeekGrid
from .schedule_service import ScheduleService
from .session_service import SessionService

__all__ = [
    "GenerationService",
    "GridService",
    "ScheduleService",
    "SessionService",
    "WeekGrid",
]
