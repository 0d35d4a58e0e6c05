"""ORM models for the scheduling tables."""

from academy_scheduler.boundary.db.models.group_model import GroupModel
from academy_scheduler.boundary.db.models.schedule_model import WeeklyScheduleModel
from academy_scheduler.boundary.db.models.session_model import ClassSessionModel
from academy_scheduler.boundary.db.models.transition_model import SessionTransitionModel

__all__ = [
    "GroupModel",
    "WeeklyScheduleModel",
    "ClassSessionModel",
    "SessionTransitionModel",
]
