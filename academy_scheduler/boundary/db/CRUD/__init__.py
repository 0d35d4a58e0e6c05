"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from academy_scheduler.boundary.db.CRUD import schedule_crud, session_crud

    # Use singleton instances
    schedules = await schedule_crud.get_by_group(db, group_id)

    # Or instantiate classes directly for custom behavior
    from academy_scheduler.boundary.db.CRUD import SessionCRUD
    custom_crud = SessionCRUD()
"""

from academy_scheduler.boundary.db.CRUD.base_crud import BaseCRUD
from academy_scheduler.boundary.db.CRUD.group_crud import GroupCRUD, group_crud
from academy_scheduler.boundary.db.CRUD.schedule_crud import ScheduleCRUD, schedule_crud
from academy_scheduler.boundary.db.CRUD.session_crud import SessionCRUD, session_crud
from academy_scheduler.boundary.db.CRUD.transition_crud import TransitionCRUD, transition_crud

__all__ = [
    "BaseCRUD",
    "GroupCRUD",
    "ScheduleCRUD",
    "SessionCRUD",
    "TransitionCRUD",
    "group_crud",
    "schedule_crud",
    "session_crud",
    "transition_crud",
]
