"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin, VersionMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Connection management
  - GroupModel, WeeklyScheduleModel, ClassSessionModel, SessionTransitionModel: Entities
  - group_crud, schedule_crud, session_crud, transition_crud: CRUD operation singletons

Dependencies: sqlalchemy, academy_scheduler.configs
System role: Database adapter providing persistent storage for weekly
schedules, class sessions and their lifecycle history.
"""

from academy_scheduler.boundary.db.base import Base, TimestampMixin, UUIDMixin, VersionMixin
from academy_scheduler.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from academy_scheduler.boundary.db.models import (
    ClassSessionModel,
    GroupModel,
    SessionTransitionModel,
    WeeklyScheduleModel,
)
from academy_scheduler.boundary.db.CRUD import (
    BaseCRUD,
    GroupCRUD,
    ScheduleCRUD,
    SessionCRUD,
    TransitionCRUD,
    group_crud,
    schedule_crud,
    session_crud,
    transition_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "VersionMixin",
    # Connection
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "GroupModel",
    "WeeklyScheduleModel",
    "ClassSessionModel",
    "SessionTransitionModel",
    # CRUD classes
    "BaseCRUD",
    "GroupCRUD",
    "ScheduleCRUD",
    "SessionCRUD",
    "TransitionCRUD",
    # CRUD singletons
    "group_crud",
    "schedule_crud",
    "session_crud",
    "transition_crud",
]
