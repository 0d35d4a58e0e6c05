"""API routers."""

from .grid import router as grid_router
from .health import router as health_router
from .schedules import groups_router as group_schedules_router
from .schedules import router as schedules_router
from .sessions import router as sessions_router

__all__ = [
    "grid_router",
    "group_schedules_router",
    "health_router",
    "schedules_router",
    "sessions_router",
]
