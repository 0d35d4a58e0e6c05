"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    get_clock,
    get_generation_service,
    get_grid_service,
    get_group_directory,
    get_schedule_service,
    get_session_service,
    get_settings_dependency,
)

__all__ = [
    "get_clock",
    "get_generation_service",
    "get_grid_service",
    "get_group_directory",
    "get_schedule_service",
    "get_session_service",
    "get_settings_dependency",
]
