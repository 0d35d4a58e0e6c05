"""Shared router helpers."""

from .error_handling import ERROR_RESPONSES, handle_scheduling_errors, status_for
from .validators import validate_partial_update

__all__ = ["ERROR_RESPONSES", "handle_scheduling_errors", "status_for", "validate_partial_update"]
