"""
Exception hierarchy for the academy scheduler.

Provides layered exception structure for domain-specific errors.
All exceptions include context naming the failed invariant and the
conflicting entity so callers can present an actionable message.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class SchedulingError(Exception):
    """Base exception for all academy scheduler errors."""

    retryable: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serializable form used in API error bodies."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": {key: _jsonable(value) for key, value in self.details.items()},
            "retryable": self.retryable,
        }


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if hasattr(value, "value") and hasattr(value, "name"):
        return value.value
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


class ValidationError(SchedulingError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class InvalidTimeFormat(ValidationError):
    """Raised for malformed or out-of-range times and inverted time ranges."""

    def __init__(
        self,
        message: str,
        value: Any = None,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if value is not None:
            details["value"] = value
        super().__init__(message, field, details)


class InvalidDateRange(ValidationError):
    """Raised when a generation range is inverted or too long."""

    def __init__(self, message: str, start_date: Any, end_date: Any) -> None:
        super().__init__(
            message,
            field="end_date",
            details={"start_date": start_date, "end_date": end_date},
        )


class ScheduleConflict(SchedulingError):
    """Raised when a weekly schedule overlaps a sibling schedule of its group."""

    def __init__(
        self,
        conflicting_schedule_id: Any,
        day_of_week: Any,
        overlap_start: Any,
        overlap_end: Any,
    ) -> None:
        """
        Initialize schedule conflict.

        Args:
            conflicting_schedule_id: ID of the existing schedule in the way
            day_of_week: Day both schedules fall on
            overlap_start: Start of the overlapping interval
            overlap_end: End of the overlapping interval
        """
        super().__init__(
            f"Schedule overlaps schedule {conflicting_schedule_id} on "
            f"{_jsonable(day_of_week)} between {_jsonable(overlap_start)} "
            f"and {_jsonable(overlap_end)}",
            {
                "invariant": "group_schedules_do_not_overlap",
                "conflicting_schedule_id": conflicting_schedule_id,
                "day_of_week": day_of_week,
                "overlap_start": overlap_start,
                "overlap_end": overlap_end,
            },
        )
        self.conflicting_schedule_id = conflicting_schedule_id


class PlacementConflict(SchedulingError):
    """Raised when a grid move lands on an occupied slot."""

    def __init__(
        self,
        conflicting_item_id: Any,
        day: Any = None,
        classroom: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details.update({
            "invariant": "no_overlap_in_destination",
            "conflicting_item_id": conflicting_item_id,
            "day": day,
            "classroom": classroom,
        })
        super().__init__(
            f"Proposed placement overlaps item {conflicting_item_id}",
            details,
        )
        self.conflicting_item_id = conflicting_item_id


class InvalidTransition(SchedulingError):
    """Raised when a lifecycle action is not allowed from the current status."""

    def __init__(self, current: Any, requested: str, session_id: Any = None) -> None:
        """
        Initialize invalid transition error.

        Args:
            current: Current session status
            requested: Requested action (start, complete, cancel, postpone, delete)
            session_id: Session the action targeted
        """
        super().__init__(
            f"Cannot {requested} a session in status {_jsonable(current)}",
            {
                "invariant": "lifecycle_guard",
                "current_status": current,
                "requested": requested,
                "session_id": session_id,
            },
        )
        self.current = current
        self.requested = requested


class NotFoundError(SchedulingError):
    """Base exception for missing entities."""

    entity: str = "entity"

    def __init__(self, entity_id: Any, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details[f"{self.entity}_id"] = entity_id
        super().__init__(f"{self.entity.capitalize()} not found: {entity_id}", details)
        self.entity_id = entity_id


class GroupNotFound(NotFoundError):
    """Raised when the group directory does not know a group."""

    entity = "group"


class ScheduleNotFound(NotFoundError):
    """Raised when a weekly schedule cannot be found."""

    entity = "schedule"


class SessionNotFound(NotFoundError):
    """Raised when a session cannot be found."""

    entity = "session"


class GroupCancelled(SchedulingError):
    """Raised when mutating schedules or sessions of a cancelled group."""

    def __init__(self, group_id: Any) -> None:
        super().__init__(
            f"Group {group_id} is cancelled",
            {"invariant": "group_not_cancelled", "group_id": group_id},
        )


class StaleVersion(SchedulingError):
    """Raised when a session changed since the caller read it."""

    def __init__(self, session_id: Any, expected: int, actual: int) -> None:
        super().__init__(
            f"Session {session_id} was modified concurrently "
            f"(expected version {expected}, found {actual})",
            {
                "invariant": "optimistic_version",
                "session_id": session_id,
                "expected_version": expected,
                "actual_version": actual,
            },
        )


class Conflict(SchedulingError):
    """Raised when a concurrent generation batch collided; safe to retry."""

    retryable = True

    def __init__(self, group_id: Any, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details.update({"invariant": "unique_group_date_start", "group_id": group_id})
        super().__init__(
            f"Concurrent session generation for group {group_id}; batch rolled back",
            details,
        )
