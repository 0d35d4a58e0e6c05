"""
Scheduling error handling utilities.

Provides a decorator that maps the scheduling exception hierarchy onto HTTP
status codes with a uniform error body, for every scheduling endpoint.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status
from pydantic import ValidationError as PydanticValidationError

from academy_scheduler.core.exceptions import (
    Conflict,
    GroupCancelled,
    InvalidTransition,
    NotFoundError,
    PlacementConflict,
    ScheduleConflict,
    SchedulingError,
    StaleVersion,
    ValidationError,
)
from academy_scheduler.models.common import ErrorResponse
from academy_scheduler.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])

CONFLICT_ERRORS = (
    ScheduleConflict,
    PlacementConflict,
    InvalidTransition,
    StaleVersion,
    GroupCancelled,
    Conflict,
)

# RFC 9110 "Unprocessable Content".
UNPROCESSABLE_CONTENT = 422

# Documented error bodies for router OpenAPI schemas.
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_409_CONFLICT: {"model": ErrorResponse},
}


def status_for(error: SchedulingError) -> int:
    """HTTP status code for a scheduling error."""
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, ValidationError):
        return UNPROCESSABLE_CONTENT
    if isinstance(error, CONFLICT_ERRORS):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def handle_scheduling_errors(func: F) -> F:
    """
    Decorator to handle scheduling errors and transform them into HTTPExceptions.

    This centralizes:
    - Logging of errors with their invariant context
    - Mapping specific exceptions to HTTP status codes
    - Ensuring uniform error response formats
    """
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except SchedulingError as e:
            code = status_for(e)
            logger.warning(
                "Scheduling request rejected",
                extra={
                    "error_type": type(e).__name__,
                    "status_code": code,
                    "error": e.message,
                    "invariant": e.details.get("invariant"),
                },
            )
            raise HTTPException(status_code=code, detail=e.to_dict())

        except PydanticValidationError as e:
            logger.warning("Pydantic validation error", extra={"error": str(e)})
            raise HTTPException(
                status_code=UNPROCESSABLE_CONTENT,
                detail=e.errors(),
            )

        except Exception as e:
            log_exception_with_context(
                logger,
                "Unexpected failure in scheduling operation",
                e,
                endpoint=func.__name__,
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={
                    "error": "InternalError",
                    "message": "An internal error occurred during scheduling operation",
                    "details": {},
                },
            )

    return wrapper  # type: ignore
