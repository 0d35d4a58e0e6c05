"""
Common response models and utilities.

Generic response wrappers, error schemas and the wire time type.

Dependencies: pydantic
System role: Common API response structures
"""

from datetime import time
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, BeforeValidator, Field

from academy_scheduler.core.time_grid import format_time

T = TypeVar("T")

TIME_PATTERN = r"^\d{1,2}:\d{2}$"


def _to_wire_time(value: Any) -> Any:
    if isinstance(value, time):
        return format_time(value)
    return value


# "HH:MM" on the wire, accepts datetime.time from ORM objects.
WireTime = Annotated[str, BeforeValidator(_to_wire_time)]


class ErrorDetail(BaseModel):
    """Body of a scheduling error."""

    error: str = Field(description="Exception class name")
    message: str = Field(description="Human-readable error message")
    details: dict = Field(default_factory=dict, description="Failed invariant and conflicting entity")
    retryable: bool = False


class ErrorResponse(BaseModel):
    """Error response schema."""

    detail: ErrorDetail


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response wrapper."""

    items: list[T]
    total: int
    limit: int | None = None
    offset: int = 0
    has_more: bool = False
