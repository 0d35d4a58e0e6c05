"""
Request validation utilities.

Business rules not covered by the Pydantic models.

Dependencies: academy_scheduler.models
System role: Request validation for scheduling endpoints
"""

from pydantic import BaseModel

from academy_scheduler.core.exceptions import ValidationError


def validate_partial_update(request: BaseModel, *ignored: str) -> dict:
    """
    Fields a partial update actually sets.

    Args:
        request: Update request model
        *ignored: Fields that do not count as updates (e.g. expected_version)

    Returns:
        dict: Non-null fields to apply

    Raises:
        ValidationError: No field was provided
    """
    fields = {
        key: value
        for key, value in request.model_dump(exclude_none=True).items()
        if key not in ignored
    }
    if not fields:
        raise ValidationError("At least one field must be provided for update")
    return fields
