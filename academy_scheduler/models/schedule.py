"""
Weekly schedule models and schemas.

Request/response schemas for schedule registry operations.

Dependencies: pydantic
System role: Schedule API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from academy_scheduler.core.enums import Classroom, DayOfWeek
from academy_scheduler.models.common import TIME_PATTERN, WireTime


class CreateScheduleRequest(BaseModel):
    """Request schema for creating a weekly schedule."""

    group_id: uuid.UUID = Field(..., description="Owning group")
    day_of_week: DayOfWeek = Field(..., description="MONDAY..SATURDAY")
    start_time: str = Field(..., pattern=TIME_PATTERN, examples=["09:00"])
    end_time: str = Field(..., pattern=TIME_PATTERN, examples=["11:00"])
    classroom: Classroom


class UpdateScheduleRequest(BaseModel):
    """Request schema for updating a weekly schedule; omitted fields are kept."""

    day_of_week: DayOfWeek | None = None
    start_time: str | None = Field(None, pattern=TIME_PATTERN)
    end_time: str | None = Field(None, pattern=TIME_PATTERN)
    classroom: Classroom | None = None


class ScheduleResponse(BaseModel):
    """Response schema for schedule operations."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    group_id: uuid.UUID
    day_of_week: DayOfWeek
    start_time: WireTime
    end_time: WireTime
    classroom: Classroom
    created_at: datetime
    updated_at: datetime
