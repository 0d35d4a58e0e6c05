"""
Session generation models and schemas.

Dependencies: pydantic
System role: Generate/preview API contracts
"""

import uuid
import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from academy_scheduler.core.enums import Classroom, SessionMode, SessionStatus, SessionType
from academy_scheduler.models.common import WireTime
from academy_scheduler.models.session import SessionResponse


class GenerateSessionsRequest(BaseModel):
    """Request schema for generating (or previewing) a group's sessions."""

    group_id: uuid.UUID
    start_date: dt.date | None = Field(None, description="First date, defaults to today")
    end_date: dt.date | None = Field(
        None, description="Last date (inclusive), defaults to the configured window"
    )


class SessionPreviewResponse(BaseModel):
    """A session generation would create."""

    model_config = ConfigDict(from_attributes=True)

    group_id: uuid.UUID
    schedule_id: uuid.UUID
    subject_id: uuid.UUID
    classroom: Classroom
    date: dt.date
    start_time: WireTime
    end_time: WireTime
    mode: SessionMode
    type: SessionType
    status: SessionStatus


class GenerationResponse(BaseModel):
    """Sessions created by one generation batch."""

    group_id: uuid.UUID
    start_date: dt.date
    end_date: dt.date
    created: int
    sessions: list[SessionResponse]


class PreviewResponse(BaseModel):
    """Sessions a generation batch would create."""

    group_id: uuid.UUID
    start_date: dt.date
    end_date: dt.date
    count: int
    sessions: list[SessionPreviewResponse]
