"""
Class session models and schemas.

Request/response schemas for session lifecycle, manual sessions and queries.
Responses carry the flags and derived values calendars need so clients do
not re-implement the lifecycle rules.

Dependencies: pydantic
System role: Session API contracts
"""

import uuid
import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, computed_field

from academy_scheduler.core import lifecycle, time_grid
from academy_scheduler.core.enums import Classroom, SessionMode, SessionStatus, SessionType
from academy_scheduler.core.visual_status import visual_status
from academy_scheduler.models.common import TIME_PATTERN, PaginatedResponse, WireTime


class CreateSessionRequest(BaseModel):
    """Request schema for a manual EXTRA or SCHEDULING session."""

    type: SessionType = Field(..., description="EXTRA (group) or SCHEDULING (no group)")
    group_id: uuid.UUID | None = None
    subject_id: uuid.UUID | None = Field(None, description="Defaults to the group's subject")
    classroom: Classroom
    date: dt.date
    start_time: str = Field(..., pattern=TIME_PATTERN, examples=["09:00"])
    end_time: str = Field(..., pattern=TIME_PATTERN, examples=["11:00"])
    mode: SessionMode | None = Field(None, description="Derived from the classroom when omitted")


class UpdateSessionRequest(BaseModel):
    """Request schema for editing a SCHEDULED session; omitted fields are kept."""

    date: dt.date | None = None
    start_time: str | None = Field(None, pattern=TIME_PATTERN)
    end_time: str | None = Field(None, pattern=TIME_PATTERN)
    classroom: Classroom | None = None
    mode: SessionMode | None = None
    expected_version: int | None = Field(None, ge=1, description="Version the client read")


class TransitionRequest(BaseModel):
    """Optional body of start/complete/cancel/delete."""

    expected_version: int | None = Field(None, ge=1, description="Version the client read")


class PostponeSessionRequest(BaseModel):
    """Request schema for postponing a session."""

    new_date: dt.date
    new_start_time: str | None = Field(None, pattern=TIME_PATTERN)
    new_end_time: str | None = Field(None, pattern=TIME_PATTERN)
    new_classroom: Classroom | None = None
    new_mode: SessionMode | None = None
    expected_version: int | None = Field(None, ge=1, description="Version the client read")


class SessionResponse(BaseModel):
    """Response schema for session operations."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    subject_id: uuid.UUID
    group_id: uuid.UUID | None
    schedule_id: uuid.UUID | None
    classroom: Classroom
    date: dt.date
    start_time: WireTime
    end_time: WireTime
    status: SessionStatus
    type: SessionType
    mode: SessionMode
    postponed_to_date: dt.date | None = None
    version: int
    created_at: dt.datetime
    updated_at: dt.datetime
    visual_status: str | None = Field(
        None, description="Display status; a started SCHEDULED session shows as in_progress"
    )

    @computed_field
    @property
    def duration_minutes(self) -> int:
        return time_grid.duration_minutes(self.start_time, self.end_time)

    @computed_field
    @property
    def available_actions(self) -> list[str]:
        return [action.value for action in lifecycle.allowed_actions(self.status)]

    @computed_field
    @property
    def is_scheduled(self) -> bool:
        return self.status is SessionStatus.SCHEDULED

    @computed_field
    @property
    def is_in_progress(self) -> bool:
        return self.status is SessionStatus.IN_PROGRESS

    @computed_field
    @property
    def is_completed(self) -> bool:
        return self.status is SessionStatus.COMPLETED

    @computed_field
    @property
    def is_cancelled(self) -> bool:
        return self.status is SessionStatus.CANCELLED

    @computed_field
    @property
    def is_postponed(self) -> bool:
        return self.status is SessionStatus.POSTPONED

    @computed_field
    @property
    def is_regular(self) -> bool:
        return self.type is SessionType.REGULAR

    @computed_field
    @property
    def is_extra(self) -> bool:
        return self.type is SessionType.EXTRA

    @computed_field
    @property
    def is_scheduling_type(self) -> bool:
        return self.type is SessionType.SCHEDULING

    @computed_field
    @property
    def has_group(self) -> bool:
        return self.group_id is not None

    @computed_field
    @property
    def has_schedule(self) -> bool:
        return self.schedule_id is not None

    @classmethod
    def from_model(cls, session, now: dt.datetime | None = None) -> "SessionResponse":
        """
        Build a response from an ORM session.

        Args:
            session: ClassSessionModel
            now: Current time; fills visual_status when given
        """
        response = cls.model_validate(session)
        if now is not None:
            response.visual_status = visual_status(
                session.status, session.date, session.start_time, session.end_time, now
            )
        return response


class SessionListResponse(PaginatedResponse[SessionResponse]):
    """Page of sessions."""


class SessionTransitionResponse(BaseModel):
    """One entry of a session's lifecycle history."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    session_id: uuid.UUID
    action: str
    from_status: SessionStatus
    to_status: SessionStatus
    previous_date: dt.date
    previous_start_time: WireTime
    previous_end_time: WireTime
    previous_classroom: Classroom
    previous_mode: SessionMode
    occurred_at: dt.datetime
