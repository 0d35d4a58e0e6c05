"""
Response mapping utilities.

Transforms ORM models and domain objects into Pydantic response models.
Centralizes response construction logic.

Dependencies: academy_scheduler.models
System role: Scheduling response transformation
"""

from datetime import date, datetime
from typing import Iterable, Sequence

from academy_scheduler.application.services.grid_service import WeekGrid
from academy_scheduler.configs.scheduling import SchedulingSettings
from academy_scheduler.core.generation import SessionCandidate
from academy_scheduler.core.grid import Buckets
from academy_scheduler.models.generation import SessionPreviewResponse
from academy_scheduler.models.grid import (
    GridGeometry,
    ScheduleGridResponse,
    SessionGridResponse,
    layout,
)
from academy_scheduler.models.schedule import ScheduleResponse
from academy_scheduler.models.session import (
    SessionListResponse,
    SessionResponse,
    SessionTransitionResponse,
)


def map_schedule_to_response(schedule) -> ScheduleResponse:
    return ScheduleResponse.model_validate(schedule)


def map_schedules_to_response(schedules: Iterable) -> list[ScheduleResponse]:
    return [map_schedule_to_response(schedule) for schedule in schedules]


def map_session_to_response(session, now: datetime | None = None) -> SessionResponse:
    """
    Transform an ORM session into SessionResponse.

    Args:
        session: ClassSessionModel
        now: Current time, used for the display status

    Returns:
        SessionResponse: Pydantic model for API response
    """
    return SessionResponse.from_model(session, now)


def map_sessions_to_response(
    sessions: Iterable,
    now: datetime | None = None,
) -> list[SessionResponse]:
    return [map_session_to_response(session, now) for session in sessions]


def map_session_page(
    sessions: Sequence,
    total: int,
    limit: int | None,
    offset: int,
    now: datetime | None = None,
) -> SessionListResponse:
    """Page of sessions with pagination metadata."""
    return SessionListResponse(
        items=map_sessions_to_response(sessions, now),
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(sessions) < total,
    )


def map_history_to_response(transitions: Iterable) -> list[SessionTransitionResponse]:
    return [SessionTransitionResponse.model_validate(row) for row in transitions]


def map_candidates_to_response(
    candidates: Iterable[SessionCandidate],
) -> list[SessionPreviewResponse]:
    return [SessionPreviewResponse.model_validate(candidate) for candidate in candidates]


def map_schedule_grid(buckets: Buckets, settings: SchedulingSettings) -> ScheduleGridResponse:
    return ScheduleGridResponse(
        geometry=GridGeometry.from_settings(settings),
        days=layout(buckets, settings),
    )


def map_session_grid(
    week: WeekGrid,
    settings: SchedulingSettings,
    today: date | None = None,
) -> SessionGridResponse:
    """Session grid with per-day dates; today is kept only when inside the week."""
    return SessionGridResponse(
        geometry=GridGeometry.from_settings(settings),
        week_start=week.week_start,
        dates=week.dates,
        today=today if today in week.dates.values() else None,
        days=layout(week.buckets, settings),
    )
