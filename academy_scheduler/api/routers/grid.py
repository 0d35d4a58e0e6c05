"""
Grid API endpoints.

Routes:
- GET /grid/schedules - Weekly schedules bucketed by day and classroom
- GET /grid/sessions - One week of sessions bucketed by day and classroom
- POST /grid/schedules/{id}/move - Validate and apply a schedule drag
- POST /grid/sessions/{id}/move - Validate and apply a session drag

Dependencies: academy_scheduler.application.services, academy_scheduler.models
System role: Schedule/session grid HTTP API
"""

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends

from academy_scheduler.api.deps.dependencies import (
    get_clock,
    get_grid_service,
    get_settings_dependency,
)
from academy_scheduler.application.adapters.clock import Clock
from academy_scheduler.application.services.grid_service import GridService
from academy_scheduler.configs import Settings
from academy_scheduler.core.enums import Classroom
from academy_scheduler.models.grid import MoveRequest, ScheduleGridResponse, SessionGridResponse
from academy_scheduler.models.schedule import ScheduleResponse
from academy_scheduler.models.session import SessionResponse

from .router_utils.error_handling import ERROR_RESPONSES, handle_scheduling_errors
from .router_utils.responses import (
    map_schedule_grid,
    map_schedule_to_response,
    map_session_grid,
    map_session_to_response,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/grid", tags=["grid"], responses=ERROR_RESPONSES)


@router.get("/schedules", response_model=ScheduleGridResponse)
@handle_scheduling_errors
async def schedule_grid(
    classroom: Classroom | None = None,
    group_id: UUID | None = None,
    grid_service: GridService = Depends(get_grid_service),
    settings: Settings = Depends(get_settings_dependency),
) -> ScheduleGridResponse:
    """Weekly schedule grid, optionally for one classroom or group."""
    buckets = await grid_service.schedule_grid(classroom=classroom, group_id=group_id)
    return map_schedule_grid(buckets, settings.scheduling)


@router.get("/sessions", response_model=SessionGridResponse)
@handle_scheduling_errors
async def session_grid(
    week_start: date | None = None,
    classroom: Classroom | None = None,
    group_id: UUID | None = None,
    grid_service: GridService = Depends(get_grid_service),
    settings: Settings = Depends(get_settings_dependency),
    clock: Clock = Depends(get_clock),
) -> SessionGridResponse:
    """Session grid for the week containing week_start (default: this week)."""
    today = clock.today()
    week = await grid_service.session_grid(
        week_start or today, classroom=classroom, group_id=group_id
    )
    return map_session_grid(week, settings.scheduling, today)


@router.post("/schedules/{schedule_id}/move", response_model=ScheduleResponse)
@handle_scheduling_errors
async def move_schedule(
    schedule_id: UUID,
    request: MoveRequest,
    grid_service: GridService = Depends(get_grid_service),
) -> ScheduleResponse:
    """
    Move a schedule block on the grid.

    Raises:
        HTTPException(404): Schedule not found
        HTTPException(409): Destination occupied, or overlaps a group sibling
        HTTPException(422): Malformed or inverted times
    """
    logger.info(
        "Moving schedule",
        extra={"schedule_id": str(schedule_id), "day": request.day.value},
    )
    schedule = await grid_service.move_schedule(
        schedule_id,
        day=request.day,
        start_time=request.start_time,
        end_time=request.end_time,
        classroom=request.classroom,
        pointer_offset=request.pointer_offset,
    )
    return map_schedule_to_response(schedule)


@router.post("/sessions/{session_id}/move", response_model=SessionResponse)
@handle_scheduling_errors
async def move_session(
    session_id: UUID,
    request: MoveRequest,
    grid_service: GridService = Depends(get_grid_service),
    clock: Clock = Depends(get_clock),
) -> SessionResponse:
    """
    Move a session block within its week.

    Raises:
        HTTPException(404): Session not found
        HTTPException(409): Destination occupied, session not SCHEDULED, or stale version
        HTTPException(422): Malformed or inverted times, Sunday session
    """
    logger.info(
        "Moving session",
        extra={"session_id": str(session_id), "day": request.day.value},
    )
    session = await grid_service.move_session(
        session_id,
        day=request.day,
        start_time=request.start_time,
        end_time=request.end_time,
        classroom=request.classroom,
        pointer_offset=request.pointer_offset,
        expected_version=request.expected_version,
    )
    return map_session_to_response(session, clock.now())
