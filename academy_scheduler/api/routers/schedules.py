"""
Weekly schedule API endpoints.

Routes:
- POST /schedules - Create weekly schedule
- GET /schedules - List schedules across groups (filters: day, classroom, group)
- GET /schedules/{id} - Get single schedule
- PUT /schedules/{id} - Update schedule (partial)
- DELETE /schedules/{id} - Delete schedule definition
- GET /groups/{group_id}/schedules - List a group's schedules

Dependencies: academy_scheduler.application.services, academy_scheduler.models
System role: Schedule registry HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status

from academy_scheduler.api.deps.dependencies import get_schedule_service
from academy_scheduler.application.services.schedule_service import ScheduleService
from academy_scheduler.core.enums import Classroom, DayOfWeek
from academy_scheduler.models.common import MessageResponse
from academy_scheduler.models.schedule import (
    CreateScheduleRequest,
    ScheduleResponse,
    UpdateScheduleRequest,
)

from .router_utils.error_handling import ERROR_RESPONSES, handle_scheduling_errors
from .router_utils.responses import map_schedule_to_response, map_schedules_to_response
from .router_utils.validators import validate_partial_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedules", tags=["schedules"], responses=ERROR_RESPONSES)
groups_router = APIRouter(prefix="/groups", tags=["schedules"], responses=ERROR_RESPONSES)


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
@handle_scheduling_errors
async def create_schedule(
    request: CreateScheduleRequest,
    schedule_service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleResponse:
    """
    Create a weekly schedule for a group.

    Raises:
        HTTPException(404): Group not found
        HTTPException(409): Overlaps another schedule of the group, or group cancelled
        HTTPException(422): Malformed times or start >= end
    """
    logger.info(
        "Creating schedule",
        extra={
            "group_id": str(request.group_id),
            "day_of_week": request.day_of_week.value,
            "classroom": request.classroom.value,
        },
    )
    schedule = await schedule_service.create_schedule(
        group_id=request.group_id,
        day_of_week=request.day_of_week,
        start_time=request.start_time,
        end_time=request.end_time,
        classroom=request.classroom,
    )
    return map_schedule_to_response(schedule)


@router.get("", response_model=list[ScheduleResponse])
@handle_scheduling_errors
async def list_schedules(
    day_of_week: DayOfWeek | None = None,
    classroom: Classroom | None = None,
    group_id: UUID | None = None,
    schedule_service: ScheduleService = Depends(get_schedule_service),
) -> list[ScheduleResponse]:
    """List schedules across groups ordered by day then start time."""
    schedules = await schedule_service.list_all_schedules(
        day_of_week=day_of_week,
        classroom=classroom,
        group_id=group_id,
    )
    return map_schedules_to_response(schedules)


@router.get("/{schedule_id}", response_model=ScheduleResponse)
@handle_scheduling_errors
async def get_schedule(
    schedule_id: UUID,
    schedule_service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleResponse:
    """
    Get single schedule by ID.

    Raises:
        HTTPException(404): Schedule not found
    """
    schedule = await schedule_service.get_schedule(schedule_id)
    return map_schedule_to_response(schedule)


@router.put("/{schedule_id}", response_model=ScheduleResponse)
@handle_scheduling_errors
async def update_schedule(
    schedule_id: UUID,
    request: UpdateScheduleRequest,
    schedule_service: ScheduleService = Depends(get_schedule_service),
) -> ScheduleResponse:
    """
    Update a schedule; omitted fields are kept.

    Raises:
        HTTPException(404): Schedule not found
        HTTPException(409): Overlaps a sibling schedule, or group cancelled
        HTTPException(422): Empty update, malformed times or start >= end
    """
    fields = validate_partial_update(request)
    logger.info(
        "Updating schedule",
        extra={"schedule_id": str(schedule_id), "fields": sorted(fields)},
    )
    schedule = await schedule_service.update_schedule(schedule_id, **fields)
    return map_schedule_to_response(schedule)


@router.delete("/{schedule_id}", response_model=MessageResponse)
@handle_scheduling_errors
async def delete_schedule(
    schedule_id: UUID,
    schedule_service: ScheduleService = Depends(get_schedule_service),
) -> MessageResponse:
    """
    Delete a schedule definition; generated sessions are kept.

    Raises:
        HTTPException(404): Schedule not found
        HTTPException(409): Group cancelled
    """
    await schedule_service.delete_schedule(schedule_id)
    return MessageResponse(message=f"Schedule {schedule_id} deleted")


@groups_router.get("/{group_id}/schedules", response_model=list[ScheduleResponse])
@handle_scheduling_errors
async def list_group_schedules(
    group_id: UUID,
    schedule_service: ScheduleService = Depends(get_schedule_service),
) -> list[ScheduleResponse]:
    """
    List a group's schedules ordered by day then start time.

    Raises:
        HTTPException(404): Group not found
    """
    schedules = await schedule_service.list_schedules(group_id)
    return map_schedules_to_response(schedules)
