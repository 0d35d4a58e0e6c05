"""
Class session API endpoints.

Routes:
- POST /sessions/generate - Generate a group's sessions over a date range
- POST /sessions/generate/preview - Same, without writing
- POST /sessions - Create manual EXTRA/SCHEDULING session
- GET /sessions - List sessions (filters + pagination)
- GET /sessions/group/{group_id} - List a group's sessions
- GET /sessions/subject/{subject_id} - List a subject's sessions
- GET /sessions/{id} - Get single session
- PUT /sessions/{id} - Edit a SCHEDULED session
- DELETE /sessions/{id} - Delete a SCHEDULED session
- GET /sessions/{id}/history - Lifecycle history
- POST /sessions/{id}/start|complete|cancel - Lifecycle transitions
- POST /sessions/{id}/postpone - Postpone in place

Dependencies: academy_scheduler.application.services, academy_scheduler.models
System role: Session lifecycle HTTP API
"""

import logging
from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from academy_scheduler.api.deps.dependencies import (
    get_clock,
    get_generation_service,
    get_session_service,
)
from academy_scheduler.application.adapters.clock import Clock
from academy_scheduler.application.services.generation_service import GenerationService
from academy_scheduler.application.services.session_service import SessionService
from academy_scheduler.core.enums import SessionMode, SessionStatus, SessionType
from academy_scheduler.models.common import MessageResponse
from academy_scheduler.models.generation import (
    GenerateSessionsRequest,
    GenerationResponse,
    PreviewResponse,
)
from academy_scheduler.models.session import (
    CreateSessionRequest,
    PostponeSessionRequest,
    SessionListResponse,
    SessionResponse,
    SessionTransitionResponse,
    TransitionRequest,
    UpdateSessionRequest,
)

from .router_utils.error_handling import ERROR_RESPONSES, handle_scheduling_errors
from .router_utils.responses import (
    map_candidates_to_response,
    map_history_to_response,
    map_session_page,
    map_session_to_response,
    map_sessions_to_response,
)
from .router_utils.validators import validate_partial_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"], responses=ERROR_RESPONSES)


# --------------------------------------------------------------------------- #
# Generation
# --------------------------------------------------------------------------- #


@router.post("/generate", response_model=GenerationResponse, status_code=status.HTTP_201_CREATED)
@handle_scheduling_errors
async def generate_sessions(
    request: GenerateSessionsRequest,
    generation_service: GenerationService = Depends(get_generation_service),
    clock: Clock = Depends(get_clock),
) -> GenerationResponse:
    """
    Create the sessions a group's weekly schedules call for.

    Idempotent: slots that already hold a session are skipped.

    Raises:
        HTTPException(404): Group not found
        HTTPException(409): Group cancelled, or concurrent generation (retry)
        HTTPException(422): Inverted or too long date range
    """
    start_date, end_date = generation_service.resolve_range(request.start_date, request.end_date)
    logger.info(
        "Generating sessions",
        extra={
            "group_id": str(request.group_id),
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
        },
    )
    sessions = await generation_service.generate_sessions(request.group_id, start_date, end_date)
    return GenerationResponse(
        group_id=request.group_id,
        start_date=start_date,
        end_date=end_date,
        created=len(sessions),
        sessions=map_sessions_to_response(sessions, clock.now()),
    )


@router.post("/generate/preview", response_model=PreviewResponse)
@handle_scheduling_errors
async def preview_sessions(
    request: GenerateSessionsRequest,
    generation_service: GenerationService = Depends(get_generation_service),
) -> PreviewResponse:
    """
    Sessions generation would create, without writing anything.

    Raises:
        HTTPException(404): Group not found
        HTTPException(422): Inverted or too long date range
    """
    start_date, end_date = generation_service.resolve_range(request.start_date, request.end_date)
    candidates = await generation_service.preview_sessions(request.group_id, start_date, end_date)
    return PreviewResponse(
        group_id=request.group_id,
        start_date=start_date,
        end_date=end_date,
        count=len(candidates),
        sessions=map_candidates_to_response(candidates),
    )


# --------------------------------------------------------------------------- #
# Manual sessions and queries
# --------------------------------------------------------------------------- #


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
@handle_scheduling_errors
async def create_session(
    request: CreateSessionRequest,
    session_service: SessionService = Depends(get_session_service),
    clock: Clock = Depends(get_clock),
) -> SessionResponse:
    """
    Create a manual EXTRA or SCHEDULING session.

    Raises:
        HTTPException(404): Group not found
        HTTPException(409): Group already has a session at that slot, or group cancelled
        HTTPException(422): Invalid type/group/subject combination or times
    """
    logger.info(
        "Creating manual session",
        extra={
            "session_type": request.type.value,
            "group_id": str(request.group_id) if request.group_id else None,
            "date": request.date.isoformat(),
        },
    )
    session = await session_service.create_session(
        type=request.type,
        classroom=request.classroom,
        date=request.date,
        start_time=request.start_time,
        end_time=request.end_time,
        group_id=request.group_id,
        subject_id=request.subject_id,
        mode=request.mode,
    )
    return map_session_to_response(session, clock.now())


@router.get("", response_model=SessionListResponse)
@handle_scheduling_errors
async def list_sessions(
    group_id: UUID | None = None,
    subject_id: UUID | None = None,
    schedule_id: UUID | None = None,
    status: SessionStatus | None = None,
    type: SessionType | None = None,
    mode: SessionMode | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    session_service: SessionService = Depends(get_session_service),
    clock: Clock = Depends(get_clock),
) -> SessionListResponse:
    """List sessions ordered by date then start time."""
    sessions, total = await session_service.list_sessions(
        limit=limit,
        offset=offset,
        group_id=group_id,
        subject_id=subject_id,
        schedule_id=schedule_id,
        status=status,
        type=type,
        mode=mode,
        date_from=date_from,
        date_to=date_to,
    )
    logger.info(
        "Sessions retrieved successfully",
        extra={"count": len(sessions), "total": total, "limit": limit, "offset": offset},
    )
    return map_session_page(sessions, total, limit, offset, clock.now())


@router.get("/group/{group_id}", response_model=list[SessionResponse])
@handle_scheduling_errors
async def list_group_sessions(
    group_id: UUID,
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    session_service: SessionService = Depends(get_session_service),
    clock: Clock = Depends(get_clock),
) -> list[SessionResponse]:
    """
    List a group's sessions.

    Raises:
        HTTPException(404): Group not found
    """
    sessions = await session_service.list_sessions_by_group(group_id, limit=limit, offset=offset)
    return map_sessions_to_response(sessions, clock.now())


@router.get("/subject/{subject_id}", response_model=list[SessionResponse])
@handle_scheduling_errors
async def list_subject_sessions(
    subject_id: UUID,
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    session_service: SessionService = Depends(get_session_service),
    clock: Clock = Depends(get_clock),
) -> list[SessionResponse]:
    """List sessions teaching a subject."""
    sessions = await session_service.list_sessions_by_subject(
        subject_id, limit=limit, offset=offset
    )
    return map_sessions_to_response(sessions, clock.now())


@router.get("/{session_id}", response_model=SessionResponse)
@handle_scheduling_errors
async def get_session(
    session_id: UUID,
    session_service: SessionService = Depends(get_session_service),
    clock: Clock = Depends(get_clock),
) -> SessionResponse:
    """
    Get single session by ID.

    Raises:
        HTTPException(404): Session not found
    """
    session = await session_service.get_session(session_id)
    return map_session_to_response(session, clock.now())


@router.put("/{session_id}", response_model=SessionResponse)
@handle_scheduling_errors
async def update_session(
    session_id: UUID,
    request: UpdateSessionRequest,
    session_service: SessionService = Depends(get_session_service),
    clock: Clock = Depends(get_clock),
) -> SessionResponse:
    """
    Edit date, time, classroom or mode of a SCHEDULED session.

    Raises:
        HTTPException(404): Session not found
        HTTPException(409): Session already started/closed, slot taken or stale version
        HTTPException(422): Empty update, malformed times or start >= end
    """
    fields = validate_partial_update(request, "expected_version")
    session = await session_service.update_session(
        session_id, expected_version=request.expected_version, **fields
    )
    return map_session_to_response(session, clock.now())


@router.delete("/{session_id}", response_model=MessageResponse)
@handle_scheduling_errors
async def delete_session(
    session_id: UUID,
    expected_version: int | None = Query(None, ge=1),
    session_service: SessionService = Depends(get_session_service),
) -> MessageResponse:
    """
    Delete a SCHEDULED session.

    Raises:
        HTTPException(404): Session not found
        HTTPException(409): Session is not SCHEDULED, or stale version
    """
    await session_service.delete_session(session_id, expected_version=expected_version)
    return MessageResponse(message=f"Session {session_id} deleted")


@router.get("/{session_id}/history", response_model=list[SessionTransitionResponse])
@handle_scheduling_errors
async def get_session_history(
    session_id: UUID,
    session_service: SessionService = Depends(get_session_service),
) -> list[SessionTransitionResponse]:
    """
    Lifecycle history of a session, oldest first.

    Raises:
        HTTPException(404): Session not found
    """
    transitions = await session_service.get_history(session_id)
    return map_history_to_response(transitions)


# --------------------------------------------------------------------------- #
# Lifecycle
# --------------------------------------------------------------------------- #


@router.post("/{session_id}/start", response_model=SessionResponse)
@handle_scheduling_errors
async def start_session(
    session_id: UUID,
    request: TransitionRequest | None = None,
    session_service: SessionService = Depends(get_session_service),
    clock: Clock = Depends(get_clock),
) -> SessionResponse:
    """
    SCHEDULED -> IN_PROGRESS.

    Raises:
        HTTPException(404): Session not found
        HTTPException(409): Not allowed from the current status, or stale version
    """
    expected_version = request.expected_version if request else None
    session = await session_service.start_session(session_id, expected_version)
    return map_session_to_response(session, clock.now())


@router.post("/{session_id}/complete", response_model=SessionResponse)
@handle_scheduling_errors
async def complete_session(
    session_id: UUID,
    request: TransitionRequest | None = None,
    session_service: SessionService = Depends(get_session_service),
    clock: Clock = Depends(get_clock),
) -> SessionResponse:
    """
    IN_PROGRESS -> COMPLETED.

    Raises:
        HTTPException(404): Session not found
        HTTPException(409): Not allowed from the current status, or stale version
    """
    expected_version = request.expected_version if request else None
    session = await session_service.complete_session(session_id, expected_version)
    return map_session_to_response(session, clock.now())


@router.post("/{session_id}/cancel", response_model=SessionResponse)
@handle_scheduling_errors
async def cancel_session(
    session_id: UUID,
    request: TransitionRequest | None = None,
    session_service: SessionService = Depends(get_session_service),
    clock: Clock = Depends(get_clock),
) -> SessionResponse:
    """
    SCHEDULED -> CANCELLED.

    Raises:
        HTTPException(404): Session not found
        HTTPException(409): Not allowed from the current status, or stale version
    """
    expected_version = request.expected_version if request else None
    session = await session_service.cancel_session(session_id, expected_version)
    return map_session_to_response(session, clock.now())


@router.post("/{session_id}/postpone", response_model=SessionResponse)
@handle_scheduling_errors
async def postpone_session(
    session_id: UUID,
    request: PostponeSessionRequest,
    session_service: SessionService = Depends(get_session_service),
    clock: Clock = Depends(get_clock),
) -> SessionResponse:
    """
    SCHEDULED -> POSTPONED, moving the session in place (same id).

    Raises:
        HTTPException(404): Session not found
        HTTPException(409): Not SCHEDULED, new slot taken, or stale version
        HTTPException(422): Malformed times or start >= end
    """
    logger.info(
        "Postponing session",
        extra={"session_id": str(session_id), "new_date": request.new_date.isoformat()},
    )
    session = await session_service.postpone_session(
        session_id,
        new_date=request.new_date,
        new_start_time=request.new_start_time,
        new_end_time=request.new_end_time,
        new_classroom=request.new_classroom,
        new_mode=request.new_mode,
        expected_version=request.expected_version,
    )
    return map_session_to_response(session, clock.now())
