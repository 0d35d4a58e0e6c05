"""
Session lifecycle state machine.

Transition table and guards for individual sessions. Persistence of a
transition (conditional update, version bump, history row) lives in
SessionService; this module only decides what is legal.

Dependencies: academy_scheduler.core.enums, academy_scheduler.core.exceptions
System role: Lifecycle rules shared by services and API
"""

import enum
from dataclasses import dataclass
from typing import Any

from academy_scheduler.core.enums import SessionStatus
from academy_scheduler.core.exceptions import InvalidTransition


class SessionAction(str, enum.Enum):
    """Actions a caller can request on a session."""

    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"
    POSTPONE = "postpone"
    DELETE = "delete"


# Target status per (current status, action). DELETE has no target: the
# record is removed, but it shares the SCHEDULED guard.
TRANSITIONS: dict[SessionStatus, dict[SessionAction, SessionStatus | None]] = {
    SessionStatus.SCHEDULED: {
        SessionAction.START: SessionStatus.IN_PROGRESS,
        SessionAction.CANCEL: SessionStatus.CANCELLED,
        SessionAction.POSTPONE: SessionStatus.POSTPONED,
        SessionAction.DELETE: None,
    },
    SessionStatus.IN_PROGRESS: {
        SessionAction.COMPLETE: SessionStatus.COMPLETED,
    },
    SessionStatus.COMPLETED: {},
    SessionStatus.CANCELLED: {},
    SessionStatus.POSTPONED: {},
}

# Time, classroom and mode may only be edited before the class happens.
EDITABLE_STATUSES = frozenset({SessionStatus.SCHEDULED})

# History action for direct edits, which keep the status.
EDIT_ACTION = "update"

# Actions that move a session off its slot; the slot is kept in history.
RELOCATING_ACTIONS = frozenset({SessionAction.POSTPONE.value, EDIT_ACTION})


@dataclass(frozen=True)
class Transition:
    """A validated lifecycle step."""

    action: SessionAction
    from_status: SessionStatus
    to_status: SessionStatus | None


def allowed_actions(status: SessionStatus) -> list[SessionAction]:
    """Legal actions from a status, in declaration order."""
    return list(TRANSITIONS[SessionStatus(status)])


def plan_transition(
    status: SessionStatus,
    action: SessionAction | str,
    session_id: Any = None,
) -> Transition:
    """
    Validate an action against the current status.

    Args:
        status: Current session status
        action: Requested action
        session_id: Used only for error context

    Returns:
        Transition: The validated step

    Raises:
        InvalidTransition: Action not allowed from status
    """
    status = SessionStatus(status)
    action = SessionAction(action)
    targets = TRANSITIONS[status]
    if action not in targets:
        raise InvalidTransition(status, action.value, session_id=session_id)
    return Transition(action=action, from_status=status, to_status=targets[action])


def ensure_editable(status: SessionStatus, session_id: Any = None) -> None:
    """
    Guard direct edits of time, classroom or mode.

    Raises:
        InvalidTransition: Session already left SCHEDULED
    """
    if SessionStatus(status) not in EDITABLE_STATUSES:
        raise InvalidTransition(status, EDIT_ACTION, session_id=session_id)
