"""
Display status of a session.

A SCHEDULED session whose time has come is shown as in progress or completed
without a backend transition. Display-only; never persisted.

Dependencies: academy_scheduler.core.enums
System role: Read-side status for calendars
"""

from datetime import date, datetime, time

from academy_scheduler.core.enums import SessionStatus


def visual_status(
    status: SessionStatus,
    session_date: date,
    start_time: time,
    end_time: time,
    now: datetime,
) -> str:
    """Lower-case status a calendar should render for the session."""
    status = SessionStatus(status)
    if status is not SessionStatus.SCHEDULED:
        return status.value.lower()

    start = datetime.combine(session_date, start_time)
    end = datetime.combine(session_date, end_time)
    if now >= end:
        return SessionStatus.COMPLETED.value.lower()
    if now >= start:
        return SessionStatus.IN_PROGRESS.value.lower()
    return SessionStatus.SCHEDULED.value.lower()
