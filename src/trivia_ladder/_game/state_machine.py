# Area: Game
"""
trivia_ladder._game.state_machine — GameSession status transitions
==================================================================

Table of valid status transitions. The engine asks the table before
mutating a session so that an event arriving in the wrong status (a
late answer after a timeout, a timer firing after a reset) is detected
and dropped instead of applied.
"""

import logging
from typing import Optional

from .enums import SessionEvent, SessionStatus

logger = logging.getLogger("trivia_ladder.state_machine")


# Valid transitions: {current_status: {event: next_status}}
TRANSITIONS = {
    SessionStatus.READY: {
        SessionEvent.START: SessionStatus.ACTIVE,
        SessionEvent.SESSION_TIMEOUT: SessionStatus.TIMEOUT,
        SessionEvent.CANCEL: SessionStatus.CANCELLED,
    },
    SessionStatus.ACTIVE: {
        SessionEvent.ANSWER_CORRECT: SessionStatus.ACTIVE,
        SessionEvent.SKIP: SessionStatus.ACTIVE,
        SessionEvent.FINAL_CORRECT: SessionStatus.COMPLETED,
        SessionEvent.ANSWER_WRONG: SessionStatus.COMPLETED,
        SessionEvent.QUESTION_TIMEOUT: SessionStatus.TIMEOUT,
        SessionEvent.SESSION_TIMEOUT: SessionStatus.TIMEOUT,
        SessionEvent.CANCEL: SessionStatus.CANCELLED,
        SessionEvent.TERMINATE: SessionStatus.CANCELLED,
    },
    SessionStatus.TIMEOUT: {},
    SessionStatus.COMPLETED: {},
    SessionStatus.CANCELLED: {},
}


def can_transition(status: SessionStatus, event: SessionEvent) -> bool:
    """Check if ``event`` is valid from ``status``."""
    return event in TRANSITIONS.get(status, {})


def next_status(status: SessionStatus, event: SessionEvent) -> SessionStatus:
    """
    Resolve the status reached by ``event``.

    Raises:
        ValueError: If the transition is not valid
    """
    if not can_transition(status, event):
        raise ValueError(f"Invalid transition: {event.value} from {status.value}")
    return TRANSITIONS[status][event]


def try_transition(session, event: SessionEvent) -> Optional[SessionStatus]:
    """
    Apply ``event`` to ``session.status`` in place.

    Returns the new status, or None (and leaves the session untouched)
    when the event is not valid from the current status.
    """
    if not can_transition(session.status, event):
        logger.info(
            f"[{session.session_id}] Ignoring {event.value} in status {session.status.value}"
        )
        return None
    previous = session.status
    session.status = next_status(previous, event)
    if previous != session.status:
        logger.info(
            f"[{session.session_id}] Status: {previous.value} → {session.status.value} ({event.value})"
        )
    return session.status
