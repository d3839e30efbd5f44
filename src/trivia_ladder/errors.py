"""
trivia_ladder.errors — Custom exception classes
===============================================

Defines the exception hierarchy for the game session engine.
Each exception stores enough context for structured logging; none of
them carries text meant for the player (see ``_game.messages``).
"""

from __future__ import annotations
from typing import Any, Dict, Optional
import json


class TriviaLadderError(Exception):
    """Base exception for all trivia_ladder errors."""

    error_type = "TRIVIA_LADDER_ERROR"

    def context(self) -> Dict[str, Any]:
        return {}

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type=self.error_type,
            summary=str(self),
            context=self.context(),
        )


# ── User input errors ─────────────────────────────────────────


class UserInputError(TriviaLadderError):
    """Malformed or out-of-phase input. Reported back, never a transition."""

    error_type = "USER_INPUT"

    def __init__(self, player_id: str, raw_text: str, reason: str):
        self.player_id = player_id
        self.raw_text = raw_text
        self.reason = reason
        super().__init__(f"Rejected input from {player_id!r}: {reason}")

    def context(self) -> Dict[str, Any]:
        return {"player_id": self.player_id, "raw_text": self.raw_text, "reason": self.reason}


class InvalidAnswerError(UserInputError):
    """Text is not an accepted answer for the current question."""

    error_type = "INVALID_ANSWER"


class LifelineUnavailableError(UserInputError):
    """Lifeline already used, or not applicable to this question."""

    error_type = "LIFELINE_UNAVAILABLE"

    def __init__(self, player_id: str, raw_text: str, lifeline: str, reason: str):
        self.lifeline = lifeline
        super().__init__(player_id, raw_text, reason)

    def context(self) -> Dict[str, Any]:
        ctx = super().context()
        ctx["lifeline"] = self.lifeline
        return ctx


class WrongPhaseError(UserInputError):
    """Command is valid in general but not in the session's current phase."""

    error_type = "WRONG_PHASE"


# ── Session lifecycle errors ──────────────────────────────────


class SessionConflictError(TriviaLadderError):
    """Raised when a player already owns a ready/active session."""

    error_type = "SESSION_CONFLICT"

    def __init__(self, player_id: str, existing_session_id: Optional[str] = None):
        self.player_id = player_id
        self.existing_session_id = existing_session_id
        super().__init__(
            f"Player {player_id!r} already has a live session ({existing_session_id})"
        )

    def context(self) -> Dict[str, Any]:
        return {"player_id": self.player_id, "existing_session_id": self.existing_session_id}


class PlayerSuspendedError(TriviaLadderError):
    """Raised when a temporarily suspended player tries to start a session."""

    error_type = "PLAYER_SUSPENDED"

    def __init__(self, player_id: str, suspended_until: float, reason: Optional[str] = None):
        self.player_id = player_id
        self.suspended_until = suspended_until
        self.reason = reason
        super().__init__(f"Player {player_id!r} is suspended until {suspended_until}")

    def context(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "suspended_until": self.suspended_until,
            "reason": self.reason,
        }


class UnknownPlayerError(TriviaLadderError):
    """Raised when an operation names a player that was never registered."""

    error_type = "UNKNOWN_PLAYER"

    def __init__(self, player_id: str):
        self.player_id = player_id
        super().__init__(f"Unknown player {player_id!r}")

    def context(self) -> Dict[str, Any]:
        return {"player_id": self.player_id}


class SessionClosedError(TriviaLadderError):
    """A conditional update found the session no longer live."""

    error_type = "SESSION_CLOSED"

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} is no longer live")

    def context(self) -> Dict[str, Any]:
        return {"session_id": self.session_id}


# ── Collaborator failures ─────────────────────────────────────


class CollaboratorError(TriviaLadderError):
    """An external collaborator failed; the game halts at its last durable state."""

    error_type = "COLLABORATOR_FAILURE"

    def __init__(self, collaborator: str, operation: str, cause: Optional[BaseException] = None):
        self.collaborator = collaborator
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{collaborator}.{operation} failed{detail}")

    def context(self) -> Dict[str, Any]:
        return {
            "collaborator": self.collaborator,
            "operation": self.operation,
            "cause": repr(self.cause) if self.cause is not None else None,
        }


class QuestionSupplierError(CollaboratorError):
    """Question supplier unavailable or returned an invalid question."""

    error_type = "QUESTION_SUPPLIER_FAILURE"

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        super().__init__("QuestionSupplier", operation, cause)


class PersistenceError(CollaboratorError):
    """A durable read or write failed."""

    error_type = "PERSISTENCE_FAILURE"

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        super().__init__("Database", operation, cause)


def _format_error_block(error_type: str, summary: str, context: Dict[str, Any]) -> str:
    """Format a structured error block for the log file."""
    from datetime import datetime, timezone

    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    lines = [
        "",
        "=" * 64,
        f" GAME ERROR — {error_type}",
        "=" * 64,
        f" Timestamp:    {timestamp}",
        f" Summary:      {summary}",
    ]

    if context:
        lines.append("")
        lines.append(" ── CONTEXT " + "─" * 52)
        lines.append(_indent_json(context))

    lines.append("")
    lines.append("=" * 64)
    lines.append("")

    return "\n".join(lines)


def _indent_json(data: Dict[str, Any], indent: int = 2) -> str:
    """Format JSON with indentation for error logs."""
    try:
        formatted = json.dumps(data, indent=indent, default=str)
        return "\n".join(" " + line for line in formatted.split("\n"))
    except (TypeError, ValueError):
        return f" {repr(data)}"
