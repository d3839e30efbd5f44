# Area: Game
"""
Game - Session state machine, anti-cheat decisions and timers.

This package handles:
- Session status transitions
- Prize ladder scoring
- Anti-cheat escalation (speed, captcha, photo)
- Per-session timers
- Audit recording

The engine itself is imported from ``trivia_ladder._game.engine``; this
module only re-exports the data types so the storage layer can import
them without pulling the engine in.
"""

from .enums import (
    AuditEventType,
    ChallengeStage,
    ConversationTag,
    EndReason,
    GameMode,
    Lifeline,
    SessionEvent,
    SessionStatus,
    TimerPurpose,
)
from .ladder import PrizeLadder
from .models import GameSession, Player, QuestionRecord

__all__ = [
    "AuditEventType",
    "ChallengeStage",
    "ConversationTag",
    "EndReason",
    "GameMode",
    "Lifeline",
    "SessionEvent",
    "SessionStatus",
    "TimerPurpose",
    "PrizeLadder",
    "GameSession",
    "Player",
    "QuestionRecord",
]
