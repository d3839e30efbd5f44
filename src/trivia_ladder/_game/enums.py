# Area: Game
"""
trivia_ladder._game.enums — Session state machine enums
=======================================================

States, events and tags shared by the engine, the router and the
repositories. Values are the strings persisted in the database.
"""

from enum import Enum


class SessionStatus(Enum):
    """
    Status of a GameSession.

    State transitions:
    READY -> ACTIVE (on START)
    ACTIVE -> ACTIVE (on ANSWER_CORRECT / SKIP)
    ACTIVE -> COMPLETED (on ANSWER_WRONG or FINAL_CORRECT)
    ACTIVE -> TIMEOUT (on QUESTION_TIMEOUT)
    READY/ACTIVE -> TIMEOUT (on SESSION_TIMEOUT)
    READY/ACTIVE -> CANCELLED (on CANCEL or TERMINATE)
    """
    READY = "ready"
    ACTIVE = "active"
    TIMEOUT = "timeout"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_live(self) -> bool:
        return self in (SessionStatus.READY, SessionStatus.ACTIVE)


LIVE_STATUSES = (SessionStatus.READY.value, SessionStatus.ACTIVE.value)


class SessionEvent(Enum):
    """Events that drive GameSession.status transitions."""
    START = "START"
    ANSWER_CORRECT = "ANSWER_CORRECT"
    SKIP = "SKIP"
    FINAL_CORRECT = "FINAL_CORRECT"
    ANSWER_WRONG = "ANSWER_WRONG"
    QUESTION_TIMEOUT = "QUESTION_TIMEOUT"
    SESSION_TIMEOUT = "SESSION_TIMEOUT"
    CANCEL = "CANCEL"
    TERMINATE = "TERMINATE"


class GameMode(Enum):
    PRACTICE = "practice"
    CLASSIC = "classic"
    TOURNAMENT = "tournament"


class ChallengeStage(Enum):
    """Escalating verification stage; NONE means no challenge pending."""
    NONE = "none"
    SPEED = "speed"
    CAPTCHA = "captcha"
    PHOTO = "photo"


class Lifeline(Enum):
    FIFTY_FIFTY = "fifty_fifty"
    SKIP = "skip"


class TimerPurpose(Enum):
    QUESTION = "question"
    SESSION = "session"
    CHALLENGE = "challenge"


class EndReason(Enum):
    WRONG_ANSWER = "wrong_answer"
    QUESTION_TIMEOUT = "question_timeout"
    SESSION_TIMEOUT = "session_timeout"
    MAX_WIN = "max_win"
    PLAYER_RESET = "player_reset"
    ADMIN_CANCEL = "admin_cancel"
    VERIFICATION_FAILED = "verification_failed"


class ConversationTag(Enum):
    """Router-owned conversation states."""
    SELECT_GAME_MODE = "SELECT_GAME_MODE"
    IN_GAME = "IN_GAME"


class AuditEventType(Enum):
    SESSION_STARTED = "SESSION_STARTED"
    GAME_STARTED = "GAME_STARTED"
    QUESTION_ASKED = "QUESTION_ASKED"
    ANSWER_GIVEN = "ANSWER_GIVEN"
    LIFELINE_USED = "LIFELINE_USED"
    QUESTION_TIMEOUT = "QUESTION_TIMEOUT"
    SESSION_TIMEOUT = "SESSION_TIMEOUT"
    SPEED_MODE_ACTIVATED = "SPEED_MODE_ACTIVATED"
    CHALLENGE_SHOWN = "CHALLENGE_SHOWN"
    CHALLENGE_PASSED = "CHALLENGE_PASSED"
    CHALLENGE_FAILED = "CHALLENGE_FAILED"
    CHALLENGE_TIMEOUT = "CHALLENGE_TIMEOUT"
    SESSION_ENDED = "SESSION_ENDED"
    SESSION_CANCELLED = "SESSION_CANCELLED"
    SESSION_TERMINATED = "SESSION_TERMINATED"
    PERFECT_GAME_FLAGGED = "PERFECT_GAME_FLAGGED"
    Q1_TIMEOUT_TRACKED = "Q1_TIMEOUT_TRACKED"
    Q1_TIMEOUT_WARNING = "Q1_TIMEOUT_WARNING"
    Q1_TIMEOUT_SUSPENSION = "Q1_TIMEOUT_SUSPENSION"
    PLAYER_FLAGGED = "PLAYER_FLAGGED"
