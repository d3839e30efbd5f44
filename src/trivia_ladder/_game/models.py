# Area: Game
"""
trivia_ladder._game.models — Game dataclasses
=============================================

Player, GameSession and per-question records as the engine sees them.
The repositories translate these to and from SQLite rows.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .enums import GameMode, SessionStatus


@dataclass
class Player:
    """
    Durable player record.

    Attributes:
        player_id: Channel-neutral identifier
        display_name: Name used in messages
        games_played: Completed sessions (any terminal status)
        total_winnings: Sum of awarded amounts outside practice mode
        highest_question: Highest ladder index reached
        q1_timeout_streak: Consecutive sessions that timed out on Q1
        q1_timeout_last_at: Timestamp of the last Q1 timeout
        suspended_until: End of a temporary suspension, if any
        suspension_reason: Internal reason for the suspension
        penalty_games_remaining: Games still played on the short question
            timer after a suspension
        flagged: Permanent moderation flag
        flag_reason: Internal reason for the flag
    """

    player_id: str
    display_name: str
    games_played: int = 0
    total_winnings: int = 0
    highest_question: int = 0
    q1_timeout_streak: int = 0
    q1_timeout_last_at: Optional[float] = None
    suspended_until: Optional[float] = None
    suspension_reason: Optional[str] = None
    penalty_games_remaining: int = 0
    flagged: bool = False
    flag_reason: Optional[str] = None
    created_at: Optional[float] = None

    def is_suspended(self, now: float) -> bool:
        return self.suspended_until is not None and now < self.suspended_until


@dataclass
class QuestionRecord:
    """What happened on one ladder rung."""

    index: int
    question_id: str
    chosen: Optional[str] = None
    correct: bool = False
    latency: Optional[float] = None
    lifeline: Optional[str] = None
    outcome: str = "answered"  # answered, timeout, skipped

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "question_id": self.question_id,
            "chosen": self.chosen,
            "correct": self.correct,
            "latency": self.latency,
            "lifeline": self.lifeline,
            "outcome": self.outcome,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuestionRecord":
        return cls(
            index=int(data["index"]),
            question_id=str(data["question_id"]),
            chosen=data.get("chosen"),
            correct=bool(data.get("correct", False)),
            latency=data.get("latency"),
            lifeline=data.get("lifeline"),
            outcome=data.get("outcome", "answered"),
        )


@dataclass
class GameSession:
    """
    One run up the prize ladder.

    ``score`` is the running prize and never decreases. ``safe_floor``
    is the prize of the highest safe checkpoint crossed. ``final_score``
    is set once, at the terminal transition, to the amount awarded.
    """

    session_id: str
    player_id: str
    mode: GameMode = GameMode.CLASSIC
    tournament_id: Optional[str] = None
    status: SessionStatus = SessionStatus.READY
    current_index: int = 1
    records: List[QuestionRecord] = field(default_factory=list)
    fifty_fifty_used: bool = False
    skip_used: bool = False
    score: int = 0
    safe_floor: int = 0
    final_score: Optional[int] = None
    end_reason: Optional[str] = None
    review_required: bool = False
    current_question: Optional[Dict[str, Any]] = None
    removed_options: List[str] = field(default_factory=list)
    question_asked_at: Optional[float] = None
    started_at: Optional[float] = None
    last_activity_at: Optional[float] = None
    completed_at: Optional[float] = None

    @property
    def is_live(self) -> bool:
        return self.status.is_live

    @property
    def awaiting_delivery(self) -> bool:
        """Active, but the question for current_index never reached the player."""
        return self.status == SessionStatus.ACTIVE and self.question_asked_at is None

    @property
    def remaining_options(self) -> List[str]:
        if not self.current_question:
            return []
        return [k for k in sorted(self.current_question["options"]) if k not in self.removed_options]

    def clear_current_question(self) -> None:
        self.current_question = None
        self.removed_options = []
        self.question_asked_at = None
