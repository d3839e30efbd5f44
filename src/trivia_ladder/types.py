"""
trivia_ladder.types — TypedDict schemas for collaborator contracts
==================================================================

Documents the exact shape of the dictionaries exchanged with the
external collaborators (question supplier, admin reporting layer).

All types are exported from the main package:

    from trivia_ladder import Question, QuestionOptions, AuditRecord
"""

from typing import Any, Dict, List, Literal, Optional, TypedDict


OptionLetter = Literal["A", "B", "C", "D"]


# ============================================
# QuestionSupplier.next_question() output
# ============================================

class QuestionOptions(TypedDict):
    """The four fixed multiple choice options."""
    A: str
    B: str
    C: str
    D: str


class Question(TypedDict, total=False):
    """A question returned by ``QuestionSupplier.next_question()``.

    Fields
    ------
    id : str
        Stable question identifier, passed back to ``record_exposure``.
    text : str
        The question as shown to the player.
    options : QuestionOptions
        Options keyed by letter.
    correct_option : OptionLetter
        The correct letter.
    category : str
        Free-form category label (e.g. "History").
    fun_fact : str
        Optional trivia shown after a correct answer.
    """
    id: str
    text: str
    options: QuestionOptions
    correct_option: OptionLetter
    category: str
    fun_fact: Optional[str]


# ============================================
# Audit query surface
# ============================================

class AuditRecord(TypedDict):
    """One row returned by ``get_session_trail`` / ``get_player_trail``.

    ``payload`` is the structured event data written by the engine.
    ``created_at`` is a POSIX timestamp (seconds).
    """
    id: int
    session_id: Optional[str]
    player_id: str
    event_type: str
    payload: Dict[str, Any]
    created_at: float


class SessionReport(TypedDict):
    """Summary of one session assembled from its audit trail."""
    session_id: str
    player_id: Optional[str]
    event_count: int
    questions_asked: int
    answers_given: int
    correct_answers: int
    timeouts: int
    lifelines_used: List[str]
    challenges_shown: int
    challenges_failed: int
    average_latency_seconds: Optional[float]
    fastest_latency_seconds: Optional[float]
    flags: List[str]
    outcome: Optional[str]
