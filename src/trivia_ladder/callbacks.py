"""
trivia_ladder.callbacks — The collaborators the host application provides
=========================================================================

The engine never talks to a concrete channel or question bank. The host
application subclasses these two ABCs and hands instances to
``TriviaRunner`` (or directly to ``GameSessionEngine``).

Type Definitions
----------------
The question shape is defined in types.py:

    from trivia_ladder import Question, QuestionOptions
"""

from abc import ABC, abstractmethod
from .types import Question


class MessageTransport(ABC):
    """
    Outbound half of a channel (WhatsApp, Telegram, console, ...).

    Inbound text reaches the package through
    ``ConversationRouter.handle_text(identifier, text)``.
    """

    @abstractmethod
    def send_text(self, identifier: str, text: str) -> None:
        """Deliver a text message to the player identified by ``identifier``."""

    @abstractmethod
    def send_image(self, identifier: str, path: str, caption: str = "") -> None:
        """Deliver an image (by local path) with an optional caption."""


class QuestionSupplier(ABC):
    """
    Source of questions for the ladder.

    ``next_question`` must return a question the player has not seen in
    the current session. Raising any exception is treated as the supplier
    being unavailable: the session halts at its last durable state.
    """

    # ──────────────────────────────────────────────────────────────
    # next_question: pick a question for a ladder rung
    # ──────────────────────────────────────────────────────────────
    @abstractmethod
    def next_question(self, difficulty_index: int, player_id: str) -> Question:
        """
        Return an unused question for ``difficulty_index`` (1..N).

        Parameters
        ----------
        difficulty_index : int
            The ladder rung the question is for. Higher is harder.
        player_id : str
            Lets the supplier avoid repeats across the player's history.

        Returns
        -------
        Question
            Dict with ``id``, ``text``, ``options`` (A-D),
            ``correct_option`` and ``category``.
        """

    # ──────────────────────────────────────────────────────────────
    # record_exposure: exposure/correctness counters
    # ──────────────────────────────────────────────────────────────
    @abstractmethod
    def record_exposure(self, question_id: str, was_correct: bool) -> None:
        """Record that ``question_id`` was answered (or missed)."""
