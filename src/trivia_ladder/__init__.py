"""
trivia_ladder — Conversational Trivia Ladder Engine
===================================================

Quick Start (built-in demo bank):
    from trivia_ladder import TriviaRunner, DemoQuestionSupplier, ConsoleTransport
    runner = TriviaRunner(transport=ConsoleTransport(), supplier=DemoQuestionSupplier())
    runner.run_console("ada", "Ada")

Custom Channel and Question Bank:
    from trivia_ladder import MessageTransport, QuestionSupplier, TriviaRunner
    class MyTransport(MessageTransport): ...  # Implement 2 methods
    class MyBank(QuestionSupplier): ...       # Implement 2 methods
    runner = TriviaRunner(transport=MyTransport(), supplier=MyBank())
    runner.register_player("+2348000000000", "Ada")
    runner.handle_text("+2348000000000", "PLAY", message_id="wamid.1")

Settings come from ``load_settings()`` (JSON file, ``TRIVIA_*``
environment variables, ``.env``).

Type Definitions
----------------
Collaborator payload types are available for import:

    from trivia_ladder import Question, QuestionOptions, AuditRecord, SessionReport
"""

from .callbacks import MessageTransport, QuestionSupplier
from .config import GameSettings, load_settings
from .demo_supplier import ConsoleTransport, DemoQuestionSupplier, RecordingTransport
from .runner import TriviaRunner
from ._game.engine import GameSessionEngine
from .router import ConversationRouter
from .errors import (
    TriviaLadderError,
    UserInputError,
    InvalidAnswerError,
    LifelineUnavailableError,
    WrongPhaseError,
    SessionConflictError,
    PlayerSuspendedError,
    UnknownPlayerError,
    SessionClosedError,
    CollaboratorError,
    QuestionSupplierError,
    PersistenceError,
)
from .types import (
    Question,
    QuestionOptions,
    AuditRecord,
    SessionReport,
)

__all__ = [
    # Main classes
    "TriviaRunner",
    "GameSessionEngine",
    "ConversationRouter",
    "MessageTransport",
    "QuestionSupplier",
    "DemoQuestionSupplier",
    "ConsoleTransport",
    "RecordingTransport",
    # Settings
    "GameSettings",
    "load_settings",
    # Errors
    "TriviaLadderError",
    "UserInputError",
    "InvalidAnswerError",
    "LifelineUnavailableError",
    "WrongPhaseError",
    "SessionConflictError",
    "PlayerSuspendedError",
    "UnknownPlayerError",
    "SessionClosedError",
    "CollaboratorError",
    "QuestionSupplierError",
    "PersistenceError",
    # Types
    "Question",
    "QuestionOptions",
    "AuditRecord",
    "SessionReport",
]

__version__ = "1.0.0"
