"""
trivia_ladder.runner — Wiring and entry point
=============================================

The TriviaRunner is what a host application instantiates. It builds the
storage, timers, engine and router from one ``GameSettings`` and exposes
the handful of calls a channel adapter or admin tool needs.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Callable, Optional

from ._game.audit import AuditRecorder
from ._game.engine import GameSessionEngine
from ._game.enums import EndReason
from ._game.models import Player
from ._game.player_locks import PlayerLocks
from ._game.timers import TimerScheduler
from ._shared.conversation_logger import ConversationLogger
from ._shared.logging_config import setup_logging
from ._store.database import init_database
from ._store.ephemeral import EphemeralStore
from ._store.repo_audit import AuditRepository
from ._store.repo_players import PlayerRepository
from ._store.repo_sessions import SessionRepository
from .callbacks import MessageTransport, QuestionSupplier
from .config import GameSettings, load_settings
from .router import ConversationRouter
from .types import SessionReport

logger = logging.getLogger("trivia_ladder")


class TriviaRunner:
    """
    Main entry point for host applications.

    Usage
    -----
        from trivia_ladder import TriviaRunner, load_settings
        from my_channel import WhatsAppTransport
        from my_bank import QuestionBank

        runner = TriviaRunner(
            settings=load_settings("trivia.json"),
            transport=WhatsAppTransport(),
            supplier=QuestionBank(),
        )
        runner.register_player("+2348000000000", "Ada")

        # from the channel webhook:
        runner.handle_text("+2348000000000", "1", message_id="wamid.123")
    """

    def __init__(
        self,
        transport: MessageTransport,
        supplier: QuestionSupplier,
        settings: Optional[GameSettings] = None,
        clock: Callable[[], float] = time.time,
        timer_factory: Optional[Callable] = None,
        store_clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
        conversation_logger: Optional[ConversationLogger] = None,
        configure_logging: bool = True,
    ):
        self.settings = settings or load_settings()
        if configure_logging:
            setup_logging(log_file_path=self.settings.log_file)

        init_database(self.settings.database_path)
        self.players = PlayerRepository(self.settings.database_path)
        self.sessions = SessionRepository(self.settings.database_path)
        self.audit = AuditRecorder(AuditRepository(self.settings.database_path), clock=clock)

        self.store = EphemeralStore(clock=store_clock, sweep_interval=self.settings.ephemeral_sweep_seconds)
        self.locks = PlayerLocks()
        self.timers = TimerScheduler(self.store, timer_factory=timer_factory, clock=clock)
        self._clock = clock

        self.engine = GameSessionEngine(
            settings=self.settings,
            sessions=self.sessions,
            players=self.players,
            audit=self.audit,
            store=self.store,
            transport=transport,
            supplier=supplier,
            timers=self.timers,
            locks=self.locks,
            clock=clock,
            rng=rng,
            conversation_logger=conversation_logger,
        )
        self.router = ConversationRouter(
            engine=self.engine,
            players=self.players,
            store=self.store,
            locks=self.locks,
            transport=transport,
            settings=self.settings,
            conversation_logger=conversation_logger,
        )
        logger.info(f"Trivia runner ready (db={self.settings.database_path})")

    def register_player(self, player_id: str, display_name: str) -> Player:
        """Create the player record if it does not exist yet."""
        return self.players.ensure_player(player_id, display_name, self._clock())

    def handle_text(self, identifier: str, text: str, message_id: Optional[str] = None) -> None:
        self.router.handle_text(identifier, text, message_id)

    def handle_image(self, identifier: str, media_ref: str, message_id: Optional[str] = None) -> None:
        self.router.handle_image(identifier, media_ref, message_id)

    def cancel_session(self, session_id: str) -> bool:
        """Administrative cancellation."""
        return self.engine.cancel_session_by_id(session_id, EndReason.ADMIN_CANCEL)

    def get_session_trail(self, session_id: str):
        return self.audit.get_session_trail(session_id)

    def get_player_trail(self, player_id: str, start: Optional[float] = None, end: Optional[float] = None):
        return self.audit.get_player_trail(player_id, start, end)

    def session_report(self, session_id: str) -> SessionReport:
        return self.audit.build_session_report(session_id)

    def run_console(self, player_id: str, display_name: str, input_fn: Callable[[str], str] = input) -> None:
        """
        Play from the terminal as one player until EOF or ``QUIT``.

        Lines starting with ``/photo`` are routed as an image.
        """
        self.register_player(player_id, display_name)
        self.handle_text(player_id, "PLAY")
        while True:
            try:
                line = input_fn("> ")
            except (EOFError, KeyboardInterrupt):
                break
            if line.strip().upper() == "QUIT":
                break
            if line.strip().lower().startswith("/photo"):
                self.handle_image(player_id, line.strip()[len("/photo"):].strip() or "console-photo")
                continue
            self.handle_text(player_id, line)
        logger.info("Console session closed")
