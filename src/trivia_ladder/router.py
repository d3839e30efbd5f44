"""
trivia_ladder.router — Inbound text → conversation state → handler
==================================================================

The ``onText`` entry point of the package. Each inbound message is
routed to exactly one handler:

* a reset token cancels any live session, whatever the state;
* if the player has a live session (per the session repository, not the
  ephemeral store) the text goes to the game engine;
* otherwise the conversation state decides: mode selection or the menu.

Conversation state lives in the ephemeral store with a sliding expiry;
losing it only ever sends the player back to the menu.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ._game import messages
from ._game.engine import GameSessionEngine
from ._game.enums import ConversationTag, EndReason, GameMode
from ._game.player_locks import PlayerLocks
from ._shared.conversation_logger import ConversationLogger, get_conversation_logger
from ._shared.logging_config import log_game_error
from ._store.ephemeral import EphemeralStore, conversation_key
from ._store.repo_players import PlayerRepository
from .callbacks import MessageTransport
from .config import GameSettings
from .errors import CollaboratorError, PlayerSuspendedError, SessionConflictError

logger = logging.getLogger("trivia_ladder.router")

MODE_CHOICES = {
    "1": GameMode.CLASSIC,
    "CLASSIC": GameMode.CLASSIC,
    "2": GameMode.PRACTICE,
    "PRACTICE": GameMode.PRACTICE,
    "3": GameMode.TOURNAMENT,
    "TOURNAMENT": GameMode.TOURNAMENT,
}
MENU_TOKENS = ("PLAY", "MENU", "HI", "HELLO")
HELP_TOKENS = ("HELP", "?")


class ConversationRouter:
    """
    Stateful router for every player's inbound messages.

    Given an inbound text:
    1. Drops it if its transport message id was already processed
    2. Handles reset tokens
    3. Delegates to the engine while a session is live
    4. Otherwise drives the mode-selection conversation
    """

    def __init__(
        self,
        engine: GameSessionEngine,
        players: PlayerRepository,
        store: EphemeralStore,
        locks: PlayerLocks,
        transport: MessageTransport,
        settings: GameSettings,
        conversation_logger: Optional[ConversationLogger] = None,
    ):
        self.engine = engine
        self.players = players
        self.store = store
        self.locks = locks
        self.transport = transport
        self.settings = settings
        self._conv = conversation_logger or get_conversation_logger()

    def handle_text(self, identifier: str, text: str, message_id: Optional[str] = None) -> None:
        """Route one inbound text message."""
        with self.locks.hold(identifier):
            if self._is_duplicate(identifier, message_id):
                return
            state = self._get_state(identifier)
            self._conv.log_received(identifier, text, state["state"] if state else None)
            token = " ".join(text.strip().upper().split())

            try:
                if token in self.settings.reset_tokens:
                    self._handle_reset(identifier)
                    return

                session = self.engine.get_active_session(identifier)
                if session is not None:
                    self._set_state(identifier, ConversationTag.IN_GAME, {"session_id": session.session_id})
                    self.engine.handle_input(identifier, text)
                    return

                if state and state["state"] == ConversationTag.SELECT_GAME_MODE.value:
                    self._handle_mode_selection(identifier, token, text)
                else:
                    self._handle_idle(identifier, token)
            except CollaboratorError as e:
                log_game_error(e, identifier)
                self._send(identifier, messages.retry_later())

    def handle_image(self, identifier: str, media_ref: str, message_id: Optional[str] = None) -> None:
        """Route one inbound image (photo verification)."""
        with self.locks.hold(identifier):
            if self._is_duplicate(identifier, message_id):
                return
            self._conv.log_received(identifier, f"<image {media_ref}>")
            self.engine.handle_image(identifier, media_ref)

    # ── Handler 1: reset → cancel any live session ──

    def _handle_reset(self, identifier: str) -> None:
        cancelled = self.engine.cancel_session(identifier, EndReason.PLAYER_RESET)
        self.store.delete(conversation_key(identifier))
        if not cancelled:
            self._send(identifier, messages.nothing_to_reset())

    # ── Handler 2: no session, no pending choice → menu or help ──

    def _handle_idle(self, identifier: str, token: str) -> None:
        player = self.players.get_player(identifier)
        if player is None:
            self._send(identifier, messages.not_registered())
            return
        if token in HELP_TOKENS:
            self._send(
                identifier,
                messages.help_text(self.settings.start_token, self.settings.reset_tokens),
            )
            return
        self._set_state(identifier, ConversationTag.SELECT_GAME_MODE, {})
        self._send(identifier, messages.main_menu(player.display_name))

    # ── Handler 3: mode selection → start_session ──

    def _handle_mode_selection(self, identifier: str, token: str, raw_text: str) -> None:
        if token in HELP_TOKENS:
            self._send(
                identifier,
                messages.help_text(self.settings.start_token, self.settings.reset_tokens),
            )
            return
        if token in MENU_TOKENS:
            self._handle_idle(identifier, token)
            return

        head, _, rest = token.partition(" ")
        mode = MODE_CHOICES.get(head)
        if mode is None:
            self._send(identifier, messages.unknown_mode())
            return

        tournament_id = None
        if mode == GameMode.TOURNAMENT:
            # Keep the id as typed.
            parts = raw_text.strip().split(None, 1)
            tournament_id = parts[1].strip() if len(parts) > 1 else None
            if not tournament_id:
                self._send(identifier, messages.tournament_id_required())
                return
        elif rest:
            self._send(identifier, messages.unknown_mode())
            return

        try:
            session_id = self.engine.start_session(identifier, mode, tournament_id)
        except SessionConflictError as e:
            logger.info(f"Start rejected: {e}")
            self._send(identifier, messages.session_conflict())
            return
        except PlayerSuspendedError as e:
            logger.info(f"Start rejected: {e}", extra={"player_id": identifier})
            self._send(identifier, messages.suspended())
            return
        self._set_state(identifier, ConversationTag.IN_GAME, {"session_id": session_id})

    # ── Conversation state ──

    def _get_state(self, identifier: str) -> Optional[Dict[str, Any]]:
        key = conversation_key(identifier)
        state = self.store.get(key)
        if state is not None:
            self.store.touch(key, self.settings.conversation_ttl_seconds)
        return state

    def _set_state(self, identifier: str, tag: ConversationTag, data: Dict[str, Any]) -> None:
        self.store.set(
            conversation_key(identifier),
            {"state": tag.value, "data": data},
            self.settings.conversation_ttl_seconds,
        )

    def _is_duplicate(self, identifier: str, message_id: Optional[str]) -> bool:
        if not message_id:
            return False
        key = f"inbound:{identifier}:{message_id}"
        if self.store.set_if_absent(key, True, self.settings.inbound_dedupe_ttl_seconds):
            return False
        logger.info(f"Duplicate delivery {message_id} from {identifier} ignored")
        return True

    def _send(self, identifier: str, text: str) -> None:
        self._conv.log_sent(identifier, text)
        try:
            self.transport.send_text(identifier, text)
        except Exception as e:
            self._conv.log_error(f"send to {identifier} failed: {e}")
            logger.error(f"send_text to {identifier} failed: {e}", extra={"player_id": identifier})
