# Area: Shared
"""
trivia_ladder._shared.conversation_logger — Conversation line logging
=====================================================================

One colored line per inbound/outbound message and per engine
decision, with session context and the deadline currently armed.
"""

from __future__ import annotations
import sys
from datetime import datetime, timedelta
from typing import Optional

GREEN = "\033[32m"         # Inbound / outbound messages
ORANGE = "\033[38;5;208m"  # Engine decisions
RED = "\033[31m"           # Errors
RESET = "\033[0m"

# Preview length for message bodies
PREVIEW_CHARS = 48


def _preview(text: str) -> str:
    flat = " ".join(text.split())
    if len(flat) > PREVIEW_CHARS:
        return flat[: PREVIEW_CHARS - 1] + "…"
    return flat


class ConversationLogger:
    """Logger for conversation traffic and engine decisions."""

    def __init__(self, enabled: bool = True, stream=None):
        self.enabled = enabled
        self._stream = stream

    @property
    def stream(self):
        return self._stream or sys.stdout

    def _now(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _deadline(self, seconds: Optional[float]) -> str:
        if not seconds or seconds <= 0:
            return "N/A"
        return (datetime.now() + timedelta(seconds=seconds)).strftime("%H:%M:%S")

    def _emit(self, line: str, stream=None) -> None:
        if self.enabled:
            print(line, file=stream or self.stream)

    def log_received(self, player_id: str, text: str, state: Optional[str] = None) -> None:
        """Log an inbound message."""
        self._emit(
            f"{GREEN}{self._now()} | RECEIVED | from {player_id:20} | "
            f"STATE: {state or '-':16} | {_preview(text)}{RESET}"
        )

    def log_sent(self, player_id: str, text: str, deadline_seconds: Optional[float] = None) -> None:
        """Log an outbound message."""
        self._emit(
            f"{GREEN}{self._now()} | SENT     | to   {player_id:20} | "
            f"DEADLINE: {self._deadline(deadline_seconds):8} | {_preview(text)}{RESET}"
        )

    def log_decision(self, session_id: str, decision: str, detail: str = "") -> None:
        """Log an engine decision (transition, escalation, flag)."""
        self._emit(
            f"{ORANGE}{self._now()} | SESSION: {session_id[:8]:8} | "
            f"{decision:22} | {detail}{RESET}"
        )

    def log_error(self, description: str) -> None:
        self._emit(f"{RED}[ERROR] {self._now()} | {description}{RESET}", stream=sys.stderr)


_conversation_logger: Optional[ConversationLogger] = None


def get_conversation_logger() -> ConversationLogger:
    """Get or create the global conversation logger instance."""
    global _conversation_logger
    if _conversation_logger is None:
        _conversation_logger = ConversationLogger()
    return _conversation_logger
