# Area: Shared
"""Shared logging helpers."""

from .logging_config import (
    setup_logging,
    log_game_error,
    enable_conversation_mode,
    disable_conversation_mode,
    is_conversation_mode_enabled,
)
from .conversation_logger import ConversationLogger, get_conversation_logger

__all__ = [
    "setup_logging",
    "log_game_error",
    "enable_conversation_mode",
    "disable_conversation_mode",
    "is_conversation_mode_enabled",
    "ConversationLogger",
    "get_conversation_logger",
]
