# Area: Shared
"""
trivia_ladder._shared.logging_config — Structured logging setup
===============================================================

Configures dual logging: terminal (colored) + file (JSON).
Conversation mode suppresses standard logs on the terminal so that
only the one-line conversation records are shown.
"""

from __future__ import annotations
import logging
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..errors import TriviaLadderError

# Package logger
logger = logging.getLogger("trivia_ladder")

# Flag to control conversation-only terminal output
_conversation_mode_enabled = False


class ConversationFilter(logging.Filter):
    """Filter that suppresses terminal logs while conversation mode is on."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not _conversation_mode_enabled


class TerminalFormatter(logging.Formatter):
    """Colored formatter for terminal output."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        original = record.levelname
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    """JSON formatter for file output."""

    EXTRA_KEYS = ("player_id", "session_id", "error_type")

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in self.EXTRA_KEYS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def setup_logging(
    log_file_path: str = "trivia_ladder.log",
    level: int = logging.INFO,
) -> None:
    """
    Configure logging for the package.

    Parameters
    ----------
    log_file_path : str
        Path to the log file. Defaults to 'trivia_ladder.log' in current dir.
    level : int
        Logging level. Defaults to INFO.
    """
    pkg_logger = logging.getLogger("trivia_ladder")
    pkg_logger.setLevel(level)
    pkg_logger.handlers.clear()

    terminal_handler = logging.StreamHandler(sys.stdout)
    terminal_handler.setLevel(level)
    terminal_handler.setFormatter(TerminalFormatter(
        fmt="%(asctime)s │ %(levelname)s │ %(name)s │ %(message)s",
        datefmt="%H:%M:%S",
    ))
    terminal_handler.addFilter(ConversationFilter())
    pkg_logger.addHandler(terminal_handler)

    try:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(JSONFormatter())
        pkg_logger.addHandler(file_handler)
    except OSError as e:
        pkg_logger.warning(f"Could not create log file: {e}")

    pkg_logger.propagate = False


def log_game_error(error: "TriviaLadderError", player_id: str = None) -> None:
    """
    Log a game error: the structured block goes to the file handler,
    a one-line summary to everything else.
    """
    logger.error(
        f"{error.__class__.__name__}: {error}",
        extra={
            "player_id": player_id,
            "error_type": error.error_type,
        },
    )
    logger.debug(error.format_error_log())


def enable_conversation_mode() -> None:
    """
    Enable conversation logging mode.

    - Standard logs are suppressed from terminal
    - Only inbound/outbound conversation lines are shown
    - File logging remains unchanged
    """
    global _conversation_mode_enabled
    _conversation_mode_enabled = True


def disable_conversation_mode() -> None:
    """Disable conversation mode (restore standard logging)."""
    global _conversation_mode_enabled
    _conversation_mode_enabled = False


def is_conversation_mode_enabled() -> bool:
    return _conversation_mode_enabled
