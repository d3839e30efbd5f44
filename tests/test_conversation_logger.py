# Area: Shared Tests
"""Tests for ConversationLogger, error blocks and logging setup."""

import io
import json
import logging

from trivia_ladder._shared.conversation_logger import ConversationLogger
from trivia_ladder._shared.logging_config import (
    JSONFormatter,
    disable_conversation_mode,
    enable_conversation_mode,
    is_conversation_mode_enabled,
)
from trivia_ladder.errors import LifelineUnavailableError, PersistenceError


class TestConversationLogger:

    def test_received_line(self):
        stream = io.StringIO()
        conv = ConversationLogger(stream=stream)

        conv.log_received("p1", "hello   there", "SELECT_GAME_MODE")

        line = stream.getvalue()
        assert "RECEIVED" in line
        assert "SELECT_GAME_MODE" in line
        assert "hello there" in line

    def test_long_text_is_previewed(self):
        stream = io.StringIO()
        conv = ConversationLogger(stream=stream)

        conv.log_sent("p1", "x" * 200, 12)

        assert "x" * 60 not in stream.getvalue()
        assert "…" in stream.getvalue()

    def test_decision_line(self):
        stream = io.StringIO()
        ConversationLogger(stream=stream).log_decision("abcdef1234", "CHALLENGE_SHOWN", "speed#1")

        assert "abcdef12" in stream.getvalue()
        assert "speed#1" in stream.getvalue()

    def test_disabled_logger_is_silent(self):
        stream = io.StringIO()
        conv = ConversationLogger(enabled=False, stream=stream)

        conv.log_received("p1", "hi")
        conv.log_sent("p1", "hello")

        assert stream.getvalue() == ""


class TestErrorLogging:

    def test_error_block_has_context(self):
        error = LifelineUnavailableError("p1", "50", "fifty_fifty", "already used")

        block = error.format_error_log()

        assert "LIFELINE_UNAVAILABLE" in block
        assert "fifty_fifty" in block
        assert "already used" in block

    def test_collaborator_error_message(self):
        error = PersistenceError("update", RuntimeError("disk full"))

        assert str(error) == "Database.update failed: disk full"
        assert error.context()["collaborator"] == "Database"

    def test_json_formatter_keeps_extras(self):
        record = logging.LogRecord("trivia_ladder.engine", logging.ERROR, __file__, 1, "boom", None, None)
        record.player_id = "p1"

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "boom"
        assert data["player_id"] == "p1"
        assert data["level"] == "ERROR"

    def test_conversation_mode_toggle(self):
        enable_conversation_mode()
        assert is_conversation_mode_enabled()
        disable_conversation_mode()
        assert not is_conversation_mode_enabled()
