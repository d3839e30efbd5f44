# Area: Store Tests
"""Tests for Player Repository."""

import os
import tempfile

import pytest

from trivia_ladder._store.database import init_database
from trivia_ladder._store.repo_players import PlayerRepository


class TestPlayerRepository:
    """Tests for PlayerRepository class."""

    @pytest.fixture
    def db_path(self):
        """Create temporary database for testing."""
        fd, path = tempfile.mkstemp(suffix=".db")
        os.close(fd)
        init_database(path)
        yield path
        os.unlink(path)

    @pytest.fixture
    def repo(self, db_path):
        """Create repository with test database."""
        return PlayerRepository(db_path)

    def test_ensure_player_creates(self, repo):
        """Test a new player starts with empty stats."""
        player = repo.ensure_player("p1", "Ada", 1000.0)

        assert player.player_id == "p1"
        assert player.display_name == "Ada"
        assert player.games_played == 0
        assert player.flagged is False
        assert player.suspended_until is None

    def test_ensure_player_keeps_existing(self, repo):
        repo.ensure_player("p1", "Ada", 1000.0)
        repo.record_completion("p1", 500, 4)

        player = repo.ensure_player("p1", "Someone Else", 2000.0)

        assert player.display_name == "Ada"
        assert player.games_played == 1

    def test_get_player_not_found(self, repo):
        assert repo.get_player("nobody") is None

    def test_record_completion_accumulates(self, repo):
        repo.ensure_player("p1", "Ada", 1000.0)

        repo.record_completion("p1", 1000, 6)
        repo.record_completion("p1", 0, 2)

        player = repo.get_player("p1")
        assert player.games_played == 2
        assert player.total_winnings == 1000
        assert player.highest_question == 6

    def test_q1_streak(self, repo):
        repo.ensure_player("p1", "Ada", 1000.0)

        repo.set_q1_streak("p1", 3, 1500.0)

        player = repo.get_player("p1")
        assert player.q1_timeout_streak == 3
        assert player.q1_timeout_last_at == 1500.0

    def test_suspend_resets_streak(self, repo):
        """Test suspension stores the window and clears the streak."""
        repo.ensure_player("p1", "Ada", 1000.0)
        repo.set_q1_streak("p1", 5, 1500.0)

        repo.suspend("p1", 5000.0, "q1_timeout_streak")

        player = repo.get_player("p1")
        assert player.suspended_until == 5000.0
        assert player.suspension_reason == "q1_timeout_streak"
        assert player.q1_timeout_streak == 0
        assert player.is_suspended(4999.0)
        assert not player.is_suspended(5000.0)
        assert player.penalty_games_remaining == 0

    def test_suspend_sets_penalty_games(self, repo):
        repo.ensure_player("p1", "Ada", 1000.0)

        repo.suspend("p1", 5000.0, "q1_timeout_streak", penalty_games=5)

        assert repo.get_player("p1").penalty_games_remaining == 5

    def test_consume_penalty_game_stops_at_zero(self, repo):
        """Test each finished game uses one penalty game, never going below zero."""
        repo.ensure_player("p1", "Ada", 1000.0)
        repo.suspend("p1", 5000.0, "q1_timeout_streak", penalty_games=2)

        assert repo.consume_penalty_game("p1") == 1
        assert repo.consume_penalty_game("p1") == 0
        assert repo.consume_penalty_game("p1") == 0
        assert repo.get_player("p1").penalty_games_remaining == 0

    def test_consume_penalty_game_unknown_player(self, repo):
        assert repo.consume_penalty_game("ghost") == 0

    def test_flag(self, repo):
        repo.ensure_player("p1", "Ada", 1000.0)

        repo.flag("p1", "verification_failed")

        player = repo.get_player("p1")
        assert player.flagged is True
        assert player.flag_reason == "verification_failed"
