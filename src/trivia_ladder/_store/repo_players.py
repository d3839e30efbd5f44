# Area: Store
"""
trivia_ladder._store.repo_players — Players Repository
======================================================

Repository for the players table: registration, lifetime stats,
Q1 timeout streak, suspension and moderation flag.
"""

from typing import Any, Dict, Optional

from .database import BaseRepository
from .._game.models import Player


def _row_to_player(row: Dict[str, Any]) -> Player:
    return Player(
        player_id=row["player_id"],
        display_name=row["display_name"],
        games_played=row["games_played"],
        total_winnings=row["total_winnings"],
        highest_question=row["highest_question"],
        q1_timeout_streak=row["q1_timeout_streak"],
        q1_timeout_last_at=row["q1_timeout_last_at"],
        suspended_until=row["suspended_until"],
        suspension_reason=row["suspension_reason"],
        penalty_games_remaining=row["penalty_games_remaining"],
        flagged=bool(row["flagged"]),
        flag_reason=row["flag_reason"],
        created_at=row["created_at"],
    )


class PlayerRepository(BaseRepository):
    """
    Repository for players table.

    Handles registration, stats updates and moderation state.
    """

    def ensure_player(self, player_id: str, display_name: str, now: float) -> Player:
        """
        Register a player if unknown and return the stored record.

        Args:
            player_id: Channel-neutral identifier
            display_name: Name used in messages
            now: Registration timestamp
        """
        query = """
            INSERT OR IGNORE INTO players (player_id, display_name, created_at)
            VALUES (?, ?, ?)
        """
        self._execute(query, (player_id, display_name or player_id, now))
        return self.get_player(player_id)

    def get_player(self, player_id: str) -> Optional[Player]:
        """
        Get a player by ID.

        Returns:
            Player or None if not registered
        """
        row = self._execute_one("SELECT * FROM players WHERE player_id = ?", (player_id,))
        return _row_to_player(row) if row else None

    def set_q1_streak(self, player_id: str, streak: int, last_at: Optional[float]) -> None:
        query = """
            UPDATE players SET q1_timeout_streak = ?, q1_timeout_last_at = ?
            WHERE player_id = ?
        """
        self._execute(query, (streak, last_at, player_id))

    def suspend(self, player_id: str, until: float, reason: str, penalty_games: int = 0) -> None:
        """
        Suspend until ``until``; the Q1 streak restarts from zero.

        Args:
            player_id: Player identifier
            until: End of the suspension
            reason: Internal reason
            penalty_games: Games to play on the short question timer once
                the suspension is over
        """
        query = """
            UPDATE players
            SET suspended_until = ?, suspension_reason = ?, q1_timeout_streak = 0,
                penalty_games_remaining = ?
            WHERE player_id = ?
        """
        self._execute(query, (until, reason, penalty_games, player_id))

    def consume_penalty_game(self, player_id: str) -> int:
        """Count one penalty game as played; returns how many are left."""
        query = """
            UPDATE players
            SET penalty_games_remaining = MAX(penalty_games_remaining - 1, 0)
            WHERE player_id = ?
        """
        self._execute(query, (player_id,))
        row = self._execute_one(
            "SELECT penalty_games_remaining FROM players WHERE player_id = ?", (player_id,)
        )
        return row["penalty_games_remaining"] if row else 0

    def flag(self, player_id: str, reason: str) -> None:
        """Set the permanent moderation flag."""
        query = "UPDATE players SET flagged = 1, flag_reason = ? WHERE player_id = ?"
        self._execute(query, (reason, player_id))

    def record_completion(self, player_id: str, winnings: int, highest_question: int) -> None:
        """
        Fold one finished session into the lifetime stats.

        Args:
            player_id: Player identifier
            winnings: Amount to add to total_winnings (0 in practice)
            highest_question: Highest index reached in the session
        """
        query = """
            UPDATE players
            SET games_played = games_played + 1,
                total_winnings = total_winnings + ?,
                highest_question = MAX(highest_question, ?)
            WHERE player_id = ?
        """
        self._execute(query, (winnings, highest_question, player_id))
