# Area: Store
"""
trivia_ladder._store.repo_sessions — Game Sessions Repository
=============================================================

Repository for the game_sessions table. This table is the single source
of truth for "does this player have a live session": a partial unique
index admits at most one ready/active row per player, and every write to
a live session is conditional on it still being live.
"""

import json
import sqlite3
import logging
from typing import Any, Dict, List, Optional

from .database import BaseRepository
from ..errors import SessionClosedError, SessionConflictError
from .._game.enums import GameMode, LIVE_STATUSES, SessionStatus
from .._game.models import GameSession, QuestionRecord

logger = logging.getLogger("trivia_ladder.repo_sessions")

_LIVE_SQL = "('" + "', '".join(LIVE_STATUSES) + "')"

_COLUMNS = (
    "session_id", "player_id", "mode", "tournament_id", "status",
    "current_index", "records", "fifty_fifty_used", "skip_used",
    "score", "safe_floor", "final_score", "end_reason", "review_required",
    "current_question", "removed_options", "question_asked_at",
    "started_at", "last_activity_at", "completed_at",
)


def _session_to_row(session: GameSession) -> Dict[str, Any]:
    return {
        "session_id": session.session_id,
        "player_id": session.player_id,
        "mode": session.mode.value,
        "tournament_id": session.tournament_id,
        "status": session.status.value,
        "current_index": session.current_index,
        "records": json.dumps([r.to_dict() for r in session.records]),
        "fifty_fifty_used": int(session.fifty_fifty_used),
        "skip_used": int(session.skip_used),
        "score": session.score,
        "safe_floor": session.safe_floor,
        "final_score": session.final_score,
        "end_reason": session.end_reason,
        "review_required": int(session.review_required),
        "current_question": (
            json.dumps(session.current_question) if session.current_question is not None else None
        ),
        "removed_options": json.dumps(session.removed_options),
        "question_asked_at": session.question_asked_at,
        "started_at": session.started_at,
        "last_activity_at": session.last_activity_at,
        "completed_at": session.completed_at,
    }


def _row_to_session(row: Dict[str, Any]) -> GameSession:
    return GameSession(
        session_id=row["session_id"],
        player_id=row["player_id"],
        mode=GameMode(row["mode"]),
        tournament_id=row["tournament_id"],
        status=SessionStatus(row["status"]),
        current_index=row["current_index"],
        records=[QuestionRecord.from_dict(r) for r in json.loads(row["records"] or "[]")],
        fifty_fifty_used=bool(row["fifty_fifty_used"]),
        skip_used=bool(row["skip_used"]),
        score=row["score"],
        safe_floor=row["safe_floor"],
        final_score=row["final_score"],
        end_reason=row["end_reason"],
        review_required=bool(row["review_required"]),
        current_question=json.loads(row["current_question"]) if row["current_question"] else None,
        removed_options=json.loads(row["removed_options"] or "[]"),
        question_asked_at=row["question_asked_at"],
        started_at=row["started_at"],
        last_activity_at=row["last_activity_at"],
        completed_at=row["completed_at"],
    )


class SessionRepository(BaseRepository):
    """
    Repository for game_sessions table.

    Handles creation under the one-live-session rule, lookups and
    conditional updates of live sessions.
    """

    def create_session(self, session: GameSession) -> None:
        """
        Insert a new session.

        Raises:
            SessionConflictError: If the player already has a ready/active session
        """
        row = _session_to_row(session)
        placeholders = ", ".join("?" for _ in _COLUMNS)
        query = f"INSERT INTO game_sessions ({', '.join(_COLUMNS)}) VALUES ({placeholders})"
        try:
            self._execute(query, tuple(row[c] for c in _COLUMNS))
        except sqlite3.IntegrityError as e:
            existing = self.get_live_session(session.player_id)
            logger.info(f"Rejected second live session for {session.player_id}: {e}")
            raise SessionConflictError(
                session.player_id, existing.session_id if existing else None
            ) from e

    def get_session(self, session_id: str) -> Optional[GameSession]:
        row = self._execute_one("SELECT * FROM game_sessions WHERE session_id = ?", (session_id,))
        return _row_to_session(row) if row else None

    def get_live_session(self, player_id: str) -> Optional[GameSession]:
        """
        Get the player's ready/active session.

        Returns:
            GameSession or None if the player has no live session
        """
        query = f"SELECT * FROM game_sessions WHERE player_id = ? AND status IN {_LIVE_SQL}"
        row = self._execute_one(query, (player_id,))
        return _row_to_session(row) if row else None

    def get_sessions_for_player(self, player_id: str) -> List[GameSession]:
        query = "SELECT * FROM game_sessions WHERE player_id = ? ORDER BY started_at"
        return [_row_to_session(r) for r in self._execute(query, (player_id,), fetch=True) or []]

    def save_live(self, session: GameSession) -> None:
        """
        Persist ``session`` only if its stored row is still live.

        The in-memory status may already be terminal; the guard is on the
        stored status, so exactly one writer wins a terminal transition.

        Raises:
            SessionClosedError: If the stored row is no longer ready/active
        """
        row = _session_to_row(session)
        assignments = ", ".join(f"{c} = ?" for c in _COLUMNS if c != "session_id")
        query = (
            f"UPDATE game_sessions SET {assignments} "
            f"WHERE session_id = ? AND status IN {_LIVE_SQL}"
        )
        params = tuple(row[c] for c in _COLUMNS if c != "session_id") + (session.session_id,)
        if self._execute_write(query, params) == 0:
            raise SessionClosedError(session.session_id)
