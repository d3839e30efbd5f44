# Area: Store
"""
trivia_ladder._store.repo_audit — Audit Events Repository
=========================================================

Append-only storage for audit events.
"""

import json
from typing import Any, Dict, List, Optional

from .database import BaseRepository


def _row_to_record(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "session_id": row["session_id"],
        "player_id": row["player_id"],
        "event_type": row["event_type"],
        "payload": json.loads(row["payload"] or "{}"),
        "created_at": row["created_at"],
    }


class AuditRepository(BaseRepository):
    """Repository for audit_events table."""

    def append(
        self,
        session_id: Optional[str],
        player_id: str,
        event_type: str,
        payload: Dict[str, Any],
        created_at: float,
    ) -> None:
        query = """
            INSERT INTO audit_events (session_id, player_id, event_type, payload, created_at)
            VALUES (?, ?, ?, ?, ?)
        """
        self._execute(
            query, (session_id, player_id, event_type, json.dumps(payload, default=str), created_at)
        )

    def get_session_events(self, session_id: str) -> List[Dict[str, Any]]:
        """
        Get a session's events in insertion order.

        Returns:
            List of audit records, oldest first
        """
        query = "SELECT * FROM audit_events WHERE session_id = ? ORDER BY id"
        return [_row_to_record(r) for r in self._execute(query, (session_id,), fetch=True) or []]

    def get_player_events(
        self, player_id: str, start: Optional[float] = None, end: Optional[float] = None
    ) -> List[Dict[str, Any]]:
        """
        Get a player's events, optionally bounded by ``start <= created_at < end``.
        """
        query = "SELECT * FROM audit_events WHERE player_id = ?"
        params: list = [player_id]
        if start is not None:
            query += " AND created_at >= ?"
            params.append(start)
        if end is not None:
            query += " AND created_at < ?"
            params.append(end)
        query += " ORDER BY id"
        return [_row_to_record(r) for r in self._execute(query, tuple(params), fetch=True) or []]
