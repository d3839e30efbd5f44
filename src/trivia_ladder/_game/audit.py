# Area: Game
"""
trivia_ladder._game.audit — Audit recorder
==========================================

Best-effort append-only trail of every engine decision. A failed write
is logged and dropped; it never interrupts a game.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from .enums import AuditEventType
from ..types import AuditRecord, SessionReport
from .._store.repo_audit import AuditRepository

logger = logging.getLogger("trivia_ladder.audit")


class AuditRecorder:
    """Writes and queries audit events."""

    def __init__(self, repo: AuditRepository, clock: Callable[[], float] = time.time):
        self._repo = repo
        self._clock = clock

    def record(
        self,
        event_type: AuditEventType,
        player_id: str,
        session_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Append one event.

        Returns:
            True if the event was stored, False if the write failed
        """
        try:
            self._repo.append(session_id, player_id, event_type.value, payload or {}, self._clock())
            return True
        except Exception as e:
            logger.warning(
                f"Audit write failed for {event_type.value} ({session_id}): {e}",
                extra={"player_id": player_id, "session_id": session_id},
            )
            return False

    def get_session_trail(self, session_id: str) -> List[AuditRecord]:
        return self._repo.get_session_events(session_id)

    def get_player_trail(
        self, player_id: str, start: Optional[float] = None, end: Optional[float] = None
    ) -> List[AuditRecord]:
        """Events for ``player_id`` with ``start <= created_at < end``."""
        return self._repo.get_player_events(player_id, start, end)

    def build_session_report(self, session_id: str) -> SessionReport:
        """Summarize a session from its trail."""
        events = self.get_session_trail(session_id)
        by_type: Dict[str, List[AuditRecord]] = {}
        for event in events:
            by_type.setdefault(event["event_type"], []).append(event)

        answers = by_type.get(AuditEventType.ANSWER_GIVEN.value, [])
        latencies = [
            e["payload"]["latency"] for e in answers
            if e["payload"].get("latency") is not None
        ]
        flags = [
            t.value for t in (
                AuditEventType.SPEED_MODE_ACTIVATED,
                AuditEventType.PERFECT_GAME_FLAGGED,
                AuditEventType.SESSION_TERMINATED,
                AuditEventType.PLAYER_FLAGGED,
            )
            if t.value in by_type
        ]

        outcome = None
        for event_type in (
            AuditEventType.SESSION_ENDED,
            AuditEventType.SESSION_CANCELLED,
            AuditEventType.SESSION_TERMINATED,
        ):
            if event_type.value in by_type:
                outcome = by_type[event_type.value][-1]["payload"].get("end_reason")

        return {
            "session_id": session_id,
            "player_id": events[0]["player_id"] if events else None,
            "event_count": len(events),
            "questions_asked": len(by_type.get(AuditEventType.QUESTION_ASKED.value, [])),
            "answers_given": len(answers),
            "correct_answers": sum(1 for e in answers if e["payload"].get("correct")),
            "timeouts": len(by_type.get(AuditEventType.QUESTION_TIMEOUT.value, [])),
            "lifelines_used": [
                e["payload"].get("lifeline")
                for e in by_type.get(AuditEventType.LIFELINE_USED.value, [])
            ],
            "challenges_shown": len(by_type.get(AuditEventType.CHALLENGE_SHOWN.value, [])),
            "challenges_failed": (
                len(by_type.get(AuditEventType.CHALLENGE_FAILED.value, []))
                + len(by_type.get(AuditEventType.CHALLENGE_TIMEOUT.value, []))
            ),
            "average_latency_seconds": (
                round(sum(latencies) / len(latencies), 3) if latencies else None
            ),
            "fastest_latency_seconds": min(latencies) if latencies else None,
            "flags": flags,
            "outcome": outcome,
        }
