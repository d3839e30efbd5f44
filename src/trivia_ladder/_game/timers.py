# Area: Game
"""
trivia_ladder._game.timers — Per-session timer scheduler
========================================================

One logical timer per (session, purpose). Arming writes a marker with a
fresh token into the ephemeral store and starts a background timer;
disarming deletes the marker. A timer that fires after its marker was
removed or replaced finds a stale token and does nothing, so a cancelled
timer whose thread was already running can never act.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Callable, Dict, Optional, Tuple

from .enums import TimerPurpose
from .._store.ephemeral import EphemeralStore

logger = logging.getLogger("trivia_ladder.timers")

# Markers outlive their deadline so a slightly late fire still finds them.
MARKER_GRACE_SECONDS = 60.0


def _default_timer_factory(seconds: float, function: Callable, args: tuple):
    timer = threading.Timer(seconds, function, args=args)
    timer.daemon = True
    return timer


def marker_key(session_id: str, purpose: TimerPurpose) -> str:
    return f"timer:{session_id}:{purpose.value}"


class TimerScheduler:
    """
    Arms and disarms delayed callbacks keyed by (session, purpose).

    Args:
        store: Ephemeral store that holds the timer markers
        timer_factory: ``factory(seconds, function, args)`` returning an
            object with ``start()`` and ``cancel()``; defaults to a daemon
            ``threading.Timer``
        clock: Wall clock used for reported deadlines
    """

    def __init__(
        self,
        store: EphemeralStore,
        timer_factory: Optional[Callable] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._factory = timer_factory or _default_timer_factory
        self._clock = clock
        self._handles: Dict[Tuple[str, TimerPurpose], Tuple[str, object]] = {}
        self._lock = threading.Lock()

    def arm(
        self,
        session_id: str,
        purpose: TimerPurpose,
        seconds: float,
        callback: Callable[[str, TimerPurpose, str], None],
    ) -> str:
        """
        Arm (or re-arm) the timer for ``(session_id, purpose)``.

        ``callback(session_id, purpose, token)`` runs when the timer fires,
        unless it was disarmed or re-armed in the meantime.

        Returns:
            The token identifying this arming
        """
        token = uuid.uuid4().hex
        deadline = self._clock() + seconds
        self._store.set(
            marker_key(session_id, purpose),
            {"token": token, "deadline": deadline},
            seconds + MARKER_GRACE_SECONDS,
        )
        handle = self._factory(seconds, self._fire, (session_id, purpose, token, callback))
        with self._lock:
            previous = self._handles.pop((session_id, purpose), None)
            self._handles[(session_id, purpose)] = (token, handle)
        if previous is not None:
            previous[1].cancel()
        handle.start()
        logger.debug("Armed %s timer for %s (%.1fs)", purpose.value, session_id, seconds)
        return token

    def disarm(self, session_id: str, purpose: TimerPurpose) -> None:
        """Disarm one timer. No-op if not armed."""
        self._store.delete(marker_key(session_id, purpose))
        with self._lock:
            entry = self._handles.pop((session_id, purpose), None)
        if entry is not None:
            entry[1].cancel()
            logger.debug("Disarmed %s timer for %s", purpose.value, session_id)

    def disarm_all(self, session_id: str) -> None:
        """Disarm every timer of a session."""
        for purpose in TimerPurpose:
            self.disarm(session_id, purpose)

    def is_armed(self, session_id: str, purpose: TimerPurpose) -> bool:
        return self._store.exists(marker_key(session_id, purpose))

    def deadline(self, session_id: str, purpose: TimerPurpose) -> Optional[float]:
        marker = self._store.get(marker_key(session_id, purpose))
        return marker["deadline"] if marker else None

    def is_current(self, session_id: str, purpose: TimerPurpose, token: str) -> bool:
        """True while ``token`` is the live arming of this timer."""
        marker = self._store.get(marker_key(session_id, purpose))
        return marker is not None and marker["token"] == token

    def _fire(self, session_id: str, purpose: TimerPurpose, token: str, callback: Callable) -> None:
        if not self.is_current(session_id, purpose, token):
            logger.debug("Stale %s timer for %s ignored", purpose.value, session_id)
            return
        with self._lock:
            # A re-arm may have landed since the check; keep its handle.
            entry = self._handles.get((session_id, purpose))
            if entry is not None and entry[0] == token:
                del self._handles[(session_id, purpose)]
        logger.info(f"[{session_id}] {purpose.value} timer fired")
        try:
            callback(session_id, purpose, token)
        except Exception:
            logger.exception(f"[{session_id}] {purpose.value} timer callback failed")
