# Area: Store
"""
trivia_ladder._store.ephemeral — TTL-keyed ephemeral store
==========================================================

In-process key/value store with per-key expiry. Holds conversation
state, anti-cheat counters, timer markers and inbound message ids.
Nothing here is authoritative for "is there a live session"; the
session repository is.

Expired keys are dropped when read, and by a sweep that runs on write
at most once per ``sweep_interval`` seconds. Keys that are written once
and never read again (inbound message ids) rely on the sweep.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger("trivia_ladder.ephemeral")


class EphemeralStore:
    """
    Thread-safe TTL store.

    Values are deep-copied on the way in and out so callers never share
    mutable state through the store.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval: float = 300.0,
    ) -> None:
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()

    def size(self) -> int:
        """Number of entries held, expired or not."""
        with self._lock:
            return len(self._entries)

    def _alive(self, key: str, now: float) -> Optional[Tuple[Any, float]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if now >= entry[1]:
            del self._entries[key]
            return None
        return entry

    def _drop_expired(self, now: float) -> int:
        # Caller holds self._lock.
        expired = [k for k, (_, exp) in self._entries.items() if now >= exp]
        for key in expired:
            del self._entries[key]
        self._last_sweep = now
        return len(expired)

    def _maybe_sweep(self, now: float) -> None:
        if now - self._last_sweep < self._sweep_interval:
            return
        dropped = self._drop_expired(now)
        if dropped:
            logger.debug("Swept %d expired keys", dropped)

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Set (or overwrite) ``key`` to expire ``ttl_seconds`` from now."""
        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)
            self._entries[key] = (copy.deepcopy(value), now + ttl_seconds)

    def set_if_absent(self, key: str, value: Any, ttl_seconds: float) -> bool:
        """Set ``key`` only if no live entry exists. Returns True if set."""
        with self._lock:
            now = self._clock()
            self._maybe_sweep(now)
            if self._alive(key, now) is not None:
                return False
            self._entries[key] = (copy.deepcopy(value), now + ttl_seconds)
            return True

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._alive(key, self._clock())
            if entry is None:
                return default
            return copy.deepcopy(entry[0])

    def touch(self, key: str, ttl_seconds: float) -> bool:
        """Slide the expiry of a live key. Returns False if it already expired."""
        with self._lock:
            now = self._clock()
            entry = self._alive(key, now)
            if entry is None:
                return False
            self._entries[key] = (entry[0], now + ttl_seconds)
            return True

    def delete(self, key: str) -> None:
        """Remove ``key``. No-op if not found."""
        with self._lock:
            self._entries.pop(key, None)

    def exists(self, key: str) -> bool:
        with self._lock:
            return self._alive(key, self._clock()) is not None

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        with self._lock:
            dropped = self._drop_expired(self._clock())
        if dropped:
            logger.debug("Purged %d expired keys", dropped)
        return dropped


def conversation_key(player_id: str) -> str:
    """Key of a player's conversation state."""
    return f"conversation:{player_id}"
