# Area: Game
"""
trivia_ladder._game.player_locks — Per-player serialization
===========================================================

Router messages, engine operations and timer callbacks for the same
player run one at a time. Different players never share a lock.

A player's lock exists only while some thread holds it or waits for it;
the last one out removes it from the registry.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class PlayerLocks:
    """Registry of re-entrant locks, one per player id."""

    def __init__(self) -> None:
        self._locks: Dict[str, threading.RLock] = {}
        self._users: Dict[str, int] = {}
        self._guard = threading.Lock()

    def size(self) -> int:
        """Number of players with a lock in use."""
        with self._guard:
            return len(self._locks)

    def _acquire_entry(self, player_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(player_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[player_id] = lock
            self._users[player_id] = self._users.get(player_id, 0) + 1
            return lock

    def _release_entry(self, player_id: str) -> None:
        with self._guard:
            remaining = self._users[player_id] - 1
            if remaining:
                self._users[player_id] = remaining
            else:
                del self._users[player_id]
                del self._locks[player_id]

    @contextmanager
    def hold(self, player_id: str) -> Iterator[None]:
        lock = self._acquire_entry(player_id)
        try:
            with lock:
                yield
        finally:
            self._release_entry(player_id)
