# Area: Store
"""
trivia_ladder._store — Durable and ephemeral storage
====================================================
"""

from .database import BaseRepository, get_connection, init_database
from .ephemeral import EphemeralStore
from .repo_audit import AuditRepository
from .repo_players import PlayerRepository
from .repo_sessions import SessionRepository

__all__ = [
    "BaseRepository",
    "get_connection",
    "init_database",
    "EphemeralStore",
    "AuditRepository",
    "PlayerRepository",
    "SessionRepository",
]
