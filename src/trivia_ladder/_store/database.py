# Area: Store
"""
trivia_ladder._store.database — Database Initialization
=======================================================

Handles SQLite database initialization and connection management
for players, game sessions and the audit trail.
"""

import sqlite3
import logging
from pathlib import Path
from typing import Optional

from ..errors import PersistenceError

logger = logging.getLogger("trivia_ladder.database")

# Path to schema file
SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def get_connection(db_path: str = "trivia_ladder.db") -> sqlite3.Connection:
    """
    Get a database connection.

    Args:
        db_path: Path to the SQLite database file

    Returns:
        SQLite connection with row factory set
    """
    conn = sqlite3.connect(db_path, timeout=10)
    conn.row_factory = sqlite3.Row
    return conn


def init_database(db_path: str = "trivia_ladder.db") -> None:
    """
    Initialize the database with schema.

    Args:
        db_path: Path to the SQLite database file
    """
    conn = get_connection(db_path)
    try:
        with open(SCHEMA_PATH, "r") as f:
            schema = f.read()
        conn.executescript(schema)
        conn.commit()
        logger.info(f"Database initialized at {db_path}")
    finally:
        conn.close()


class BaseRepository:
    """
    Base class for database repositories.

    Every sqlite3 failure is re-raised as PersistenceError so the engine
    can treat it as a collaborator failure.
    """

    def __init__(self, db_path: str = "trivia_ladder.db"):
        """
        Initialize repository.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        """Get a database connection."""
        return get_connection(self.db_path)

    def _execute(
        self, query: str, params: tuple = (), fetch: bool = False
    ) -> Optional[list]:
        """
        Execute a query.

        Args:
            query: SQL query string
            params: Query parameters
            fetch: If True, fetch and return results

        Returns:
            Query results if fetch=True, else None
        """
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise PersistenceError("connect", e) from e
        try:
            cursor = conn.execute(query, params)
            if fetch:
                return [dict(row) for row in cursor.fetchall()]
            conn.commit()
            return None
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as e:
            raise PersistenceError(query.split()[0].lower(), e) from e
        finally:
            conn.close()

    def _execute_write(self, query: str, params: tuple = ()) -> int:
        """Execute a write and return the number of affected rows."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise PersistenceError("connect", e) from e
        try:
            cursor = conn.execute(query, params)
            conn.commit()
            return cursor.rowcount
        except sqlite3.IntegrityError:
            raise
        except sqlite3.Error as e:
            raise PersistenceError(query.split()[0].lower(), e) from e
        finally:
            conn.close()

    def _execute_one(self, query: str, params: tuple = ()) -> Optional[dict]:
        """Execute query and return single result."""
        results = self._execute(query, params, fetch=True)
        return results[0] if results else None
