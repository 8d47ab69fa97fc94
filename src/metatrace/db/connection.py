"""SQLite connections, savepoints and schema setup for the tracking store."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from metatrace.db.schema import SCHEMA_VERSION, get_schema_sql


@contextmanager
def savepoint(conn: sqlite3.Connection, name: str) -> Generator[None, None, None]:
    """Run a block under a named SAVEPOINT on an open connection.

    The block's writes are released together on success. If the block
    raises, they are rolled back to the savepoint and the exception
    propagates; earlier work on the connection is untouched.

    Args:
        conn: Open connection
        name: Savepoint identifier (a plain SQL name)
    """
    conn.execute(f"SAVEPOINT {name}")
    try:
        yield
    except BaseException:
        conn.execute(f"ROLLBACK TO {name}")
        conn.execute(f"RELEASE {name}")
        raise
    conn.execute(f"RELEASE {name}")


class DatabaseConnection:
    """Opens connections to the local tracking database."""

    def __init__(self, db_path: Path):
        """
        Args:
            db_path: Path to the SQLite database file (parents are created)
        """
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Yield a connection that commits on success and rolls back on error.

        Rows come back as sqlite3.Row and foreign keys are enforced, so a
        score can never point at a missing daily input.
        """
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def schema_version(self) -> int:
        """Version recorded by the last initialize_schema (0 for a new file)."""
        with self.get_connection() as conn:
            return conn.execute("PRAGMA user_version").fetchone()[0]

    def initialize_schema(self) -> None:
        """Create protocols, targets, daily inputs and the score ledger."""
        with self.get_connection() as conn:
            conn.executescript(get_schema_sql())
            conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

    def ensure_schema(self) -> bool:
        """Initialize the schema unless it is already current.

        Returns:
            True if the schema script was run
        """
        if self.schema_version() >= SCHEMA_VERSION:
            return False
        self.initialize_schema()
        return True


# Global database instance (lazy loaded)
_db: Optional[DatabaseConnection] = None


def get_db() -> DatabaseConnection:
    """Get the global database, opening the path from settings on first use."""
    global _db
    if _db is None:
        from metatrace.config import get_settings

        _db = DatabaseConnection(get_settings().database.path)
    return _db


def set_db(db: Optional[DatabaseConnection]) -> None:
    """Replace the global database (None resets to lazy loading)."""
    global _db
    _db = db
