"""Local SQLite storage."""

from metatrace.db.connection import DatabaseConnection, get_db, savepoint, set_db

__all__ = ["DatabaseConnection", "get_db", "savepoint", "set_db"]
