"""SQLite schema for the roster cache.

One table mirrors the roster of the last successful sync. The schema
version lives in ``PRAGMA user_version``; version 1 is the only one
defined, so there are no migrations yet.
"""

from __future__ import annotations

import sqlite3

from peopleinspace._constants import SCHEMA_VERSION
from peopleinspace.exceptions import StorageError

SCHEMA_DDL = """
CREATE TABLE IF NOT EXISTS people (
    name TEXT NOT NULL PRIMARY KEY,
    craft TEXT NOT NULL
)
"""


def configure_connection(conn: sqlite3.Connection) -> None:
    """WAL lets readers on other connections see only committed rosters."""
    conn.execute("PRAGMA journal_mode=WAL")


def schema_version(conn: sqlite3.Connection) -> int:
    row = conn.execute("PRAGMA user_version").fetchone()
    return int(row[0]) if row else 0


def apply_schema(conn: sqlite3.Connection) -> None:
    """Create the table on a fresh database; accept an existing v1 database.

    The connection must be in autocommit mode (``isolation_level=None``).
    """
    version = schema_version(conn)
    if version > SCHEMA_VERSION:
        raise StorageError(f"Database schema version {version} is newer than supported version {SCHEMA_VERSION}")

    conn.execute("BEGIN IMMEDIATE")
    try:
        conn.execute(SCHEMA_DDL)
        if version != SCHEMA_VERSION:
            conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")
