"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), applying migrations on application start
(``init_db``) and a liveness probe (``ping``) used by the health
endpoint.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.  Append new
migrations to ``MIGRATIONS`` with an incremented version number; never
edit one that has already shipped.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings

logger = logging.getLogger(__name__)


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: contacts table
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS contacts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            first_name TEXT NOT NULL CHECK (length(first_name) > 0),
            last_name TEXT NOT NULL CHECK (length(last_name) > 0),
            email TEXT NOT NULL UNIQUE COLLATE NOCASE CHECK (length(email) > 0),
            phone TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """,
    ),
    # Migration 2: index backing the default list ordering
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_contacts_created_at ON contacts(created_at, id);
        """,
    ),
]


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Timestamps are stored as ISO‑8601 text and parsed by the
    pydantic schemas, so no SQLite type detection is enabled.

    SQLite's own ``lower()`` only folds ASCII letters, so the connection
    also registers ``unicode_lower()`` for case‑insensitive search.
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    conn.create_function("unicode_lower", 1, _unicode_lower, deterministic=True)
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit.

    The transaction is committed when the block finishes without an
    exception and rolled back otherwise.
    """
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version and applies every migration in
    ``MIGRATIONS`` with a higher version.
    """
    db_path = get_database_path()
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                logger.info("Applied migration %s", version)
                current_version = version
    logger.debug("Database %s at schema version %s", db_path, current_version)


def ping() -> bool:
    """Return ``True`` if the database answers a trivial query."""
    with get_cursor() as cursor:
        row = cursor.execute("SELECT 1 AS ok").fetchone()
    return bool(row and row["ok"] == 1)
