"""
Service layer for contacts.

This module provides list, search, create, read, update and delete
operations over the ``contacts`` table.  Every operation opens its own
connection, runs as a single transaction and closes the connection
before returning.

All queries use parameterised statements.  The only dynamic SQL is the
column list of a partial update, which is restricted to
``UPDATABLE_COLUMNS``.

E‑mail uniqueness is owned by the store (``UNIQUE COLLATE NOCASE``).
The service translates the resulting ``sqlite3.IntegrityError`` into
``DuplicateEmailError``; any other store error propagates unchanged.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

from contact_book_api.app.core.db import get_connection
from contact_book_api.app.core.exceptions import ContactNotFoundError, DuplicateEmailError
from contact_book_api.app.schemas.contact import (
    ContactCreate,
    ContactListResponse,
    ContactRead,
    ContactUpdate,
)
from contact_book_api.app.services.pagination import build_pagination, page_offset

logger = logging.getLogger(__name__)

SEARCH_COLUMNS: Tuple[str, ...] = ("first_name", "last_name", "email", "phone")
UPDATABLE_COLUMNS = frozenset({"first_name", "last_name", "email", "phone"})
ORDER_BY = "ORDER BY created_at ASC, id ASC"

_DUPLICATE_EMAIL_MARKER = "contacts.email"

# Largest value SQLite can bind; ids and offsets beyond it cannot exist.
SQLITE_MAX_INTEGER = 2**63 - 1


def _format_timestamp(moment: datetime) -> str:
    # Fixed width so that lexical order in SQLite equals time order.
    return moment.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _next_timestamp(previous: str) -> str:
    """Return a timestamp strictly later than ``previous``.

    Two updates within the same clock tick would otherwise share an
    ``updated_at`` value.
    """
    now = _now()
    last = datetime.fromisoformat(previous)
    if now <= last:
        now = last + timedelta(microseconds=1)
    return _format_timestamp(now)


def _like_pattern(query: str) -> str:
    """Build a case‑folded ``LIKE`` pattern matching ``query`` literally."""
    escaped = (
        query.lower()
        .replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"%{escaped}%"


def build_search_clause(query: Optional[str]) -> Tuple[str, List[str]]:
    """Return a ``WHERE`` clause and its parameters for a search query.

    The query is matched as a case‑insensitive substring of any of the
    ``SEARCH_COLUMNS``.  A blank query produces no clause at all so that
    searching with it is the same as listing.
    """
    query = (query or "").strip()
    if not query:
        return "", []
    pattern = _like_pattern(query)
    conditions = " OR ".join(
        f"unicode_lower({column}) LIKE ? ESCAPE '\\'" for column in SEARCH_COLUMNS
    )
    return f"WHERE {conditions}", [pattern] * len(SEARCH_COLUMNS)


def _is_storable_id(contact_id: int) -> bool:
    return 0 < contact_id <= SQLITE_MAX_INTEGER


def _is_duplicate_email(exc: sqlite3.IntegrityError) -> bool:
    message = str(exc)
    return "UNIQUE constraint failed" in message and _DUPLICATE_EMAIL_MARKER in message


class ContactService:
    """Service class for managing contacts."""

    @classmethod
    async def list_contacts(cls, page: int = 1, limit: int = 10) -> ContactListResponse:
        """Return one page of contacts ordered by creation time, oldest first."""
        return cls._fetch_page("", [], page, limit)

    @classmethod
    async def search_contacts(
        cls,
        query: Optional[str],
        page: int = 1,
        limit: int = 10,
    ) -> ContactListResponse:
        """Return one page of contacts matching ``query``.

        Matches are case‑insensitive substrings of the first name, last
        name, e‑mail or phone.  ``%`` and ``_`` in the query are taken
        literally.  An empty query returns the same result as
        ``list_contacts``.
        """
        where, params = build_search_clause(query)
        return cls._fetch_page(where, params, page, limit)

    @classmethod
    async def count_contacts(cls) -> int:
        conn = get_connection()
        try:
            row = conn.execute("SELECT COUNT(*) AS total FROM contacts").fetchone()
            return row["total"]
        finally:
            conn.close()

    @classmethod
    async def get_contact(cls, contact_id: int) -> ContactRead:
        """Retrieve a single contact by its ID.

        Raises ``ContactNotFoundError`` if no such contact exists.
        """
        if not _is_storable_id(contact_id):
            raise ContactNotFoundError(contact_id)
        conn = get_connection()
        try:
            row = cls._select_by_id(conn, contact_id)
            if row is None:
                raise ContactNotFoundError(contact_id)
            return cls._row_to_contact_read(row)
        finally:
            conn.close()

    @classmethod
    async def create_contact(cls, data: ContactCreate) -> ContactRead:
        """Insert a new contact and return the stored record.

        ``created_at`` and ``updated_at`` receive the same timestamp.
        Raises ``DuplicateEmailError`` if the e‑mail is already taken
        (compared case‑insensitively).
        """
        timestamp = _format_timestamp(_now())
        conn = get_connection()
        try:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    """
                    INSERT INTO contacts (first_name, last_name, email, phone, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        data.first_name,
                        data.last_name,
                        str(data.email),
                        data.phone,
                        timestamp,
                        timestamp,
                    ),
                )
            except sqlite3.IntegrityError as exc:
                conn.rollback()
                if _is_duplicate_email(exc):
                    logger.warning("Rejected contact with duplicate email %s", data.email)
                    raise DuplicateEmailError() from exc
                raise
            contact_id = cursor.lastrowid
            conn.commit()
            logger.info("Created contact %s", contact_id)
            row = cls._select_by_id(conn, contact_id)
            return cls._row_to_contact_read(row)
        finally:
            conn.close()

    @classmethod
    async def update_contact(cls, contact_id: int, data: ContactUpdate) -> ContactRead:
        """Apply a partial update to a contact.

        Only fields present in ``data`` are written; ``updated_at`` is
        always moved strictly forward, even when no field was supplied.
        Raises ``ContactNotFoundError`` for an unknown ID and
        ``DuplicateEmailError`` when the new e‑mail belongs to another
        contact.
        """
        changes = {
            column: value
            for column, value in data.changes().items()
            if column in UPDATABLE_COLUMNS
        }
        if "email" in changes:
            changes["email"] = str(changes["email"])
        if not _is_storable_id(contact_id):
            raise ContactNotFoundError(contact_id)

        conn = get_connection()
        try:
            # Hold the write lock between reading the old timestamp and
            # writing the new one.
            conn.execute("BEGIN IMMEDIATE")
            current = cls._select_by_id(conn, contact_id)
            if current is None:
                conn.rollback()
                raise ContactNotFoundError(contact_id)

            assignments = [f"{column} = ?" for column in changes]
            assignments.append("updated_at = ?")
            params: List[object] = list(changes.values())
            params.append(_next_timestamp(current["updated_at"]))
            params.append(contact_id)
            try:
                conn.execute(
                    f"UPDATE contacts SET {', '.join(assignments)} WHERE id = ?",
                    params,
                )
            except sqlite3.IntegrityError as exc:
                conn.rollback()
                if _is_duplicate_email(exc):
                    logger.warning(
                        "Rejected update of contact %s to duplicate email %s",
                        contact_id,
                        changes.get("email"),
                    )
                    raise DuplicateEmailError() from exc
                raise
            conn.commit()
            logger.info("Updated contact %s (%s)", contact_id, ", ".join(changes) or "no fields")
            row = cls._select_by_id(conn, contact_id)
            return cls._row_to_contact_read(row)
        finally:
            conn.close()

    @classmethod
    async def delete_contact(cls, contact_id: int) -> None:
        """Delete a contact by ID.

        Raises ``ContactNotFoundError`` if nothing was deleted.
        """
        if not _is_storable_id(contact_id):
            raise ContactNotFoundError(contact_id)
        conn = get_connection()
        try:
            cursor = conn.execute("DELETE FROM contacts WHERE id = ?", (contact_id,))
            affected = cursor.rowcount
            conn.commit()
        finally:
            conn.close()
        if not affected:
            raise ContactNotFoundError(contact_id)
        logger.info("Deleted contact %s", contact_id)

    @classmethod
    def _fetch_page(
        cls,
        where: str,
        params: Sequence[object],
        page: int,
        limit: int,
    ) -> ContactListResponse:
        offset = page_offset(page, limit)
        conn = get_connection()
        try:
            total = conn.execute(
                f"SELECT COUNT(*) AS total FROM contacts {where}", params
            ).fetchone()["total"]
            rows = []
            # A window starting past the largest bindable offset is always empty.
            if offset <= SQLITE_MAX_INTEGER:
                rows = conn.execute(
                    f"SELECT * FROM contacts {where} {ORDER_BY} LIMIT ? OFFSET ?",
                    [*params, limit, offset],
                ).fetchall()
        finally:
            conn.close()
        return ContactListResponse(
            contacts=[cls._row_to_contact_read(row) for row in rows],
            pagination=build_pagination(page, limit, total),
        )

    @staticmethod
    def _select_by_id(conn: sqlite3.Connection, contact_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(
            "SELECT * FROM contacts WHERE id = ?", (contact_id,)
        ).fetchone()

    @staticmethod
    def _row_to_contact_read(row: sqlite3.Row) -> ContactRead:
        """Convert a database row to a ContactRead schema instance."""
        return ContactRead(
            id=row["id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            phone=row["phone"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
