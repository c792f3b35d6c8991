import sqlite3
from pathlib import Path

import pytest

from contact_book_api.app.core import db
from contact_book_api.app.core.config import settings


def test_migrations_are_recorded_once():
    db.init_db()
    db.init_db()

    with db.get_cursor() as cursor:
        versions = [row["version"] for row in cursor.execute("SELECT version FROM migrations ORDER BY version")]

    assert versions == [version for version, _ in db.MIGRATIONS]


def test_contacts_table_layout():
    with db.get_cursor() as cursor:
        columns = [row["name"] for row in cursor.execute("PRAGMA table_info(contacts)")]

    assert columns == [
        "id",
        "first_name",
        "last_name",
        "email",
        "phone",
        "created_at",
        "updated_at",
    ]


def test_email_unique_constraint_ignores_case():
    insert = (
        "INSERT INTO contacts (first_name, last_name, email, created_at, updated_at) "
        "VALUES ('A', 'B', ?, 'now', 'now')"
    )
    with db.get_cursor() as cursor:
        cursor.execute(insert, ("a@example.com",))

    with pytest.raises(sqlite3.IntegrityError, match="contacts.email"):
        with db.get_cursor() as cursor:
            cursor.execute(insert, ("A@EXAMPLE.COM",))


def test_empty_names_are_rejected_by_store():
    with pytest.raises(sqlite3.IntegrityError):
        with db.get_cursor() as cursor:
            cursor.execute(
                "INSERT INTO contacts (first_name, last_name, email, created_at, updated_at) "
                "VALUES ('', 'B', 'x@example.com', 'now', 'now')"
            )


def test_relative_database_path_is_resolved_against_project_root(monkeypatch):
    monkeypatch.setattr(settings, "database_url", "data/contacts.db")

    project_root = Path(db.__file__).resolve().parents[3]

    assert db.get_database_path() == str((project_root / "data" / "contacts.db").resolve())


def test_ping(database):
    assert db.ping() is True


def test_unicode_lower_is_registered():
    conn = db.get_connection()
    try:
        row = conn.execute("SELECT unicode_lower('ÄBC') AS value, unicode_lower(NULL) AS empty").fetchone()
    finally:
        conn.close()

    assert row["value"] == "äbc"
    assert row["empty"] is None
