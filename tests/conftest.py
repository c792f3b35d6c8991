import asyncio

import pytest
from fastapi.testclient import TestClient

from contact_book_api.app.core.config import settings
from contact_book_api.app.core.db import init_db
from contact_book_api.app.main import app


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    """Give every test its own migrated SQLite file."""
    db_path = tmp_path / "contacts.db"
    monkeypatch.setattr(settings, "database_url", str(db_path))
    init_db()
    return db_path


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def run():
    """Drive a service coroutine to completion."""
    return asyncio.run


@pytest.fixture
def jane():
    return {"firstName": "Jane", "lastName": "Doe", "email": "jane@example.com"}
