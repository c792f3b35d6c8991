from datetime import datetime

import pytest

from contact_book_api.app.core.config import settings

API = "/api/v1/contacts"


def _parse(timestamp):
    return datetime.fromisoformat(timestamp.replace("Z", "+00:00"))


def _create(client, **fields):
    response = client.post(API, json=fields)
    assert response.status_code == 201, response.text
    return response.json()


def test_root_lists_entry_points(client):
    body = client.get("/").json()

    assert body["api"] == "/api/v1"
    assert body["health"] == "/api/v1/health"


def test_create_returns_camel_case_contact(client, jane):
    response = client.post(API, json=jane)

    assert response.status_code == 201
    body = response.json()
    assert body["id"] >= 1
    assert body["firstName"] == "Jane"
    assert body["lastName"] == "Doe"
    assert body["email"] == "jane@example.com"
    assert body["phone"] is None
    assert body["createdAt"] == body["updatedAt"]


def test_create_accepts_phone(client, jane):
    body = _create(client, phone="555-0123", **jane)

    assert body["phone"] == "555-0123"


def test_create_invalid_email_returns_field_details(client):
    response = client.post(API, json={"firstName": "Jane", "lastName": "Doe", "email": "nope"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    assert [detail["field"] for detail in body["details"]] == ["email"]


def test_create_missing_fields(client):
    response = client.post(API, json={"email": "jane@example.com"})

    assert response.status_code == 400
    fields = {detail["field"] for detail in response.json()["details"]}
    assert fields == {"firstName", "lastName"}


def test_create_duplicate_email(client, jane):
    _create(client, **jane)

    response = client.post(API, json={**jane, "firstName": "Janet"})

    assert response.status_code == 400
    assert response.json() == {"error": "A contact with this email already exists"}
    assert client.get(f"{API}/stats").json() == {"totalContacts": 1}


def test_list_shape_and_pagination(client):
    for n in range(12):
        _create(client, firstName=f"User{n}", lastName="Test", email=f"user{n}@example.com")

    body = client.get(API, params={"page": 2, "limit": 5}).json()

    assert [c["firstName"] for c in body["contacts"]] == [f"User{n}" for n in range(5, 10)]
    assert body["pagination"] == {
        "page": 2,
        "limit": 5,
        "total": 12,
        "totalPages": 3,
        "hasNextPage": True,
        "hasPreviousPage": True,
    }


def test_list_uses_default_page_size(client):
    body = client.get(API).json()

    assert body["contacts"] == []
    assert body["pagination"]["limit"] == settings.default_page_size
    assert body["pagination"]["page"] == 1


@pytest.mark.parametrize(
    "params",
    [{"page": 0}, {"limit": 0}, {"limit": settings.max_page_size + 1}, {"page": "abc"}],
)
def test_list_rejects_bad_query(client, params):
    response = client.get(API, params=params)

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_search_finds_jane(client, jane):
    created = _create(client, **jane)
    _create(client, firstName="John", lastName="Smith", email="john@example.com")

    body = client.get(f"{API}/search", params={"q": "jane"}).json()

    assert body["contacts"] == [created]
    assert body["pagination"]["total"] == 1


def test_search_without_match(client, jane):
    _create(client, **jane)

    body = client.get(f"{API}/search", params={"q": "nobody-here"}).json()

    assert body["contacts"] == []
    assert body["pagination"]["total"] == 0


def test_search_without_query_lists_everything(client, jane):
    _create(client, **jane)

    assert client.get(f"{API}/search").json() == client.get(API).json()


def test_get_by_id(client, jane):
    created = _create(client, **jane)

    response = client.get(f"{API}/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_unknown_id(client):
    response = client.get(f"{API}/999")

    assert response.status_code == 404
    assert response.json() == {"error": "Contact not found"}


def test_patch_phone_only(client, jane):
    created = _create(client, **jane)

    response = client.patch(f"{API}/{created['id']}", json={"phone": "555-0000"})

    assert response.status_code == 200
    body = response.json()
    assert body["phone"] == "555-0000"
    for field in ("firstName", "lastName", "email", "createdAt"):
        assert body[field] == created[field]
    assert _parse(body["updatedAt"]) > _parse(created["updatedAt"])


def test_patch_unknown_id(client):
    response = client.patch(f"{API}/999", json={"phone": "1"})

    assert response.status_code == 404


def test_patch_duplicate_email(client, jane):
    _create(client, **jane)
    john = _create(client, firstName="John", lastName="Smith", email="john@example.com")

    response = client.patch(f"{API}/{john['id']}", json={"email": "jane@example.com"})

    assert response.status_code == 400
    assert response.json()["error"] == "A contact with this email already exists"


def test_patch_rejects_null_name(client, jane):
    created = _create(client, **jane)

    response = client.patch(f"{API}/{created['id']}", json={"firstName": None})

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "firstName"


def test_delete_then_get_is_404(client, jane):
    created = _create(client, **jane)

    delete = client.delete(f"{API}/{created['id']}")
    assert delete.status_code == 204
    assert delete.content == b""

    assert client.get(f"{API}/{created['id']}").status_code == 404


def test_delete_unknown_id(client, jane):
    _create(client, **jane)

    response = client.delete(f"{API}/4242")

    assert response.status_code == 404
    assert client.get(f"{API}/stats").json()["totalContacts"] == 1


def test_health(client):
    assert client.get("/api/v1/health").json() == {"status": "healthy", "database": True}


def test_store_failure_is_503(client, monkeypatch, tmp_path):
    # SQLite cannot create a file inside a missing directory.
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "missing" / "contacts.db"))

    response = client.get(API)

    assert response.status_code == 503
    assert response.json() == {"error": "Contact store unavailable"}


def test_health_degraded_when_store_fails(client, monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "missing" / "contacts.db"))

    body = client.get("/api/v1/health").json()

    assert body["status"] == "degraded"
    assert body["database"] is False


@pytest.mark.parametrize("method", ["get", "delete"])
def test_id_beyond_integer_range_is_404(client, method):
    response = getattr(client, method)(f"{API}/{2**63}")

    assert response.status_code == 404
    assert response.json() == {"error": "Contact not found"}


def test_patch_id_beyond_integer_range_is_404(client):
    response = client.patch(f"{API}/{2**63}", json={"phone": "1"})

    assert response.status_code == 404


def test_page_far_past_the_end(client, jane):
    _create(client, **jane)

    response = client.get(API, params={"page": 10**17, "limit": 100})

    assert response.status_code == 200
    body = response.json()
    assert body["contacts"] == []
    assert body["pagination"]["total"] == 1
    assert body["pagination"]["totalPages"] == 1
    assert body["pagination"]["hasPreviousPage"] is True


def test_search_query_length_is_capped(client, jane):
    _create(client, **jane)

    assert client.get(f"{API}/search", params={"q": "j" * 200}).status_code == 200
    response = client.get(f"{API}/search", params={"q": "j" * 201})

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "q"
