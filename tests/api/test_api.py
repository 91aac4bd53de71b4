"""
Tests for the FastAPI application.
"""

import uuid
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api.main import app, get_book_store
from library.store import BookStore


def create_book(client, title="Test Book", owner="Test Owner", availability=True):
    response = client.post("/books", json={"title": title, "owner": owner, "availability": availability})
    assert response.status_code == 201
    return response.json()


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "timestamp" in data
    assert "version" in data
    assert data["book_count"] == 3


def test_lifespan_creates_seeded_store():
    """Test that application startup provides a seeded store."""
    with TestClient(app) as client:
        response = client.get("/books")
        assert response.status_code == 200
        assert response.json()["totalCount"] == 3
        assert isinstance(app.state.book_store, BookStore)


def test_missing_store_returns_500():
    """Test requests made before the store exists."""
    app.state.book_store = None
    try:
        response = TestClient(app).get("/books")
    finally:
        del app.state.book_store
    assert response.status_code == 500
    assert response.json()["error"] == "Book store not available"


class TestListBooks:
    """Test cases for GET /books."""

    def test_default_page(self, client):
        """Test listing with default parameters."""
        response = client.get("/books")
        assert response.status_code == 200

        data = response.json()
        assert set(data) == {"items", "page", "pageSize", "totalCount", "totalPages"}
        assert data["page"] == 1
        assert data["pageSize"] == 10
        assert data["totalCount"] == 3
        assert data["totalPages"] == 1
        assert [b["title"] for b in data["items"]] == [
            "Clean Code", "Design Patterns", "The Pragmatic Programmer"
        ]

    @pytest.mark.parametrize("page,expected_count", [(1, 2), (2, 1), (3, 0)])
    def test_pagination(self, client, page, expected_count):
        """Test paging through the seeded books two at a time."""
        response = client.get(f"/books?page={page}&pageSize=2")
        assert response.status_code == 200

        data = response.json()
        assert len(data["items"]) == expected_count
        assert data["totalCount"] == 3
        assert data["totalPages"] == 2

    @pytest.mark.parametrize("query,expected_page,expected_size", [
        ("page=0&pageSize=10", 1, 10),
        ("page=-1&pageSize=0", 1, 10),
        ("page=1&pageSize=500", 1, 100),
    ])
    def test_normalization(self, client, query, expected_page, expected_size):
        """Test that out-of-range paging values are normalized."""
        data = client.get(f"/books?{query}").json()
        assert data["page"] == expected_page
        assert data["pageSize"] == expected_size

    def test_non_integer_page_rejected(self, client):
        """Test malformed paging parameters."""
        response = client.get("/books?page=abc")
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"


class TestSearchBooks:
    """Test cases for GET /books/search."""

    def test_search_matches(self, client):
        """Test searching by title."""
        response = client.get("/books/search?q=clean")
        assert response.status_code == 200

        books = response.json()
        assert len(books) == 1
        assert books[0]["title"] == "Clean Code"
        assert books[0]["owner"] == "Robert"
        assert books[0]["availability"] is False

    def test_search_by_owner_ignores_case(self, client):
        """Test searching by owner."""
        books = client.get("/books/search?q=ERICH").json()
        assert [b["title"] for b in books] == ["Design Patterns"]

    def test_search_without_query_returns_all(self, client):
        """Test that a missing query lists every book in order."""
        client.post("/books", json={"title": "Zebra", "owner": "Z", "availability": True})
        client.post("/books", json={"title": "Apple", "owner": "A", "availability": True})

        titles = [b["title"] for b in client.get("/books/search").json()]
        assert titles == sorted(titles)
        assert titles[0] == "Apple"
        assert titles[-1] == "Zebra"

    def test_search_no_results(self, client):
        """Test a query with no matches."""
        response = client.get("/books/search?q=nonexistent")
        assert response.status_code == 200
        assert response.json() == []


class TestCreateBook:
    """Test cases for POST /books."""

    def test_create_book(self, client, store):
        """Test creating a book."""
        response = client.post(
            "/books",
            json={"title": "Integration Test Book", "owner": "Integration Test Owner", "availability": True}
        )
        assert response.status_code == 201

        book = response.json()
        assert book["title"] == "Integration Test Book"
        assert book["owner"] == "Integration Test Owner"
        assert book["availability"] is True
        assert uuid.UUID(book["id"])
        assert response.headers["location"] == f"/books/{book['id']}"
        assert store.count() == 4

    def test_create_trims_fields(self, client):
        """Test that title and owner are stored trimmed."""
        book = create_book(client, title="  Dune  ", owner="\tFrank ")
        assert book["title"] == "Dune"
        assert book["owner"] == "Frank"

    def test_availability_defaults_to_false(self, client):
        """Test the optional availability flag."""
        response = client.post("/books", json={"title": "Dune", "owner": "Frank"})
        assert response.status_code == 201
        assert response.json()["availability"] is False

    @pytest.mark.parametrize("payload", [
        {"title": "", "owner": "Test Owner"},
        {"title": "   ", "owner": "Test Owner"},
        {"title": "Test Book", "owner": ""},
        {"title": "Test Book", "owner": "  "},
        {"owner": "Test Owner"},
        {"title": "Test Book"},
        {"title": None, "owner": "Test Owner"},
        {"title": "x" * 201, "owner": "Test Owner"},
    ])
    def test_invalid_payload_rejected(self, client, store, payload):
        """Test that missing, blank or oversized fields are rejected."""
        response = client.post("/books", json=payload)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Validation failed"
        assert data["status_code"] == 400
        assert store.count() == 3

    def test_title_length_measured_after_trim(self, client):
        """Test that surrounding whitespace does not count toward the limit."""
        book = create_book(client, title="  " + "x" * 200 + "  ")
        assert len(book["title"]) == 200

    def test_malformed_json_rejected(self, client):
        """Test a body that is not JSON."""
        response = client.post("/books", content="not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400


class TestGetBook:
    """Test cases for GET /books/{id}."""

    def test_get_existing(self, client):
        """Test fetching a created book."""
        created = create_book(client, title="Book to Get", owner="Get Owner")

        response = client.get(f"/books/{created['id']}")
        assert response.status_code == 200
        assert response.json() == created

    def test_get_unknown(self, client):
        """Test fetching an unknown id."""
        response = client.get(f"/books/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["status_code"] == 404

    def test_get_malformed_id(self, client):
        """Test that ids which are not UUIDs are reported as not found."""
        response = client.get("/books/not-a-uuid")
        assert response.status_code == 404


class TestDeleteBook:
    """Test cases for DELETE /books/{id}."""

    def test_delete_existing(self, client):
        """Test deleting a created book, then deleting it again."""
        created = create_book(client, title="Book to Delete", owner="Delete Owner")

        response = client.delete(f"/books/{created['id']}")
        assert response.status_code == 204
        assert response.content == b""

        assert client.get(f"/books/{created['id']}").status_code == 404
        assert client.delete(f"/books/{created['id']}").status_code == 404

    def test_delete_unknown(self, client):
        """Test deleting an unknown id."""
        response = client.delete(f"/books/{uuid.uuid4()}")
        assert response.status_code == 404

    def test_delete_malformed_id(self, client):
        """Test deleting with an id that is not a UUID."""
        assert client.delete("/books/12345").status_code == 404


def test_unhandled_error_returns_500():
    """Test that unexpected store failures become 500 responses."""
    failing_store = MagicMock(spec=BookStore)
    failing_store.get_page.side_effect = RuntimeError("store exploded")
    app.dependency_overrides[get_book_store] = lambda: failing_store
    try:
        response = TestClient(app, raise_server_exceptions=False).get("/books")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json()["error"] == "Internal server error"
