"""
Pytest configuration and shared fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from api.main import app, get_book_store
from library.store import BookStore


@pytest.fixture
def store():
    """Create a store seeded with the three sample books."""
    return BookStore()


@pytest.fixture
def empty_store():
    """Create a store with no books."""
    return BookStore(seed=False)


@pytest.fixture
def client(store):
    """Create a test client whose routes use the ``store`` fixture."""
    app.dependency_overrides[get_book_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_titles():
    """Seeded titles in title order."""
    return ["Clean Code", "Design Patterns", "The Pragmatic Programmer"]
