"""Shared fixtures for API tests."""

from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from catalog_search.api.products import get_client
from catalog_search.main import app


@pytest.fixture
def client(stores_client: MagicMock) -> Iterator[TestClient]:
    """Create test client backed by the mock stores client."""
    app.dependency_overrides[get_client] = lambda: stores_client
    yield TestClient(app)
    app.dependency_overrides.clear()
