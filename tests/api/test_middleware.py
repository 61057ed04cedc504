"""Tests for API middleware and error envelopes."""

from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from catalog_search.api.products import get_client
from catalog_search.domain.exceptions import InvalidPageSizeError
from catalog_search.infrastructure.stores_client import StoresClientError
from catalog_search.main import app


class TestRequestId:
    """Tests for request ID correlation."""

    def test_generates_request_id(self, client: TestClient) -> None:
        """A request ID is generated when none is sent."""
        response = client.get("/health")
        assert response.headers["X-Request-ID"]

    def test_echoes_request_id(self, client: TestClient) -> None:
        """An incoming request ID is returned unchanged."""
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"


class TestErrorEnvelope:
    """Tests for error responses."""

    def test_stores_error_is_bad_gateway(self, client: TestClient, stores_client: MagicMock) -> None:
        """Backend failures map to 502 with the standard envelope."""
        stores_client.search_products.side_effect = StoresClientError("Search products failed", 500)

        response = client.get("/products", headers={"X-Request-ID": "req-502"})

        assert response.status_code == 502
        body = response.json()
        assert body["error_code"] == "STORES_API_ERROR"
        assert body["message"] == "Search products failed"
        assert body["details"] == {"upstream_status": 500}
        assert body["request_id"] == "req-502"

    def test_domain_error_is_bad_request(self, stores_client: MagicMock) -> None:
        """Domain rule violations map to 400."""

        def failing_client() -> MagicMock:
            raise InvalidPageSizeError(-1, "Page size cannot be negative")

        app.dependency_overrides[get_client] = failing_client
        try:
            response = TestClient(app).get("/products")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "InvalidPageSizeError"
        assert body["details"] == {"value": -1, "reason": "Page size cannot be negative"}

    def test_unknown_route(self, client: TestClient) -> None:
        """HTTP errors use the same envelope."""
        response = client.get("/missing")

        assert response.status_code == 404
        assert response.json()["error_code"] == "ERROR"
