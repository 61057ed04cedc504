"""HTTP client for the stores backend.

Wraps the three backend APIs the search subsystem talks to:
product search (also used for aggregations), customizations, and
read-only variants.
"""

from collections.abc import Sequence
from typing import Any

import httpx
import structlog

from catalog_search.domain.search import SearchRequest, SearchResult, Variant
from catalog_search.infrastructure.config import settings

logger = structlog.get_logger()


class StoresClientError(Exception):
    """Error from a stores backend call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


# ============================================================================
# Variants Query
# ============================================================================


class VariantsPage:
    """One page of a variants query, able to fetch the page after it."""

    def __init__(
        self,
        client: "StoresClient",
        query: "VariantsQuery",
        items: list[Variant],
        next_cursor: str | None,
    ) -> None:
        self._client = client
        self._query = query
        self.items = items
        self.next_cursor = next_cursor

    def has_next(self) -> bool:
        return self.next_cursor is not None

    async def next(self) -> "VariantsPage":
        """Fetch the following page.

        Raises:
            StoresClientError: If there is no following page or the call fails.
        """
        if self.next_cursor is None:
            raise StoresClientError("No next page for variants query")
        return await self._client._fetch_variants(self._query, self.next_cursor)


class VariantsQuery:
    """Fluent read-only variants query.

    Example:
        page = await client.query_variants().in_("productId", ids).limit(100).find()
        while page.has_next():
            page = await page.next()
    """

    def __init__(self, client: "StoresClient") -> None:
        self._client = client
        self.filters: dict[str, list[str]] = {}
        self.page_size: int = settings.variant_batch_size

    def in_(self, field_name: str, values: Sequence[str]) -> "VariantsQuery":
        self.filters[field_name] = list(values)
        return self

    def limit(self, page_size: int) -> "VariantsQuery":
        self.page_size = page_size
        return self

    def to_dict(self, cursor: str | None = None) -> dict[str, Any]:
        paging: dict[str, Any] = {"limit": self.page_size}
        if cursor:
            paging["cursor"] = cursor
        return {
            "filter": {field_name: {"$in": values} for field_name, values in self.filters.items()},
            "cursorPaging": paging,
        }

    async def find(self) -> VariantsPage:
        return await self._client._fetch_variants(self, None)


# ============================================================================
# Stores Client
# ============================================================================


class StoresClient:
    """HTTP client for the stores backend.

    Provides methods for calling the backend endpoints with
    error handling and response normalization.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize stores client.

        Args:
            base_url: Backend base URL (defaults to settings).
            api_key: Backend API key (defaults to settings).
            timeout: Request timeout in seconds.
            request_id: Optional request ID for correlation.
        """
        self.base_url = (base_url or settings.stores_api_url).rstrip("/")
        self.api_key = api_key or settings.stores_api_key
        self.timeout = timeout if timeout is not None else settings.stores_api_timeout
        self.request_id = request_id
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            }
            if self.request_id:
                headers["X-Request-ID"] = self.request_id
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "StoresClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON body.

        Raises:
            StoresClientError: On transport failure or non-2xx status.
        """
        try:
            client = await self._get_client()
            response = await client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error(
                "Stores API request failed",
                operation=operation,
                path=path,
                error=str(e),
            )
            raise StoresClientError(f"{operation} request failed: {str(e)}") from e

        if response.status_code not in (200, 201):
            raise StoresClientError(
                f"{operation} failed: {response.text}",
                response.status_code,
            )

        return response.json()

    async def search_products(self, request: SearchRequest) -> SearchResult:
        """Search products.

        Args:
            request: Search request built by the query builder.

        Returns:
            One page of products with paging metadata and aggregations.

        Raises:
            StoresClientError: On API error.
        """
        data = await self._request(
            "POST",
            "/products/search",
            "Search products",
            json=request.to_dict(),
        )
        return SearchResult.from_api_response(data)

    async def aggregate(self, body: dict[str, Any]) -> dict[str, Any]:
        """Run an aggregation-only search.

        Args:
            body: Aggregation request (see build_aggregation_request).

        Returns:
            Raw backend response carrying aggregationData.

        Raises:
            StoresClientError: On API error.
        """
        return await self._request(
            "POST",
            "/products/search",
            "Aggregate products",
            json=body,
        )

    async def query_customizations(self, page_size: int = 100) -> list[dict[str, Any]]:
        """Fetch all customization definitions.

        Follows the continuation cursor until the backend reports no more pages.

        Returns:
            Customizations as returned by the backend.

        Raises:
            StoresClientError: On API error.
        """
        items: list[dict[str, Any]] = []
        cursor: str | None = None

        while True:
            params: dict[str, Any] = {"limit": page_size}
            if cursor:
                params["cursor"] = cursor

            data = await self._request(
                "GET",
                "/customizations",
                "Query customizations",
                params=params,
            )
            items.extend(data.get("customizations") or [])

            cursor = ((data.get("pagingMetadata") or {}).get("cursors") or {}).get("next")
            if not cursor:
                return items

    def query_variants(self) -> VariantsQuery:
        """Start a read-only variants query."""
        return VariantsQuery(self)

    async def _fetch_variants(self, query: VariantsQuery, cursor: str | None) -> VariantsPage:
        data = await self._request(
            "POST",
            "/variants/query",
            "Query variants",
            json=query.to_dict(cursor),
        )
        next_cursor = ((data.get("pagingMetadata") or {}).get("cursors") or {}).get("next")
        return VariantsPage(self, query, list(data.get("variants") or []), next_cursor)


# Global client instance
_stores_client: StoresClient | None = None


def get_stores_client() -> StoresClient:
    """Get the stores client singleton.

    Returns:
        StoresClient instance.
    """
    global _stores_client
    if _stores_client is None:
        _stores_client = StoresClient()
    return _stores_client


async def close_stores_client() -> None:
    """Close and forget the stores client singleton."""
    global _stores_client
    if _stores_client is not None:
        await _stores_client.close()
        _stores_client = None
