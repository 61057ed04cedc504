"""Tests for the reactive products list."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from catalog_search.application.product_search import ProductSearchService
from catalog_search.application.products_list import (
    ProductsListConfig,
    ProductsListService,
    effective_request,
    load_products_list_config,
)
from catalog_search.domain import (
    CategoryCondition,
    CursorPaging,
    PagingMetadata,
    SearchRequest,
    SearchResult,
)
from catalog_search.infrastructure.stores_client import StoresClientError


@pytest.fixture
def search_service() -> MagicMock:
    """Create a mock product search service."""
    service = MagicMock(spec=ProductSearchService)
    service.search_products = AsyncMock(return_value=SearchResult(products=[{"id": "new"}]))
    return service


@pytest.fixture
def config() -> ProductsListConfig:
    """Preloaded first page."""
    return ProductsListConfig(
        products=[{"id": "initial"}],
        search_request=SearchRequest(filter=CategoryCondition("c1"), paging=CursorPaging(limit=10)),
        paging_metadata=PagingMetadata(has_next=True, next_cursor="n1"),
    )


class TestEffectiveRequest:
    """Tests for the request actually sent."""

    def test_cursor_request_keeps_only_paging(self) -> None:
        """Filter and sort are dropped when a cursor is present."""
        request = SearchRequest(filter=CategoryCondition("c1"), paging=CursorPaging(10, "abc"))
        assert effective_request(request) == SearchRequest(paging=CursorPaging(10, "abc"))

    def test_first_page_request_unchanged(self) -> None:
        """Without a cursor the request is sent as is."""
        request = SearchRequest(filter=CategoryCondition("c1"), paging=CursorPaging(10))
        assert effective_request(request) is request


class TestLoadProductsListConfig:
    """Tests for the initial load."""

    @pytest.mark.asyncio
    async def test_builds_config_from_search(self, search_service: MagicMock) -> None:
        """The initial search result becomes the list's config."""
        request = SearchRequest(paging=CursorPaging(limit=5))
        search_service.search_products.return_value = SearchResult(
            products=[{"id": "p1"}],
            paging_metadata=PagingMetadata(has_next=True),
            aggregation_data={"results": []},
        )

        config = await load_products_list_config(search_service, request)

        assert config.products == [{"id": "p1"}]
        assert config.search_request is request
        assert config.paging_metadata.has_next is True
        assert config.aggregations == {"results": []}


class TestProductsListService:
    """Tests for ProductsListService."""

    @pytest.mark.asyncio
    async def test_construction_does_not_fetch(
        self, search_service: MagicMock, config: ProductsListConfig
    ) -> None:
        """Preloaded data is committed without a fetch."""
        products_list = ProductsListService(search_service, config)
        await products_list.wait_until_idle()

        search_service.search_products.assert_not_awaited()
        assert products_list.products.get() == [{"id": "initial"}]
        assert products_list.paging_metadata.get().next_cursor == "n1"

    @pytest.mark.asyncio
    async def test_request_change_fetches_once(
        self, search_service: MagicMock, config: ProductsListConfig
    ) -> None:
        """A new request replaces the products after exactly one fetch."""
        products_list = ProductsListService(search_service, config)
        request = config.search_request.with_paging(CursorPaging(limit=20))

        products_list.set_search_request(request)
        await products_list.wait_until_idle()

        search_service.search_products.assert_awaited_once_with(request)
        assert products_list.products.get() == [{"id": "new"}]
        assert products_list.is_loading.get() is False

    @pytest.mark.asyncio
    async def test_equal_request_does_not_fetch(
        self, search_service: MagicMock, config: ProductsListConfig
    ) -> None:
        """Setting an equal request is not a change."""
        products_list = ProductsListService(search_service, config)

        products_list.set_search_request(
            SearchRequest(filter=CategoryCondition("c1"), paging=CursorPaging(limit=10))
        )
        await products_list.wait_until_idle()

        search_service.search_products.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cursor_request_sends_only_paging(
        self, search_service: MagicMock, config: ProductsListConfig
    ) -> None:
        """Continuation pages are requested by cursor alone."""
        products_list = ProductsListService(search_service, config)

        products_list.set_search_request(config.search_request.with_paging(CursorPaging(10, "n1")))
        await products_list.wait_until_idle()

        search_service.search_products.assert_awaited_once_with(
            SearchRequest(paging=CursorPaging(10, "n1"))
        )

    @pytest.mark.asyncio
    async def test_error_keeps_previous_products(
        self, search_service: MagicMock, config: ProductsListConfig
    ) -> None:
        """A failed fetch records the error and keeps the current page."""
        search_service.search_products.side_effect = StoresClientError("backend down", 502)
        products_list = ProductsListService(search_service, config)

        products_list.set_search_request(config.search_request.with_paging(CursorPaging(limit=50)))
        await products_list.wait_until_idle()

        assert products_list.error.get() == "backend down"
        assert products_list.products.get() == [{"id": "initial"}]
        assert products_list.is_loading.get() is False

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(
        self, search_service: MagicMock, config: ProductsListConfig
    ) -> None:
        """A later successful fetch clears the error."""
        search_service.search_products.side_effect = [
            StoresClientError("backend down"),
            SearchResult(products=[{"id": "recovered"}]),
        ]
        products_list = ProductsListService(search_service, config)

        products_list.set_search_request(config.search_request.with_paging(CursorPaging(limit=50)))
        await products_list.wait_until_idle()
        products_list.set_search_request(config.search_request.with_paging(CursorPaging(limit=60)))
        await products_list.wait_until_idle()

        assert products_list.error.get() is None
        assert products_list.products.get() == [{"id": "recovered"}]

    @pytest.mark.asyncio
    async def test_stale_response_is_discarded(
        self, search_service: MagicMock, config: ProductsListConfig
    ) -> None:
        """A slow earlier page cannot overwrite a later one."""
        release_slow = asyncio.Event()
        slow_request = config.search_request.with_paging(CursorPaging(limit=50))

        async def search(request: SearchRequest) -> SearchResult:
            if request == slow_request:
                await release_slow.wait()
                return SearchResult(products=[{"id": "slow"}])
            return SearchResult(products=[{"id": "fast"}])

        search_service.search_products.side_effect = search
        products_list = ProductsListService(search_service, config)

        products_list.set_search_request(slow_request)
        await asyncio.sleep(0)
        products_list.set_search_request(config.search_request.with_paging(CursorPaging(limit=60)))
        await asyncio.sleep(0)
        release_slow.set()
        await products_list.wait_until_idle()

        assert products_list.products.get() == [{"id": "fast"}]

    @pytest.mark.asyncio
    async def test_dispose_stops_fetching(
        self, search_service: MagicMock, config: ProductsListConfig
    ) -> None:
        """A disposed list ignores request changes."""
        products_list = ProductsListService(search_service, config)
        products_list.dispose()

        products_list.set_search_request(SearchRequest())
        await products_list.wait_until_idle()

        search_service.search_products.assert_not_awaited()
