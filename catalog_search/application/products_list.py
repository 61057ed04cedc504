"""Products list state of a catalog view.

The list is created from data already fetched for the first render and
only then subscribes to its search request, so construction never causes a
fetch. Every later change of the search request causes exactly one fetch.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import structlog

from catalog_search.application.product_search import ProductSearchService
from catalog_search.domain.paging import CursorPaging, PagingMetadata
from catalog_search.domain.search import Product, SearchRequest
from catalog_search.signals import Signal, batch, signal, watch

logger = structlog.get_logger()


@dataclass
class ProductsListConfig:
    """Initial state of a products list.

    Attributes:
        products: First page of products.
        search_request: Request that produced them.
        paging_metadata: Paging metadata of that page.
        aggregations: Aggregation data returned with that page.
    """

    products: list[Product]
    search_request: SearchRequest
    paging_metadata: PagingMetadata = field(default_factory=PagingMetadata)
    aggregations: dict[str, Any] = field(default_factory=dict)


async def load_products_list_config(
    search_service: ProductSearchService,
    search_request: SearchRequest,
) -> ProductsListConfig:
    """Run the initial search for a products list.

    Args:
        search_service: Product search service.
        search_request: Initial request.

    Returns:
        Config to construct a ProductsListService from.
    """
    result = await search_service.search_products(search_request)
    return ProductsListConfig(
        products=result.products,
        search_request=search_request,
        paging_metadata=result.paging_metadata,
        aggregations=result.aggregation_data,
    )


def effective_request(request: SearchRequest) -> SearchRequest:
    """Request actually sent for a list page.

    A continuation cursor already encodes filter and sort, so a request
    carrying one is reduced to its paging.
    """
    paging = request.paging
    if paging is not None and paging.cursor:
        return SearchRequest(
            paging=CursorPaging(limit=paging.limit, cursor=paging.cursor),
            fields=request.fields,
        )
    return request


class ProductsListService:
    """Reactive products list.

    Signals:
        products: Current page of products.
        search_request: Request describing the current page.
        paging_metadata: Paging metadata of the current page.
        aggregations: Aggregation data of the current page.
        is_loading: True while the latest fetch is in flight.
        error: Message of the latest failed fetch, else None.

    Example usage:
        config = await load_products_list_config(search_service, request)
        products_list = ProductsListService(search_service, config)
        products_list.set_search_request(request.with_paging(CursorPaging(24)))
        await products_list.wait_until_idle()
    """

    def __init__(self, search_service: ProductSearchService, config: ProductsListConfig) -> None:
        self.search_service = search_service

        # Phase 1: commit the preloaded data.
        self.products: Signal[list[Product]] = signal(config.products)
        self.search_request: Signal[SearchRequest] = signal(config.search_request)
        self.paging_metadata: Signal[PagingMetadata] = signal(config.paging_metadata)
        self.aggregations: Signal[dict[str, Any]] = signal(config.aggregations)
        self.is_loading: Signal[bool] = signal(False)
        self.error: Signal[str | None] = signal(None)

        self._fetch_id = 0
        self._tasks: set[asyncio.Task[None]] = set()

        # Phase 2: react to request changes from now on.
        self._watcher = watch(self.search_request.get, self._schedule_fetch)

    def set_search_request(self, request: SearchRequest) -> None:
        """Replace the search request; triggers a fetch if it changed."""
        self.search_request.set(request)

    def _schedule_fetch(self, request: SearchRequest) -> None:
        self._fetch_id += 1
        task = asyncio.get_running_loop().create_task(self._fetch(request, self._fetch_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _fetch(self, request: SearchRequest, fetch_id: int) -> None:
        self.is_loading.set(True)
        try:
            result = await self.search_service.search_products(effective_request(request))

            if fetch_id != self._fetch_id:
                logger.info("Discarding stale products page", fetch_id=fetch_id)
                return

            with batch():
                self.products.set(result.products)
                self.paging_metadata.set(result.paging_metadata)
                if result.aggregation_data:
                    self.aggregations.set(result.aggregation_data)
                self.error.set(None)

        except Exception as e:
            logger.error("Failed to load products", fetch_id=fetch_id, error=str(e))
            if fetch_id == self._fetch_id:
                self.error.set(str(e) or "Unknown error")

        finally:
            if fetch_id == self._fetch_id:
                self.is_loading.set(False)

    async def wait_until_idle(self) -> None:
        """Wait for every scheduled fetch to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def dispose(self) -> None:
        """Stop reacting to request changes."""
        self._watcher.dispose()
