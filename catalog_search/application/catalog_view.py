"""Catalog view state container.

One CatalogView per catalog page. It owns the filter, sort and category
selection, the facet loader, URL sync and, once attached, the products list
with its pagination. State changes go through its mutators only.
"""

from typing import Any

import structlog

from catalog_search.application.facet_loader import CatalogFacetLoader
from catalog_search.application.pagination import PaginationController
from catalog_search.application.products_list import ProductsListService
from catalog_search.application.query_builder import build_search_options
from catalog_search.application.url_sync import SearchState, URLStateSync
from catalog_search.domain.facets import NOT_LOADED, AvailableOptions, CatalogPriceRange
from catalog_search.domain.filters import (
    DEFAULT_FILTER,
    DEFAULT_PRICE_RANGES,
    DEFAULT_SORT_TYPE,
    Filter,
    PriceRange,
    SortType,
)
from catalog_search.domain.paging import CursorPaging
from catalog_search.domain.search import SearchRequest
from catalog_search.infrastructure.stores_client import StoresClient
from catalog_search.infrastructure.url_params import URLParams
from catalog_search.signals import Computed, Effect, Signal, batch, computed, effect, signal

logger = structlog.get_logger()


class CatalogView:
    """State of one catalog view.

    Signals:
        current_filters: Selected filter.
        current_sort: Selected ordering.
        selected_category: Selected category id, None for the whole catalog.

    Computed:
        available_options: Facets on offer; price range is 0..0 until a
            usable price facet has loaded.
        is_fully_loaded: True once both facet parts have loaded.

    Example usage:
        view = CatalogView(stores_client, URLParams(href), category_id="shirts")
        await view.load_catalog_data()
        view.url_sync.restore()
        view.apply_filters(view.current_filters.peek().with_option("color-id", ["red-id"]))
    """

    def __init__(
        self,
        client: StoresClient,
        url_params: URLParams,
        category_id: str | None = None,
        filters: Filter = DEFAULT_FILTER,
        sort_by: SortType = DEFAULT_SORT_TYPE,
    ) -> None:
        self.facet_loader = CatalogFacetLoader(client)

        self.current_filters: Signal[Filter] = signal(filters)
        self.current_sort: Signal[SortType] = signal(sort_by)
        self.selected_category: Signal[str | None] = signal(category_id)

        self.available_options: Computed[AvailableOptions] = computed(self._compute_available_options)
        self.is_fully_loaded: Computed[bool] = computed(
            lambda: self.facet_loader.catalog_price_range.get() is not NOT_LOADED
            and self.facet_loader.catalog_options.get() is not None
        )

        self.url_sync = URLStateSync(
            url_params,
            self.current_filters,
            self.current_sort,
            self.available_options,
        )

        self.products_list: ProductsListService | None = None
        self.pagination: PaginationController | None = None

        self._price_range_sync: Effect = effect(self._adopt_catalog_price_range)

    # ========================================================================
    # Derived State
    # ========================================================================

    def _compute_available_options(self) -> AvailableOptions:
        catalog_range = self.facet_loader.catalog_price_range.get()
        price_range = PriceRange(0, 0)
        if isinstance(catalog_range, CatalogPriceRange) and catalog_range.min_price < catalog_range.max_price:
            price_range = PriceRange(catalog_range.min_price, catalog_range.max_price)

        return AvailableOptions(
            product_options=self.facet_loader.catalog_options.get() or (),
            price_range=price_range,
        )

    def _adopt_catalog_price_range(self) -> None:
        price_range = self.available_options.get().price_range
        if price_range.is_unset:
            return
        filters = self.current_filters.peek()
        if filters.price_range in DEFAULT_PRICE_RANGES:
            self.current_filters.set(filters.with_price_range(price_range))

    def build_search_request(self, paging: CursorPaging | None = None) -> SearchRequest:
        """Search request for the current selection."""
        return build_search_options(
            filters=self.current_filters.peek(),
            category_id=self.selected_category.peek(),
            sort_by=self.current_sort.peek(),
            paging=paging,
        )

    # ========================================================================
    # Loading
    # ========================================================================

    async def load_catalog_data(self) -> None:
        """Load facets for the selected category."""
        await self.facet_loader.load_catalog_data(self.selected_category.peek())

    def attach_products_list(self, products_list: ProductsListService) -> PaginationController:
        """Attach a preloaded products list and create its pagination."""
        self.products_list = products_list
        self.pagination = PaginationController(products_list)
        return self.pagination

    def restore_from_url(self) -> SearchState:
        """Load filter and sort from the URL; see URLStateSync.restore."""
        return self.url_sync.restore()

    # ========================================================================
    # Mutators
    # ========================================================================

    def apply_filters(self, filters: Filter) -> None:
        with batch():
            self.url_sync.apply_filters(filters)
            self._refresh_products()

    def clear_filters(self) -> None:
        with batch():
            self.url_sync.clear_filters()
            self._refresh_products()

    def set_sort_by(self, sort_by: SortType) -> None:
        with batch():
            self.url_sync.set_sort_by(sort_by)
            self._refresh_products()

    async def select_category(self, category_id: str | None) -> None:
        """Switch category, refetch products from page 1 and reload facets."""
        with batch():
            self.selected_category.set(category_id)
            self._refresh_products()
        await self.load_catalog_data()

    def _refresh_products(self) -> None:
        """Point the products list at the current selection, first page."""
        if self.products_list is None or self.pagination is None:
            return
        limit = self.pagination.current_limit.peek()
        paging = CursorPaging(limit=limit) if limit > 0 else None
        self.pagination.go_to_first_page()
        self.products_list.set_search_request(self.build_search_request(paging))
        logger.debug(
            "Catalog selection changed",
            category_id=self.selected_category.peek(),
            sort=self.current_sort.peek().value,
        )

    def to_dict(self) -> dict[str, Any]:
        """Facet snapshot in the backend's naming."""
        catalog_range = self.facet_loader.catalog_price_range.peek()
        options = self.available_options.peek()
        return {
            "productOptions": [o.to_dict() for o in options.product_options],
            "priceRange": catalog_range.to_dict() if isinstance(catalog_range, CatalogPriceRange) else None,
            "error": self.facet_loader.error.peek(),
        }

    def dispose(self) -> None:
        self._price_range_sync.dispose()
        if self.pagination is not None:
            self.pagination.dispose()
        if self.products_list is not None:
            self.products_list.dispose()
