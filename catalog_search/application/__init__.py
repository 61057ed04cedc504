"""Application layer module.

Contains the services that drive a catalog view: request building, facet
loading, product search with variant backfill, the products list and its
pagination, and URL state sync.
"""

from catalog_search.application.catalog_view import CatalogView
from catalog_search.application.facet_loader import CatalogFacetLoader
from catalog_search.application.pagination import PaginationController
from catalog_search.application.product_search import ProductSearchService
from catalog_search.application.products_list import (
    ProductsListConfig,
    ProductsListService,
    load_products_list_config,
)
from catalog_search.application.query_builder import (
    build_aggregation_request,
    build_filter_conditions,
    build_search_options,
    build_sort,
)
from catalog_search.application.url_sync import (
    SearchState,
    URLStateSync,
    parse_search_state,
)
from catalog_search.application.variant_enricher import VariantEnricher

__all__ = [
    "CatalogView",
    "CatalogFacetLoader",
    "PaginationController",
    "ProductSearchService",
    "ProductsListConfig",
    "ProductsListService",
    "load_products_list_config",
    "build_aggregation_request",
    "build_filter_conditions",
    "build_search_options",
    "build_sort",
    "SearchState",
    "URLStateSync",
    "parse_search_state",
    "VariantEnricher",
]
