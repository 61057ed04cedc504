"""Catalog API endpoints.

Provides endpoints for the facets and the product pages of a catalog view.
The query string is the search state: option filters are passed under the
facet's display name with choice names as values, e.g.
``/products?category_id=shirts&Color=Red&Color=Blue&sort=price:desc``.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Query, Request

from catalog_search.api.schemas import (
    ErrorResponse,
    FacetsResponse,
    PagingMetadataSchema,
    ProductsResponse,
)
from catalog_search.application.catalog_view import CatalogView
from catalog_search.application.product_search import ProductSearchService
from catalog_search.application.products_list import effective_request
from catalog_search.application.url_sync import SORT_PARAM
from catalog_search.domain.exceptions import UnknownSortError
from catalog_search.domain.paging import CursorPaging
from catalog_search.infrastructure.config import settings
from catalog_search.infrastructure.stores_client import StoresClient, get_stores_client
from catalog_search.infrastructure.url_params import URLParams

logger = structlog.get_logger()

router = APIRouter(tags=["Catalog"])


# ============================================================================
# Dependencies
# ============================================================================


def get_client() -> StoresClient:
    """Get the stores backend client."""
    return get_stores_client()


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "/facets",
    response_model=FacetsResponse,
    summary="Get catalog facets",
    description="Get the filter options and price range on offer for a category.",
)
async def get_facets(
    request: Request,
    client: Annotated[StoresClient, Depends(get_client)],
    category_id: Annotated[str | None, Query(description="Category to aggregate over")] = None,
) -> FacetsResponse:
    """Get facets of a catalog view.

    Facet load failures do not fail the request; they are reported in the
    error field with empty facets.

    Args:
        request: Incoming request.
        client: Stores backend client.
        category_id: Category to aggregate over.

    Returns:
        Facets of the category.
    """
    view = CatalogView(client, URLParams(str(request.url)), category_id=category_id)
    try:
        await view.load_catalog_data()
        return FacetsResponse.model_validate(view.to_dict())
    finally:
        view.dispose()


@router.get(
    "/products",
    response_model=ProductsResponse,
    responses={
        400: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Search products",
    description="Get one page of products for the search state in the query string.",
)
async def list_products(
    request: Request,
    client: Annotated[StoresClient, Depends(get_client)],
    category_id: Annotated[str | None, Query(description="Category to search in")] = None,
) -> ProductsResponse:
    """Search products.

    Loads the category's facets, resolves the query string against them,
    runs the search with variant backfill and returns the page together
    with the canonical query string of the resolved state.

    Args:
        request: Incoming request.
        client: Stores backend client.
        category_id: Category to search in.

    Returns:
        One page of products.

    Raises:
        UnknownSortError: If the sort param names no known ordering.
        StoresClientError: If the search itself fails.
    """
    url_params = URLParams(str(request.url))
    view = CatalogView(client, url_params, category_id=category_id)
    try:
        await view.load_catalog_data()
        state = view.restore_from_url()
        raw_sort = request.query_params.get(SORT_PARAM)
        if raw_sort and state.sort is None:
            raise UnknownSortError(raw_sort)

        limit = state.limit if state.limit is not None else settings.default_page_size
        paging = CursorPaging(limit=limit, cursor=state.cursor) if limit > 0 else None
        search_request = view.build_search_request(paging)

        result = await ProductSearchService(client).search_products(
            effective_request(search_request)
        )

        # Rewrite the query string from the resolved state
        view.url_sync.apply_filters(view.current_filters.peek())

        logger.info(
            "Product page served",
            category_id=category_id,
            product_count=len(result.products),
            has_cursor=state.cursor is not None,
        )

        return ProductsResponse(
            products=result.products,
            paging_metadata=PagingMetadataSchema.model_validate(
                result.paging_metadata.to_dict()
            ),
            query=url_params.query_string,
        )
    finally:
        view.dispose()
