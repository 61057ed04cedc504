"""Product search with variant backfill."""

import structlog

from catalog_search.application.variant_enricher import VariantEnricher
from catalog_search.domain.search import SearchRequest, SearchResult
from catalog_search.infrastructure.stores_client import StoresClient

logger = structlog.get_logger()


class ProductSearchService:
    """Runs a search request and backfills missing variants.

    Example usage:
        service = ProductSearchService(stores_client)
        result = await service.search_products(build_search_options(category_id="shirts"))
    """

    def __init__(self, client: StoresClient, enricher: VariantEnricher | None = None) -> None:
        """Initialize service.

        Args:
            client: Stores backend client.
            enricher: Variant enricher (defaults to one on the same client).
        """
        self.client = client
        self.enricher = enricher or VariantEnricher(client)

    async def search_products(self, request: SearchRequest) -> SearchResult:
        """Search products.

        Args:
            request: Search request.

        Returns:
            Search result whose products carry their variants.

        Raises:
            StoresClientError: If the search itself fails.
        """
        result = await self.client.search_products(request)
        if result.products:
            result.products = await self.enricher.fetch_missing_variants(result.products)

        logger.info(
            "Products searched",
            product_count=len(result.products),
            has_next=result.paging_metadata.has_next,
        )
        return result
