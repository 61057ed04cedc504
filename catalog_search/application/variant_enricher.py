"""Batched variant backfill for search results.

Search results may omit variants for products that have them. Rather than
fetching variants product by product, all missing variants of a result page
are fetched with one paged query and merged back in memory.
"""

from collections import defaultdict

import structlog

from catalog_search.domain.search import Product, Variant
from catalog_search.infrastructure.config import settings
from catalog_search.infrastructure.stores_client import StoresClient

logger = structlog.get_logger()

PRODUCT_ID_FIELD = "productId"


def needs_variants(product: Product) -> bool:
    """A product needs enrichment when it embeds no variant list but has variants."""
    variants = (product.get("variantsInfo") or {}).get("variants")
    variant_count = (product.get("variantSummary") or {}).get("variantCount") or 0
    return variants is None and variant_count > 0


def _variant_product_id(item: Variant) -> str | None:
    return item.get(PRODUCT_ID_FIELD) or (item.get("productData") or {}).get("productId")


class VariantEnricher:
    """Fills in missing variants with a single batched query.

    Example usage:
        enricher = VariantEnricher(stores_client)
        products = await enricher.fetch_missing_variants(result.products)
    """

    def __init__(self, client: StoresClient, batch_size: int | None = None) -> None:
        self.client = client
        self.batch_size = batch_size or settings.variant_batch_size

    async def fetch_missing_variants(self, products: list[Product]) -> list[Product]:
        """Return products with missing variants filled in.

        The input list and its products are never modified. If nothing
        needs enrichment the input list itself is returned; products that
        need nothing (or got no variants back) are returned as the same
        objects. On any fetch error the original list is returned.

        Args:
            products: One page of search results.

        Returns:
            Products with variantsInfo.variants populated where possible.
        """
        product_ids = [p["id"] for p in products if needs_variants(p) and p.get("id")]
        if not product_ids:
            return products

        try:
            variants_by_product = await self._fetch_variants(product_ids)
        except Exception as e:
            logger.error(
                "Failed to fetch missing variants",
                product_count=len(product_ids),
                error=str(e),
            )
            return products

        enriched: list[Product] = []
        for product in products:
            variants = variants_by_product.get(product.get("id") or "")
            if variants:
                enriched.append(
                    {
                        **product,
                        "variantsInfo": {**(product.get("variantsInfo") or {}), "variants": variants},
                    }
                )
            else:
                enriched.append(product)

        logger.debug(
            "Variants backfilled",
            requested=len(product_ids),
            enriched=len(variants_by_product),
        )
        return enriched

    async def _fetch_variants(self, product_ids: list[str]) -> dict[str, list[Variant]]:
        """Drain the variants query for product_ids, grouped by product id."""
        page = await (
            self.client.query_variants()
            .in_(PRODUCT_ID_FIELD, product_ids)
            .limit(self.batch_size)
            .find()
        )
        items = list(page.items)
        while page.has_next():
            page = await page.next()
            items.extend(page.items)

        grouped: dict[str, list[Variant]] = defaultdict(list)
        for item in items:
            product_id = _variant_product_id(item)
            if product_id:
                if "choices" not in item:
                    item = {**item, "choices": item.get("optionChoices")}
                grouped[product_id].append(item)
        return dict(grouped)
