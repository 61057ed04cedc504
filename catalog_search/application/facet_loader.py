"""Catalog facet loader.

Derives the selectable filter options of a catalog view from one
aggregation request plus the backend's customization definitions.
"""

import asyncio
from collections.abc import Iterable
from typing import Any

import structlog

from catalog_search.application.query_builder import build_aggregation_request
from catalog_search.domain.facets import (
    NOT_LOADED,
    CatalogPriceRange,
    ProductChoice,
    ProductOption,
    matches_aggregation_name,
    sort_choices,
)
from catalog_search.domain.filters import INVENTORY_OPTION_ID
from catalog_search.infrastructure.stores_client import StoresClient
from catalog_search.signals import Signal, signal

logger = structlog.get_logger()

PRODUCT_OPTION_TYPE = "PRODUCT_OPTION"
TEXT_CHOICES_RENDER_TYPE = "TEXT_CHOICES"
AVAILABILITY_OPTION_NAME = "Availability"


# ============================================================================
# Aggregation Extraction
# ============================================================================


def _find_aggregation(response: dict[str, Any], name: str) -> dict[str, Any] | None:
    by_name = response.get("aggregations")
    if isinstance(by_name, dict) and name in by_name:
        return by_name[name]
    results = (response.get("aggregationData") or {}).get("results") or []
    return next((r for r in results if r.get("name") == name), None)


def extract_aggregation_values(response: dict[str, Any], name: str) -> list[str]:
    """Distinct values of a VALUE aggregation, in backend order."""
    aggregation = _find_aggregation(response, name) or {}
    results = (aggregation.get("values") or {}).get("results") or []
    return [item["value"] for item in results if isinstance(item.get("value"), str)]


def extract_scalar_aggregation_value(response: dict[str, Any], name: str) -> float | None:
    """Value of a SCALAR aggregation, or None if absent."""
    aggregation = _find_aggregation(response, name) or {}
    value = (aggregation.get("scalar") or {}).get("value")
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


# ============================================================================
# Facet Construction
# ============================================================================


def build_price_facet(min_price: float | None, max_price: float | None) -> CatalogPriceRange | None:
    """Price facet, or None when the catalog has no usable prices."""
    if min_price is None or max_price is None:
        return None
    if min_price > 0 or max_price > 0:
        return CatalogPriceRange(min_price=min_price, max_price=max_price)
    return None


def build_option_facets(
    customizations: Iterable[dict[str, Any]],
    option_names: list[str],
    choice_names: list[str],
) -> list[ProductOption]:
    """Intersect customization definitions with the aggregated names.

    A customization becomes a facet only if its name was aggregated, and
    keeps only the choices whose names were aggregated. Facets left
    without choices are dropped.
    """
    options: list[ProductOption] = []

    for customization in customizations:
        name = customization.get("name")
        option_id = customization.get("id")
        if not name or not option_id:
            continue
        if customization.get("customizationType") != PRODUCT_OPTION_TYPE:
            continue
        if not matches_aggregation_name(name, option_names):
            continue

        raw_choices = (customization.get("choicesSettings") or {}).get("choices") or []
        choices = [
            ProductChoice(
                id=choice["id"],
                name=choice["name"],
                color_code=choice.get("colorCode"),
            )
            for choice in raw_choices
            if choice.get("id")
            and choice.get("name")
            and matches_aggregation_name(choice["name"], choice_names)
        ]
        if not choices:
            continue

        options.append(
            ProductOption(
                id=option_id,
                name=name,
                choices=tuple(sort_choices(choices)),
                render_type=customization.get("customizationRenderType"),
            )
        )

    return options


def build_inventory_facet(statuses: list[str]) -> ProductOption | None:
    """Synthetic availability facet; only worth showing for 2+ statuses."""
    if len(statuses) <= 1:
        return None
    return ProductOption(
        id=INVENTORY_OPTION_ID,
        name=AVAILABILITY_OPTION_NAME,
        choices=tuple(
            ProductChoice(id=status.upper(), name=status.upper()) for status in statuses
        ),
        render_type=TEXT_CHOICES_RENDER_TYPE,
    )


# ============================================================================
# Loader
# ============================================================================


class CatalogFacetLoader:
    """Loads facets for a catalog view.

    State is exposed as signals:
        catalog_options: None until the first load, then the facet list.
        catalog_price_range: NOT_LOADED until the first load, then the
            price facet or None when the catalog has no usable prices.
        is_loading: True while the latest load is in flight.
        error: Message of the latest failed load, else None.

    Overlapping loads are resolved "last request wins": only the most
    recently started load may commit its results.

    Example usage:
        loader = CatalogFacetLoader(stores_client)
        await loader.load_catalog_data("shirts")
        loader.catalog_options.get()
    """

    def __init__(self, client: StoresClient) -> None:
        self.client = client
        self.catalog_options: Signal[tuple[ProductOption, ...] | None] = signal(None)
        self.catalog_price_range: Signal[Any] = signal(NOT_LOADED)
        self.is_loading: Signal[bool] = signal(False)
        self.error: Signal[str | None] = signal(None)
        self._load_id = 0

    async def load_catalog_data(self, category_id: str | None = None) -> None:
        """Load facets for a category (or the whole catalog).

        Never raises: failures are recorded in the error signal and reset
        the facets to empty.

        Args:
            category_id: Category to aggregate over.
        """
        self._load_id += 1
        load_id = self._load_id

        self.is_loading.set(True)
        self.error.set(None)

        try:
            aggregation_response, customizations = await asyncio.gather(
                self.client.aggregate(build_aggregation_request(category_id)),
                self.client.query_customizations(),
            )

            if load_id != self._load_id:
                logger.info(
                    "Discarding stale facet load",
                    category_id=category_id,
                    load_id=load_id,
                )
                return

            price_range = build_price_facet(
                extract_scalar_aggregation_value(aggregation_response, "minPrice"),
                extract_scalar_aggregation_value(aggregation_response, "maxPrice"),
            )

            options = build_option_facets(
                customizations,
                extract_aggregation_values(aggregation_response, "optionNames"),
                extract_aggregation_values(aggregation_response, "choiceNames"),
            )
            inventory = build_inventory_facet(
                extract_aggregation_values(aggregation_response, "inventoryStatus")
            )
            if inventory is not None:
                options.append(inventory)

            self.catalog_price_range.set(price_range)
            self.catalog_options.set(tuple(options))

            logger.info(
                "Catalog facets loaded",
                category_id=category_id,
                option_count=len(options),
                has_price_range=price_range is not None,
            )

        except Exception as e:
            if load_id != self._load_id:
                return
            logger.error(
                "Failed to load catalog data",
                category_id=category_id,
                error=str(e),
            )
            self.error.set(str(e) or "Failed to load catalog data")
            self.catalog_options.set(())
            self.catalog_price_range.set(None)

        finally:
            if load_id == self._load_id:
                self.is_loading.set(False)
