"""Facets derived from aggregated catalog data.

Facets are never edited by hand: the facet loader rebuilds them from the
backend's aggregations on every successful load.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from catalog_search.domain.base import ValueObject
from catalog_search.domain.filters import PriceRange

_NUMERIC_NAME = re.compile(r"^\d+$")


class _NotLoaded:
    """Marker for facet state that has not been loaded yet.

    Distinct from None, which means "loaded, and absent".
    """

    _instance: "_NotLoaded | None" = None

    def __new__(cls) -> "_NotLoaded":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_LOADED"


NOT_LOADED = _NotLoaded()


@dataclass(frozen=True)
class ProductChoice(ValueObject):
    """Selectable value of a product option (e.g. "Red")."""

    id: str
    name: str
    color_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.color_code is not None:
            data["colorCode"] = self.color_code
        return data


@dataclass(frozen=True)
class ProductOption(ValueObject):
    """Filter dimension with the choices currently present in the catalog."""

    id: str
    name: str
    choices: tuple[ProductChoice, ...] = ()
    render_type: str | None = None

    def find_choice(self, choice_id: str) -> ProductChoice | None:
        return next((c for c in self.choices if c.id == choice_id), None)

    def find_choice_by_name(self, name: str) -> ProductChoice | None:
        return next((c for c in self.choices if c.name == name), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "choices": [c.to_dict() for c in self.choices],
            "renderType": self.render_type,
        }


@dataclass(frozen=True)
class CatalogPriceRange(ValueObject):
    """Cheapest and most expensive price found in the catalog."""

    min_price: float
    max_price: float

    def to_dict(self) -> dict[str, float]:
        return {"minPrice": self.min_price, "maxPrice": self.max_price}


@dataclass(frozen=True)
class AvailableOptions(ValueObject):
    """Facets as offered to the shopper.

    The price range is 0..0 when the catalog has no usable price facet.
    """

    product_options: tuple[ProductOption, ...] = ()
    price_range: PriceRange = field(default_factory=PriceRange)

    def find_option(self, option_id: str) -> ProductOption | None:
        return next((o for o in self.product_options if o.id == option_id), None)

    def find_option_by_name(self, name: str) -> ProductOption | None:
        return next((o for o in self.product_options if o.name == name), None)


def matches_aggregation_name(name: str, aggregation_names: Iterable[str]) -> bool:
    """Case-insensitive exact match against aggregated value names."""
    lowered = name.lower()
    return any(agg_name.lower() == lowered for agg_name in aggregation_names)


def sort_choices(choices: Sequence[ProductChoice]) -> list[ProductChoice]:
    """Order choices for display.

    Numeric names ("42") come first, largest first; the remaining names
    follow in plain string order.

    Example:
        ["10", "2", "apple", "Banana"] -> ["10", "2", "Banana", "apple"]
    """
    numeric = [c for c in choices if _NUMERIC_NAME.match(c.name)]
    textual = [c for c in choices if not _NUMERIC_NAME.match(c.name)]
    numeric.sort(key=lambda c: int(c.name), reverse=True)
    textual.sort(key=lambda c: c.name)
    return numeric + textual
