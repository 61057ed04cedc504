"""Filter and sort selection for a catalog view.

A Filter is what the shopper has picked: a price range and, per product
option, the set of choice ids. A SortType is how results are ordered.
Both are immutable values; the view replaces them wholesale.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Self

from catalog_search.domain.base import ValueObject

# Option id of the synthetic availability facet.
INVENTORY_OPTION_ID = "inventory-filter"


# ============================================================================
# Sort
# ============================================================================


class SortType(str, Enum):
    """Available product orderings."""

    NEWEST = "newest"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    RECOMMENDED = "recommended"

    @classmethod
    def from_url(cls, value: str | None) -> "SortType | None":
        """Parse a sort query parameter.

        Accepts the enum values ("price_desc") as well as the
        "field[:desc]" form ("price:desc", "name", "created").

        Args:
            value: Raw query parameter value.

        Returns:
            Matching SortType, or None if the value is not recognised.
        """
        if not value:
            return None

        normalized = value.strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            pass

        field_name, _, order = normalized.partition(":")
        descending = order == "desc"

        if field_name == "name":
            return cls.NAME_DESC if descending else cls.NAME_ASC
        if field_name == "price":
            return cls.PRICE_DESC if descending else cls.PRICE_ASC
        if field_name in ("newest", "created"):
            return cls.NEWEST
        if field_name == "recommended":
            return cls.RECOMMENDED
        return None

    def to_url(self) -> str:
        """Render the "field[:desc]" form used in shareable URLs."""
        return _SORT_URL_NAMES[self]


_SORT_URL_NAMES = {
    SortType.NAME_ASC: "name",
    SortType.NAME_DESC: "name:desc",
    SortType.PRICE_ASC: "price",
    SortType.PRICE_DESC: "price:desc",
    SortType.NEWEST: "newest",
    SortType.RECOMMENDED: "recommended",
}

DEFAULT_SORT_TYPE = SortType.NEWEST


# ============================================================================
# Price Range
# ============================================================================


@dataclass(frozen=True)
class PriceRange(ValueObject):
    """Inclusive price bounds in major currency units.

    Attributes:
        min: Lower bound; 0 means no lower bound.
        max: Upper bound; None or 0 means no upper bound.
    """

    min: float = 0
    max: float | None = 0

    @property
    def is_inverted(self) -> bool:
        """Whether min exceeds max.

        Inverted ranges are carried through as-is; rejecting or clamping
        them is left to the caller.
        """
        return self.max is not None and self.max > 0 and self.min > self.max

    @property
    def is_unset(self) -> bool:
        """Whether this is the 0..0 placeholder range."""
        return self.min == 0 and not self.max


# Ranges the view treats as "never touched by the shopper".
DEFAULT_PRICE_RANGES = (PriceRange(0, 0), PriceRange(0, 1000))


# ============================================================================
# Filter
# ============================================================================


@dataclass(frozen=True)
class Filter(ValueObject):
    """Current filter selection.

    Attributes:
        price_range: Selected price bounds.
        selected_options: Option id -> selected choice ids, in selection order.
    """

    price_range: PriceRange = field(default_factory=PriceRange)
    selected_options: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # lists and sets compare unequal to tuples; store one canonical shape
        object.__setattr__(
            self,
            "selected_options",
            {k: tuple(v) for k, v in self.selected_options.items()},
        )

    @classmethod
    def create(
        cls,
        min_price: float = 0,
        max_price: float | None = 0,
        options: Mapping[str, Iterable[str]] | None = None,
    ) -> Self:
        """Build a filter from loose inputs.

        Duplicate choice ids are dropped, keeping first occurrence.

        Args:
            min_price: Lower price bound.
            max_price: Upper price bound.
            options: Option id -> choice ids.

        Returns:
            New Filter.
        """
        return cls(
            price_range=PriceRange(min_price, max_price),
            selected_options={
                option_id: tuple(dict.fromkeys(choice_ids))
                for option_id, choice_ids in (options or {}).items()
            },
        )

    def with_price_range(self, price_range: PriceRange) -> Self:
        return replace(self, price_range=price_range)

    def with_option(self, option_id: str, choice_ids: Iterable[str]) -> Self:
        options = dict(self.selected_options)
        options[option_id] = tuple(dict.fromkeys(choice_ids))
        return replace(self, selected_options=options)

    def without_option(self, option_id: str) -> Self:
        options = {k: v for k, v in self.selected_options.items() if k != option_id}
        return replace(self, selected_options=options)

    def __hash__(self) -> int:
        # equality ignores option order, so the hash must too
        return hash((self.price_range, frozenset(self.selected_options.items())))

    @property
    def active_options(self) -> dict[str, tuple[str, ...]]:
        """Selected options with at least one choice."""
        return {k: tuple(v) for k, v in self.selected_options.items() if v}


DEFAULT_FILTER = Filter()
