"""Search filter conditions.

A small tagged union of the conditions a product search can carry,
combined with an explicit AND node. Conditions stay typed until the
request boundary, where to_dict() renders the backend's JSON shape.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from catalog_search.domain.base import ValueObject

# Backend field paths
CATEGORIES_FIELD = "allCategoriesInfo.categories"
CATEGORY_INDEX_FIELD = "allCategoriesInfo.categories.index"
CATEGORY_ID_FIELD = "allCategoriesInfo.categories.id"
MIN_PRICE_FIELD = "actualPriceRange.minValue.amount"
MAX_PRICE_FIELD = "actualPriceRange.maxValue.amount"
CHOICE_ID_FIELD = "options.choicesSettings.choices.choiceId"
INVENTORY_STATUS_FIELD = "inventory.availabilityStatus"
OPTION_NAME_FIELD = "options.name"
CHOICE_NAME_FIELD = "options.choicesSettings.choices.name"


def format_amount(amount: float) -> str:
    """Render a price amount the way the backend expects it (as a string).

    Integral values lose their fractional part: 10.0 -> "10".
    """
    if isinstance(amount, float) and amount.is_integer():
        return str(int(amount))
    return str(amount)


class PriceOperator(str, Enum):
    """Comparison used by a price condition."""

    GTE = "$gte"
    LTE = "$lte"


@dataclass(frozen=True)
class CategoryCondition(ValueObject):
    """Product belongs to the given category."""

    category_id: str

    def to_dict(self) -> dict[str, Any]:
        return {CATEGORIES_FIELD: {"$matchItems": [{"id": {"$in": [self.category_id]}}]}}


@dataclass(frozen=True)
class PriceCondition(ValueObject):
    """Product price compares against a bound."""

    operator: PriceOperator
    amount: float
    field_path: str = MIN_PRICE_FIELD

    def to_dict(self) -> dict[str, Any]:
        return {self.field_path: {self.operator.value: format_amount(self.amount)}}


@dataclass(frozen=True)
class OptionCondition(ValueObject):
    """Product offers any of the given option choices."""

    option_id: str
    choice_ids: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {CHOICE_ID_FIELD: {"$hasSome": list(self.choice_ids)}}


@dataclass(frozen=True)
class InventoryCondition(ValueObject):
    """Product availability status is one of the given statuses."""

    statuses: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {INVENTORY_STATUS_FIELD: {"$in": list(self.statuses)}}


@dataclass(frozen=True)
class AndCondition(ValueObject):
    """All nested conditions hold."""

    conditions: tuple["Condition", ...]

    def to_dict(self) -> dict[str, Any]:
        return {"$and": [c.to_dict() for c in self.conditions]}


Condition = Union[
    CategoryCondition,
    PriceCondition,
    OptionCondition,
    InventoryCondition,
    AndCondition,
]


def combine(conditions: Sequence[Condition]) -> Condition | None:
    """Combine conditions with AND.

    No conditions yields None, a single condition is returned as-is,
    two or more are wrapped in an AndCondition.
    """
    if not conditions:
        return None
    if len(conditions) == 1:
        return conditions[0]
    return AndCondition(tuple(conditions))
