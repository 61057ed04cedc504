"""Search request builder.

Pure functions turning a filter, category, sort and paging selection into
backend requests. Nothing here reads from a store or touches the network:
every input is an explicit argument, so identical inputs always produce
equal requests.
"""

from typing import Any

from catalog_search.domain.conditions import (
    CATEGORY_ID_FIELD,
    CATEGORY_INDEX_FIELD,
    CHOICE_NAME_FIELD,
    INVENTORY_STATUS_FIELD,
    MAX_PRICE_FIELD,
    MIN_PRICE_FIELD,
    OPTION_NAME_FIELD,
    CategoryCondition,
    Condition,
    InventoryCondition,
    OptionCondition,
    PriceCondition,
    PriceOperator,
    combine,
)
from catalog_search.domain.filters import INVENTORY_OPTION_ID, Filter, SortType
from catalog_search.domain.paging import CursorPaging
from catalog_search.domain.search import SearchRequest, SortClause, SortOrder
from catalog_search.infrastructure.config import settings

# Placeholder default: read settings.price_ceiling_sentinel at call time.
_USE_SETTINGS: Any = object()


def build_filter_conditions(
    filters: Filter | None = None,
    category_id: str | None = None,
    price_ceiling: float | None = _USE_SETTINGS,
) -> list[Condition]:
    """Collect filter conditions in precedence order.

    Order: category, price lower bound, price upper bound, then one
    condition per selected option with at least one choice.

    Args:
        filters: Current filter selection.
        category_id: Selected category.
        price_ceiling: Upper bounds at or above this are treated as unbounded.

    Returns:
        Conditions to AND together.
    """
    if price_ceiling is _USE_SETTINGS:
        price_ceiling = settings.price_ceiling_sentinel

    conditions: list[Condition] = []

    if category_id:
        conditions.append(CategoryCondition(category_id))

    if filters is not None:
        low = filters.price_range.min
        high = filters.price_range.max

        if low > 0:
            conditions.append(PriceCondition(PriceOperator.GTE, low))

        if high is not None and high > 0 and (price_ceiling is None or high < price_ceiling):
            conditions.append(PriceCondition(PriceOperator.LTE, high))

        # Sorted by option id so equal filters build equal requests
        for option_id, choice_ids in sorted(filters.selected_options.items()):
            if not choice_ids:
                continue
            if option_id == INVENTORY_OPTION_ID:
                conditions.append(InventoryCondition(tuple(choice_ids)))
            else:
                conditions.append(OptionCondition(option_id, tuple(choice_ids)))

    return conditions


def build_sort(sort_by: SortType | None, category_id: str | None = None) -> tuple[SortClause, ...] | None:
    """Map a sort selection to backend sort clauses.

    NEWEST is the backend's natural order and produces no clause, as does
    an unspecified sort.
    """
    if sort_by is None or sort_by == SortType.NEWEST:
        return None
    if sort_by == SortType.NAME_ASC:
        return (SortClause("name", SortOrder.ASC),)
    if sort_by == SortType.NAME_DESC:
        return (SortClause("name", SortOrder.DESC),)
    if sort_by == SortType.PRICE_ASC:
        return (SortClause(MIN_PRICE_FIELD, SortOrder.ASC),)
    if sort_by == SortType.PRICE_DESC:
        return (SortClause(MIN_PRICE_FIELD, SortOrder.DESC),)
    if sort_by == SortType.RECOMMENDED:
        return (
            SortClause(
                CATEGORY_INDEX_FIELD,
                select_items_by=((CATEGORY_ID_FIELD, category_id),),
            ),
        )
    raise ValueError(f"Unhandled sort type: {sort_by!r}")


def build_search_options(
    filters: Filter | None = None,
    category_id: str | None = None,
    sort_by: SortType | None = None,
    paging: CursorPaging | None = None,
    price_ceiling: float | None = _USE_SETTINGS,
) -> SearchRequest:
    """Build a product search request.

    Args:
        filters: Current filter selection.
        category_id: Selected category.
        sort_by: Selected ordering; None keeps the backend default.
        paging: Cursor paging, passed through unchanged.
        price_ceiling: See build_filter_conditions.

    Returns:
        Immutable search request.

    Example:
        build_search_options(category_id="c1").filter
        # CategoryCondition(category_id="c1")
    """
    conditions = build_filter_conditions(filters, category_id, price_ceiling)
    return SearchRequest(
        filter=combine(conditions),
        sort=build_sort(sort_by, category_id),
        paging=paging,
    )


def _value_aggregation(name: str, field_path: str, limit: int) -> dict[str, Any]:
    return {
        "name": name,
        "fieldPath": field_path,
        "type": "VALUE",
        "value": {
            "limit": limit,
            "sortType": "VALUE",
            "sortDirection": "ASC",
        },
    }


def build_aggregation_request(category_id: str | None = None) -> dict[str, Any]:
    """Build the single aggregation request behind the facet loader.

    Scalar MIN/MAX over prices plus bounded value aggregations over option
    names, choice names and inventory status; no products are returned.

    Args:
        category_id: Restrict aggregation to one category.

    Returns:
        Backend request body.
    """
    catalog_filter: dict[str, Any] = {"visible": True}
    if category_id:
        catalog_filter.update(CategoryCondition(category_id).to_dict())

    return {
        "aggregations": [
            {
                "name": "minPrice",
                "fieldPath": MIN_PRICE_FIELD,
                "type": "SCALAR",
                "scalar": {"type": "MIN"},
            },
            {
                "name": "maxPrice",
                "fieldPath": MAX_PRICE_FIELD,
                "type": "SCALAR",
                "scalar": {"type": "MAX"},
            },
            _value_aggregation("optionNames", OPTION_NAME_FIELD, settings.option_names_limit),
            _value_aggregation("choiceNames", CHOICE_NAME_FIELD, settings.choice_names_limit),
            _value_aggregation(
                "inventoryStatus", INVENTORY_STATUS_FIELD, settings.inventory_status_limit
            ),
        ],
        "filter": catalog_filter,
        "includeProducts": False,
        "cursorPaging": {"limit": 0},
    }
