"""Domain layer - filter, sort, facet and paging value objects.

- **Filters**: what the shopper selected (PriceRange, Filter, SortType)
- **Conditions**: typed search conditions rendered to backend JSON at the edge
- **Facets**: selectable options derived from aggregated catalog data
- **Paging**: cursor paging request and response metadata
- **Exceptions**: domain-specific errors

Example usage:
    from catalog_search.domain import Filter, SortType

    selection = Filter.create(min_price=10, max_price=50, options={"color": ["red"]})
"""

from catalog_search.domain.base import ValueObject
from catalog_search.domain.conditions import (
    AndCondition,
    CategoryCondition,
    Condition,
    InventoryCondition,
    OptionCondition,
    PriceCondition,
    PriceOperator,
    combine,
)
from catalog_search.domain.exceptions import (
    DomainError,
    InvalidPageSizeError,
    PagingError,
    UnknownSortError,
)
from catalog_search.domain.facets import (
    NOT_LOADED,
    AvailableOptions,
    CatalogPriceRange,
    ProductChoice,
    ProductOption,
    matches_aggregation_name,
    sort_choices,
)
from catalog_search.domain.filters import (
    DEFAULT_FILTER,
    DEFAULT_PRICE_RANGES,
    DEFAULT_SORT_TYPE,
    INVENTORY_OPTION_ID,
    Filter,
    PriceRange,
    SortType,
)
from catalog_search.domain.paging import CursorPaging, PagingMetadata
from catalog_search.domain.search import (
    DEFAULT_FIELDS,
    Product,
    SearchRequest,
    SearchResult,
    SortClause,
    SortOrder,
    Variant,
)

__all__ = [
    # Base
    "ValueObject",
    # Filters
    "DEFAULT_FILTER",
    "DEFAULT_PRICE_RANGES",
    "DEFAULT_SORT_TYPE",
    "INVENTORY_OPTION_ID",
    "Filter",
    "PriceRange",
    "SortType",
    # Conditions
    "AndCondition",
    "CategoryCondition",
    "Condition",
    "InventoryCondition",
    "OptionCondition",
    "PriceCondition",
    "PriceOperator",
    "combine",
    # Facets
    "NOT_LOADED",
    "AvailableOptions",
    "CatalogPriceRange",
    "ProductChoice",
    "ProductOption",
    "matches_aggregation_name",
    "sort_choices",
    # Paging
    "CursorPaging",
    "PagingMetadata",
    # Search
    "DEFAULT_FIELDS",
    "Product",
    "SearchRequest",
    "SearchResult",
    "SortClause",
    "SortOrder",
    "Variant",
    # Exceptions
    "DomainError",
    "InvalidPageSizeError",
    "PagingError",
    "UnknownSortError",
]
