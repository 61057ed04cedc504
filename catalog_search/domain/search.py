"""Search request and result values.

SearchRequest is the only output of the query builder: an immutable value
with no identity beyond equality, rendered to JSON at the request boundary.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Self

from catalog_search.domain.base import ValueObject
from catalog_search.domain.conditions import Condition
from catalog_search.domain.paging import CursorPaging, PagingMetadata

# Catalog records are opaque to the search subsystem.
Product = dict[str, Any]
Variant = dict[str, Any]

DEFAULT_FIELDS: tuple[str, ...] = (
    "DESCRIPTION",
    "DIRECT_CATEGORIES_INFO",
    "BREADCRUMBS_INFO",
    "INFO_SECTION",
    "MEDIA_ITEMS_INFO",
    "PLAIN_DESCRIPTION",
    "THUMBNAIL",
    "URL",
    "VARIANT_OPTION_CHOICE_NAMES",
    "WEIGHT_MEASUREMENT_UNIT_INFO",
)


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class SortClause(ValueObject):
    """One ordering key.

    Attributes:
        field_name: Backend field to order by.
        order: Direction; None when the ordering is positional.
        select_items_by: Scopes an array field to the matching items
            (used to order by a product's index within one category).
    """

    field_name: str
    order: SortOrder | None = None
    select_items_by: tuple[tuple[str, str | None], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"fieldName": self.field_name}
        if self.order is not None:
            data["order"] = self.order.value
        if self.select_items_by:
            data["selectItemsBy"] = [{key: value} for key, value in self.select_items_by]
        return data


@dataclass(frozen=True)
class SearchRequest(ValueObject):
    """Product search request.

    Attributes:
        filter: Filter tree, or None for no filtering.
        sort: Ordering keys, or None for the backend's default order.
        paging: Cursor paging, or None for the backend default page.
        fields: Field projection.
    """

    filter: Condition | None = None
    sort: tuple[SortClause, ...] | None = None
    paging: CursorPaging | None = None
    fields: tuple[str, ...] = DEFAULT_FIELDS

    def with_paging(self, paging: CursorPaging | None) -> Self:
        return replace(self, paging=paging)

    def to_dict(self) -> dict[str, Any]:
        """Render the backend JSON body."""
        search: dict[str, Any] = {}
        if self.filter is not None:
            search["filter"] = self.filter.to_dict()
        if self.sort is not None:
            search["sort"] = [clause.to_dict() for clause in self.sort]
        if self.paging is not None:
            search["cursorPaging"] = self.paging.to_dict()
        return {"search": search, "fields": list(self.fields)}


@dataclass
class SearchResult:
    """One page of search results."""

    products: list[Product] = field(default_factory=list)
    paging_metadata: PagingMetadata = field(default_factory=PagingMetadata)
    aggregation_data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "SearchResult":
        """Create from the backend search response.

        Args:
            data: {"products": [...], "pagingMetadata": {...}, "aggregationData": {...}}

        Returns:
            SearchResult instance.
        """
        return cls(
            products=list(data.get("products") or []),
            paging_metadata=PagingMetadata.from_api_response(data.get("pagingMetadata")),
            aggregation_data=data.get("aggregationData") or {},
        )
