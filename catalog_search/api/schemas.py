"""API schemas for the catalog search service.

Pydantic models for response serialization. Field aliases follow the
stores backend's camelCase naming so responses can be fed straight back
into storefront code that consumes the backend.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] | dict[str, Any] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class CamelModel(BaseModel):
    """Base for models serialized with camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# Facet Schemas
# ============================================================================


class ChoiceSchema(CamelModel):
    """Selectable choice of a facet."""

    id: str
    name: str
    color_code: str | None = Field(default=None, alias="colorCode")


class ProductOptionSchema(CamelModel):
    """Facet with the choices present in the catalog."""

    id: str
    name: str
    choices: list[ChoiceSchema] = Field(default_factory=list)
    render_type: str | None = Field(default=None, alias="renderType")


class PriceRangeSchema(CamelModel):
    """Catalog price bounds."""

    min_price: float = Field(..., alias="minPrice")
    max_price: float = Field(..., alias="maxPrice")


class FacetsResponse(CamelModel):
    """Facets of a catalog view."""

    product_options: list[ProductOptionSchema] = Field(
        default_factory=list, alias="productOptions"
    )
    price_range: PriceRangeSchema | None = Field(
        default=None,
        alias="priceRange",
        description="Null when the catalog has no usable prices",
    )
    error: str | None = Field(default=None, description="Facet load error, if any")


# ============================================================================
# Product Schemas
# ============================================================================


class PagingMetadataSchema(CamelModel):
    """Cursor paging metadata of a result page."""

    has_next: bool = Field(default=False, alias="hasNext")
    count: int | None = None
    cursors: dict[str, str] = Field(default_factory=dict)


class ProductsResponse(CamelModel):
    """One page of products."""

    products: list[dict[str, Any]] = Field(default_factory=list)
    paging_metadata: PagingMetadataSchema = Field(
        default_factory=PagingMetadataSchema, alias="pagingMetadata"
    )
    query: str = Field(
        default="", description="Canonical query string for the resolved search state"
    )
