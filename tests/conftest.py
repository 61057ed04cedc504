"""Shared fixtures for catalog search tests."""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from catalog_search.domain import SearchResult
from catalog_search.infrastructure.stores_client import StoresClient, VariantsQuery


@pytest.fixture
def stores_client() -> MagicMock:
    """Create a mock stores backend client."""
    client = MagicMock(spec=StoresClient)

    # Make all network methods async
    client.search_products = AsyncMock(return_value=SearchResult())
    client.aggregate = AsyncMock(return_value={})
    client.query_customizations = AsyncMock(return_value=[])
    client._fetch_variants = AsyncMock()
    client.close = AsyncMock()

    # Real fluent query on top of the mocked page fetch
    client.query_variants.side_effect = lambda: VariantsQuery(client)

    return client


@pytest.fixture
def aggregation_response() -> dict[str, Any]:
    """Aggregation response for a catalog priced 5..120 with two options."""
    return {
        "aggregationData": {
            "results": [
                {"name": "minPrice", "scalar": {"type": "MIN", "value": 5}},
                {"name": "maxPrice", "scalar": {"type": "MAX", "value": 120}},
                {
                    "name": "optionNames",
                    "values": {"results": [{"value": "Color"}, {"value": "size"}]},
                },
                {
                    "name": "choiceNames",
                    "values": {
                        "results": [
                            {"value": "red"},
                            {"value": "Blue"},
                            {"value": "10"},
                            {"value": "2"},
                        ]
                    },
                },
                {
                    "name": "inventoryStatus",
                    "values": {
                        "results": [{"value": "in_stock"}, {"value": "out_of_stock"}]
                    },
                },
            ]
        }
    }


@pytest.fixture
def customizations() -> list[dict[str, Any]]:
    """Customization definitions matching aggregation_response."""
    return [
        {
            "id": "opt-color",
            "name": "Color",
            "customizationType": "PRODUCT_OPTION",
            "customizationRenderType": "SWATCH_CHOICES",
            "choicesSettings": {
                "choices": [
                    {"id": "c-red", "name": "Red", "colorCode": "#ff0000"},
                    {"id": "c-blue", "name": "Blue", "colorCode": "#0000ff"},
                    {"id": "c-green", "name": "Green", "colorCode": "#00ff00"},
                ]
            },
        },
        {
            "id": "opt-size",
            "name": "Size",
            "customizationType": "PRODUCT_OPTION",
            "customizationRenderType": "TEXT_CHOICES",
            "choicesSettings": {
                "choices": [
                    {"id": "s-2", "name": "2"},
                    {"id": "s-10", "name": "10"},
                    {"id": "s-xl", "name": "XL"},
                ]
            },
        },
        {
            "id": "opt-engraving",
            "name": "Engraving",
            "customizationType": "MODIFIER",
            "choicesSettings": {"choices": [{"id": "e-1", "name": "Red"}]},
        },
    ]
