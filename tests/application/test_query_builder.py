"""Tests for the search request builder."""

from catalog_search.application.query_builder import (
    build_aggregation_request,
    build_filter_conditions,
    build_search_options,
    build_sort,
)
from catalog_search.domain import (
    INVENTORY_OPTION_ID,
    AndCondition,
    CategoryCondition,
    CursorPaging,
    Filter,
    InventoryCondition,
    OptionCondition,
    PriceCondition,
    PriceOperator,
    SortClause,
    SortOrder,
    SortType,
)


class TestBuildSearchOptions:
    """Tests for build_search_options."""

    def test_no_inputs(self) -> None:
        """Nothing selected means no filter, no sort, no paging."""
        request = build_search_options()
        assert request.filter is None
        assert request.sort is None
        assert request.paging is None

    def test_category_only_is_unwrapped(self) -> None:
        """A lone category condition is not wrapped in AND."""
        request = build_search_options(category_id="c1")
        assert request.filter == CategoryCondition("c1")

    def test_price_range_and_option(self) -> None:
        """Price bounds and an option are ANDed in precedence order."""
        selection = Filter.create(min_price=10, max_price=50, options={"opt-color": ["c-red"]})

        request = build_search_options(filters=selection)

        assert request.filter == AndCondition(
            (
                PriceCondition(PriceOperator.GTE, 10),
                PriceCondition(PriceOperator.LTE, 50),
                OptionCondition("opt-color", ("c-red",)),
            )
        )

    def test_lower_bound_and_option_make_two_conditions(self) -> None:
        """Only bounds that pass their guard produce conditions."""
        selection = Filter.create(min_price=10, max_price=0, options={"opt-color": ["c-red"]})

        request = build_search_options(filters=selection)

        assert isinstance(request.filter, AndCondition)
        assert len(request.filter.conditions) == 2

    def test_category_comes_first(self) -> None:
        """Category precedes every filter condition."""
        selection = Filter.create(min_price=10, options={"opt-color": ["c-red"]})

        request = build_search_options(filters=selection, category_id="c1")

        assert isinstance(request.filter, AndCondition)
        assert request.filter.conditions[0] == CategoryCondition("c1")

    def test_inventory_option_becomes_status_condition(self) -> None:
        """The availability facet filters on inventory status."""
        selection = Filter.create(options={INVENTORY_OPTION_ID: ["IN_STOCK"]})

        request = build_search_options(filters=selection)

        assert request.filter == InventoryCondition(("IN_STOCK",))

    def test_empty_option_is_skipped(self) -> None:
        """Options with no selected choices add nothing."""
        selection = Filter.create(options={"opt-color": []})
        assert build_search_options(filters=selection).filter is None

    def test_paging_passed_through(self) -> None:
        """Paging is used unchanged."""
        paging = CursorPaging(limit=24, cursor="abc")
        assert build_search_options(paging=paging).paging is paging

    def test_is_pure(self) -> None:
        """Identical inputs give equal requests regardless of call order."""
        selection = Filter.create(min_price=5, max_price=80, options={"opt-size": ["s-10"]})
        first = build_search_options(selection, "c1", SortType.PRICE_ASC, CursorPaging(limit=10))
        build_search_options(category_id="other", sort_by=SortType.NAME_DESC)
        second = build_search_options(selection, "c1", SortType.PRICE_ASC, CursorPaging(limit=10))

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_option_selection_order_does_not_matter(self) -> None:
        """Equal filters selected in a different order build equal requests."""
        size_first = Filter.create(options={"size": ["s1"], "color": ["c1"]})
        color_first = Filter.create(options={"color": ["c1"], "size": ["s1"]})
        assert size_first == color_first

        request = build_search_options(size_first, "c1")

        assert request == build_search_options(color_first, "c1")
        assert request.filter == AndCondition(
            (
                CategoryCondition("c1"),
                OptionCondition("color", ("c1",)),
                OptionCondition("size", ("s1",)),
            )
        )


class TestPriceCeiling:
    """Tests for the "no upper bound" price ceiling."""

    def test_upper_bound_at_ceiling_is_dropped(self) -> None:
        """A bound at or above the ceiling means unbounded."""
        selection = Filter.create(min_price=0, max_price=999999)
        assert build_filter_conditions(selection, price_ceiling=999999) == []

    def test_upper_bound_below_ceiling_is_kept(self) -> None:
        """A bound below the ceiling is sent."""
        selection = Filter.create(min_price=0, max_price=999998)
        assert build_filter_conditions(selection, price_ceiling=999999) == [
            PriceCondition(PriceOperator.LTE, 999998)
        ]

    def test_no_ceiling_sends_every_bound(self) -> None:
        """With the ceiling disabled every positive bound is sent."""
        selection = Filter.create(min_price=0, max_price=999999)
        assert build_filter_conditions(selection, price_ceiling=None) == [
            PriceCondition(PriceOperator.LTE, 999999)
        ]

    def test_open_upper_bound(self) -> None:
        """A missing upper bound adds no condition."""
        selection = Filter.create(min_price=0, max_price=None)
        assert build_filter_conditions(selection) == []

    def test_inverted_range_passes_through(self) -> None:
        """min > max is not corrected."""
        selection = Filter.create(min_price=50, max_price=10)
        assert build_filter_conditions(selection) == [
            PriceCondition(PriceOperator.GTE, 50),
            PriceCondition(PriceOperator.LTE, 10),
        ]


class TestBuildSort:
    """Tests for sort mapping."""

    def test_price_desc(self) -> None:
        """Price sorts use the minimum price field."""
        clauses = build_sort(SortType.PRICE_DESC)
        assert [c.to_dict() for c in clauses] == [
            {"fieldName": "actualPriceRange.minValue.amount", "order": "DESC"}
        ]

    def test_name_asc(self) -> None:
        """Name sorts order by name."""
        assert build_sort(SortType.NAME_ASC) == (SortClause("name", SortOrder.ASC),)

    def test_newest_and_unspecified_have_no_clause(self) -> None:
        """The backend default order needs no clause."""
        assert build_sort(SortType.NEWEST) is None
        assert build_sort(None) is None

    def test_recommended_is_scoped_to_category(self) -> None:
        """Recommended orders by the product's index within the category."""
        clauses = build_sort(SortType.RECOMMENDED, "c1")
        assert [c.to_dict() for c in clauses] == [
            {
                "fieldName": "allCategoriesInfo.categories.index",
                "selectItemsBy": [{"allCategoriesInfo.categories.id": "c1"}],
            }
        ]

    def test_every_sort_type_is_mapped(self) -> None:
        """The mapping is total."""
        for sort_type in SortType:
            build_sort(sort_type, "c1")


class TestBuildAggregationRequest:
    """Tests for the facet aggregation request."""

    def test_shape(self) -> None:
        """One request carries all facet aggregations and no products."""
        body = build_aggregation_request()

        names = [a["name"] for a in body["aggregations"]]
        assert names == ["minPrice", "maxPrice", "optionNames", "choiceNames", "inventoryStatus"]
        assert body["filter"] == {"visible": True}
        assert body["includeProducts"] is False
        assert body["cursorPaging"] == {"limit": 0}

    def test_cardinality_limits(self) -> None:
        """Value aggregations are bounded."""
        body = build_aggregation_request()
        limits = {a["name"]: a["value"]["limit"] for a in body["aggregations"] if a["type"] == "VALUE"}
        assert limits == {"optionNames": 20, "choiceNames": 50, "inventoryStatus": 10}

    def test_category_filter(self) -> None:
        """A category restricts the aggregated products."""
        body = build_aggregation_request("c1")
        assert body["filter"] == {"visible": True, **CategoryCondition("c1").to_dict()}
