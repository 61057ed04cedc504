"""Tests for filter and sort values."""

import pytest

from catalog_search.domain import (
    DEFAULT_FILTER,
    DEFAULT_SORT_TYPE,
    Filter,
    PriceRange,
    SortType,
)


class TestSortType:
    """Tests for SortType URL parsing."""

    def test_default_is_newest(self) -> None:
        """Newest is the implicit default ordering."""
        assert DEFAULT_SORT_TYPE == SortType.NEWEST

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("price_desc", SortType.PRICE_DESC),
            ("price:desc", SortType.PRICE_DESC),
            ("price", SortType.PRICE_ASC),
            ("name:desc", SortType.NAME_DESC),
            ("NAME", SortType.NAME_ASC),
            ("created", SortType.NEWEST),
            ("recommended", SortType.RECOMMENDED),
        ],
    )
    def test_from_url(self, value: str, expected: SortType) -> None:
        """Enum values and field[:desc] forms are both accepted."""
        assert SortType.from_url(value) == expected

    def test_from_url_unknown(self) -> None:
        """Unknown or empty values parse to None."""
        assert SortType.from_url("popularity") is None
        assert SortType.from_url("") is None
        assert SortType.from_url(None) is None

    def test_to_url(self) -> None:
        """to_url renders the field[:desc] form."""
        assert SortType.PRICE_DESC.to_url() == "price:desc"
        assert SortType.from_url(SortType.NAME_ASC.to_url()) == SortType.NAME_ASC


class TestPriceRange:
    """Tests for PriceRange."""

    def test_default_is_unset(self) -> None:
        """The default range is the 0..0 placeholder."""
        assert PriceRange().is_unset
        assert not PriceRange(0, 100).is_unset

    def test_inverted_range_is_kept(self) -> None:
        """An inverted range is reported, not corrected."""
        price_range = PriceRange(50, 10)
        assert price_range.is_inverted
        assert (price_range.min, price_range.max) == (50, 10)

    def test_open_upper_bound_is_not_inverted(self) -> None:
        """No upper bound never makes a range inverted."""
        assert not PriceRange(50, None).is_inverted
        assert not PriceRange(50, 0).is_inverted


class TestFilter:
    """Tests for Filter."""

    def test_create_deduplicates_choices(self) -> None:
        """Duplicate choice ids are dropped, keeping selection order."""
        selection = Filter.create(options={"color": ["red", "blue", "red"]})
        assert selection.selected_options == {"color": ("red", "blue")}

    def test_equality_ignores_sequence_type(self) -> None:
        """Lists and tuples of choices produce equal filters."""
        assert Filter(selected_options={"color": ["red"]}) == Filter(
            selected_options={"color": ("red",)}
        )

    def test_with_option_returns_new_filter(self) -> None:
        """with_option leaves the original untouched."""
        updated = DEFAULT_FILTER.with_option("size", ["xl"])
        assert updated.selected_options == {"size": ("xl",)}
        assert DEFAULT_FILTER.selected_options == {}

    def test_without_option(self) -> None:
        """without_option removes one option only."""
        selection = Filter.create(options={"color": ["red"], "size": ["xl"]})
        assert selection.without_option("color").selected_options == {"size": ("xl",)}

    def test_active_options_skips_empty(self) -> None:
        """Options with no choices are not active."""
        selection = Filter.create(options={"color": [], "size": ["xl"]})
        assert selection.active_options == {"size": ("xl",)}

    def test_equal_filters_hash_equal(self) -> None:
        """Filters are hashable, and option order does not change the hash."""
        size_first = Filter.create(min_price=5, options={"size": ["s1"], "color": ["c1"]})
        color_first = Filter.create(min_price=5, options={"color": ["c1"], "size": ["s1"]})

        assert hash(DEFAULT_FILTER) == hash(Filter())
        assert hash(size_first) == hash(color_first)
        assert len({size_first, color_first}) == 1

    def test_is_immutable(self) -> None:
        """Filters cannot be modified in place."""
        with pytest.raises(AttributeError):
            DEFAULT_FILTER.price_range = PriceRange(1, 2)  # type: ignore[misc]
