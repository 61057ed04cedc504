"""Two-way sync between a catalog view's filter/sort state and its URL.

State -> URL: filters are written under human-readable names (option
display name as key, choice names as values) so URLs stay shareable.
URL -> state: the same names are resolved back to ids through the facets
currently on offer.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field

import structlog

from catalog_search.domain.conditions import format_amount
from catalog_search.domain.facets import AvailableOptions, ProductOption, matches_aggregation_name
from catalog_search.domain.filters import (
    DEFAULT_SORT_TYPE,
    INVENTORY_OPTION_ID,
    Filter,
    PriceRange,
    SortType,
)
from catalog_search.infrastructure.url_params import URLParams, URLParamValue
from catalog_search.signals import Computed, Signal, batch

logger = structlog.get_logger()

MIN_PRICE_PARAM = "minPrice"
MAX_PRICE_PARAM = "maxPrice"
AVAILABILITY_PARAM = "availability"
INVENTORY_STATUS_PARAM = "inventoryStatus"
QUERY_PARAM = "q"
LIMIT_PARAM = "limit"
CURSOR_PARAM = "cursor"
SORT_PARAM = "sort"

# Never interpreted as option display names.
RESERVED_PARAMS = frozenset(
    {
        MIN_PRICE_PARAM,
        MAX_PRICE_PARAM,
        AVAILABILITY_PARAM,
        INVENTORY_STATUS_PARAM,
        QUERY_PARAM,
        LIMIT_PARAM,
        CURSOR_PARAM,
        SORT_PARAM,
    }
)


# ============================================================================
# URL -> State
# ============================================================================


@dataclass
class SearchState:
    """Search state decoded from query parameters.

    Attributes:
        sort: Requested ordering, None if absent or unrecognised.
        limit: Requested page size.
        cursor: Continuation cursor.
        min_price: Requested lower price bound.
        max_price: Requested upper price bound.
        selected_options: Option id -> choice ids, resolved from names.
        query: Free-text query, carried through untouched.
    """

    sort: SortType | None = None
    limit: int | None = None
    cursor: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    selected_options: dict[str, tuple[str, ...]] = field(default_factory=dict)
    query: str | None = None

    def to_filter(self, default_range: PriceRange) -> Filter:
        """Filter for this state; absent price bounds fall back to default_range."""
        return Filter(
            price_range=PriceRange(
                self.min_price if self.min_price is not None else default_range.min,
                self.max_price if self.max_price is not None else default_range.max,
            ),
            selected_options=self.selected_options,
        )


def _first(value: URLParamValue | None) -> str | None:
    if isinstance(value, list):
        return value[0] if value else None
    return value or None


def _split_values(value: URLParamValue | None) -> list[str]:
    """Values of a param given as repeated keys and/or comma-joined."""
    if value is None:
        return []
    raw = [value] if isinstance(value, str) else value
    return [part.strip() for item in raw for part in item.split(",") if part.strip()]


def _parse_price(value: URLParamValue | None) -> float | None:
    text = _first(value)
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        logger.debug("Ignoring malformed price param", value=text)
        return None


def _parse_limit(value: URLParamValue | None) -> int | None:
    text = _first(value)
    if text is None:
        return None
    try:
        limit = int(text)
    except ValueError:
        logger.debug("Ignoring malformed limit param", value=text)
        return None
    return limit if limit >= 0 else None


def _find_option_for_param(options: AvailableOptions, name: str) -> ProductOption | None:
    option = options.find_option_by_name(name)
    if option is not None:
        return option
    return next(
        (o for o in options.product_options if matches_aggregation_name(o.name, [name])),
        None,
    )


def _resolve_choice_ids(option: ProductOption, values: list[str]) -> tuple[str, ...]:
    choice_ids: list[str] = []
    for value in values:
        choice = option.find_choice_by_name(value) or option.find_choice(value)
        if choice is not None and choice.id not in choice_ids:
            choice_ids.append(choice.id)
    return tuple(choice_ids)


def parse_search_state(
    params: Mapping[str, URLParamValue],
    options: AvailableOptions,
) -> SearchState:
    """Decode search state from query parameters.

    Option params are matched to facets by display name (exact first, then
    case-insensitive) and their values to choices by name or id. Names
    that match no current facet or choice are ignored.

    Args:
        params: Query parameters, repeated keys as lists.
        options: Facets currently on offer.

    Returns:
        Decoded SearchState.

    Example:
        parse_search_state({"Color": "Red,Blue", "sort": "price:desc"}, options)
        # SearchState(sort=SortType.PRICE_DESC, selected_options={"color-id": ("red-id", "blue-id")})
    """
    state = SearchState(
        sort=SortType.from_url(_first(params.get(SORT_PARAM))),
        limit=_parse_limit(params.get(LIMIT_PARAM)),
        cursor=_first(params.get(CURSOR_PARAM)),
        min_price=_parse_price(params.get(MIN_PRICE_PARAM)),
        max_price=_parse_price(params.get(MAX_PRICE_PARAM)),
        query=_first(params.get(QUERY_PARAM)),
    )

    statuses = _split_values(params.get(AVAILABILITY_PARAM)) + _split_values(
        params.get(INVENTORY_STATUS_PARAM)
    )
    if statuses:
        state.selected_options[INVENTORY_OPTION_ID] = tuple(
            dict.fromkeys(status.upper() for status in statuses)
        )

    for name, value in params.items():
        if name in RESERVED_PARAMS:
            continue
        option = _find_option_for_param(options, name)
        if option is None:
            continue
        choice_ids = _resolve_choice_ids(option, _split_values(value))
        if choice_ids:
            state.selected_options[option.id] = choice_ids

    return state


# ============================================================================
# State -> URL
# ============================================================================


class URLStateSync:
    """Keeps filter and sort signals and the URL in step.

    Writes always read-modify-write the current params, so params this
    class does not manage survive every update.

    Example usage:
        sync = URLStateSync(url_params, view.current_filters, view.current_sort, view.available_options)
        sync.apply_filters(Filter.create(min_price=10, options={"color-id": ["red-id"]}))
        url_params.href
        # ".../store?minPrice=10&Color=Red"
    """

    def __init__(
        self,
        url_params: URLParams,
        current_filters: Signal[Filter],
        current_sort: Signal[SortType],
        available_options: Computed[AvailableOptions] | Signal[AvailableOptions],
    ) -> None:
        self.url_params = url_params
        self.current_filters = current_filters
        self.current_sort = current_sort
        self.available_options = available_options

    def _filter_params(self, options: AvailableOptions) -> set[str]:
        names = {MIN_PRICE_PARAM, MAX_PRICE_PARAM, AVAILABILITY_PARAM, INVENTORY_STATUS_PARAM}
        names.update(o.name for o in options.product_options if o.id != INVENTORY_OPTION_ID)
        return names

    def _params_without_filters(self, options: AvailableOptions) -> dict[str, URLParamValue]:
        filter_params = self._filter_params(options)
        return {
            key: value
            for key, value in self.url_params.get_url_params().items()
            if key not in filter_params
        }

    def apply_filters(self, filters: Filter) -> None:
        """Set the filter and write it to the URL.

        Price bounds are only written when they differ from the facet-derived
        range; an existing sort param is always kept.
        """
        self.current_filters.set(filters)

        options = self.available_options.peek()
        params = self._params_without_filters(options)
        sort_value = params.pop(SORT_PARAM, None)

        default_range = options.price_range
        price_range = filters.price_range
        if price_range.min != default_range.min:
            params[MIN_PRICE_PARAM] = format_amount(price_range.min)
        if price_range.max is not None and price_range.max != default_range.max:
            params[MAX_PRICE_PARAM] = format_amount(price_range.max)

        for option_id, choice_ids in filters.active_options.items():
            option = options.find_option(option_id)
            if option is None:
                continue
            names = []
            for choice_id in choice_ids:
                choice = option.find_choice(choice_id)
                if choice is not None:
                    names.append(choice.name)
            if not names:
                continue
            key = AVAILABILITY_PARAM if option_id == INVENTORY_OPTION_ID else option.name
            params[key] = names

        if sort_value:
            params[SORT_PARAM] = sort_value

        self.url_params.update_url(params)

    def clear_filters(self) -> None:
        """Reset the filter to the facet-derived defaults and strip filter params."""
        options = self.available_options.peek()
        self.current_filters.set(Filter(price_range=options.price_range))
        self.url_params.update_url(self._params_without_filters(options))

    def set_sort_by(self, sort_by: SortType) -> None:
        """Set the sort; the default sort is removed from the URL rather than written."""
        self.current_sort.set(sort_by)

        params = self.url_params.get_url_params()
        if sort_by == DEFAULT_SORT_TYPE:
            params.pop(SORT_PARAM, None)
        else:
            params[SORT_PARAM] = sort_by.to_url()
        self.url_params.update_url(params)

    def restore(self) -> SearchState:
        """Load filter and sort from the current URL.

        Returns:
            The decoded state, including paging params for the caller.
        """
        options = self.available_options.peek()
        state = parse_search_state(self.url_params.get_url_params(), options)

        with batch():
            self.current_filters.set(state.to_filter(options.price_range))
            self.current_sort.set(state.sort or DEFAULT_SORT_TYPE)

        logger.debug(
            "Search state restored from URL",
            sort=self.current_sort.peek().value,
            option_count=len(state.selected_options),
        )
        return state
