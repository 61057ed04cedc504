"""Query-string state of the current catalog page.

Parses and rewrites the query string of a location while keeping its
path. Repeated keys become lists, lists are written back as repeated keys.
Each write replaces the current location; the written hrefs are kept
in `history` in write order.
"""

from collections.abc import Mapping, Sequence

import httpx
import structlog

logger = structlog.get_logger()

URLParamValue = str | list[str]


def parse_search_params(query: str | httpx.QueryParams) -> dict[str, URLParamValue]:
    """Parse a query string, collecting repeated keys into lists.

    Example:
        parse_search_params("color=red&color=blue&size=large")
        # {"color": ["red", "blue"], "size": "large"}
    """
    params = query if isinstance(query, httpx.QueryParams) else httpx.QueryParams(query)
    parsed: dict[str, URLParamValue] = {}

    for key, value in params.multi_items():
        existing = parsed.get(key)
        if existing is None:
            parsed[key] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            parsed[key] = [existing, value]

    return parsed


def encode_search_params(params: Mapping[str, URLParamValue | Sequence[str]]) -> list[tuple[str, str]]:
    """Flatten params into query pairs; empty values are dropped."""
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        if isinstance(value, str):
            if value:
                pairs.append((key, value))
        else:
            pairs.extend((key, v) for v in value)
    return pairs


class URLParams:
    """Holds the current location and rewrites its query string.

    Example usage:
        url_params = URLParams("https://shop.example/store/shirts?sort=price")
        params = url_params.get_url_params()
        params["Color"] = ["Red", "Blue"]
        url_params.update_url(params)
        url_params.href
        # "https://shop.example/store/shirts?sort=price&Color=Red&Color=Blue"
    """

    def __init__(self, href: str = "/") -> None:
        self._url = httpx.URL(href)
        self.history: list[str] = []

    @property
    def href(self) -> str:
        return str(self._url)

    @property
    def path(self) -> str:
        return self._url.path

    @property
    def query_string(self) -> str:
        return self._url.query.decode("ascii")

    def navigate(self, href: str) -> None:
        """Point at a new location (e.g. after the shopper followed a link)."""
        self._url = httpx.URL(href)

    def get_url_params(self) -> dict[str, URLParamValue]:
        """Current query parameters, repeated keys as lists."""
        return parse_search_params(self._url.params)

    def update_url(self, params: Mapping[str, URLParamValue | Sequence[str]]) -> None:
        """Replace the query string with params, keeping the path.

        Callers are expected to read-modify-write: anything not in params
        is dropped from the query string.
        """
        pairs = encode_search_params(params)
        self._url = self._url.copy_with(params=pairs)
        self.history.append(self.href)
        logger.debug("URL updated", href=self.href)
