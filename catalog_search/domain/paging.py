"""Cursor paging values."""

from dataclasses import dataclass
from typing import Any, Self

from catalog_search.domain.base import ValueObject


@dataclass(frozen=True)
class CursorPaging(ValueObject):
    """Page request addressed by an opaque continuation token.

    Attributes:
        limit: Page size.
        cursor: Continuation token; None requests the first page.
    """

    limit: int
    cursor: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"limit": self.limit}
        if self.cursor:
            data["cursor"] = self.cursor
        return data


@dataclass(frozen=True)
class PagingMetadata(ValueObject):
    """Paging information returned with a page of results.

    Attributes:
        has_next: Whether the backend reports a following page.
        next_cursor: Token of the following page, if any.
        prev_cursor: Token of the previous page, if any.
        count: Number of items in this page.
    """

    has_next: bool = False
    next_cursor: str | None = None
    prev_cursor: str | None = None
    count: int | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any] | None) -> Self:
        """Create from the backend's pagingMetadata object.

        Args:
            data: {"hasNext": bool, "count": int, "cursors": {"next": str, "prev": str}}

        Returns:
            PagingMetadata instance.
        """
        data = data or {}
        cursors = data.get("cursors") or {}
        return cls(
            has_next=bool(data.get("hasNext", False)),
            next_cursor=cursors.get("next"),
            prev_cursor=cursors.get("prev"),
            count=data.get("count"),
        )

    def to_dict(self) -> dict[str, Any]:
        cursors: dict[str, str] = {}
        if self.next_cursor is not None:
            cursors["next"] = self.next_cursor
        if self.prev_cursor is not None:
            cursors["prev"] = self.prev_cursor
        return {"hasNext": self.has_next, "count": self.count, "cursors": cursors}
