"""Pagination controller for a products list.

Supports two navigation modes, picked by whichever method is used:
cursor walking (next / previous / first page) and load-more, which grows
the page size and leaves the cursor alone.
"""

from catalog_search.application.products_list import ProductsListService
from catalog_search.domain.exceptions import InvalidPageSizeError
from catalog_search.domain.paging import CursorPaging
from catalog_search.infrastructure.config import settings
from catalog_search.signals import Computed, Signal, batch, computed, signal, watch


class PaginationController:
    """Drives the paging part of a products list's search request.

    Initial limit and cursor are read from the list's current request.
    Any later change of either rewrites the list's request, which makes
    the list fetch exactly once; constructing the controller fetches nothing.

    Example usage:
        pagination = PaginationController(products_list)
        if pagination.has_next_page.get():
            pagination.next_page()
    """

    def __init__(self, products_list: ProductsListService, default_limit: int | None = None) -> None:
        self.products_list = products_list

        paging = products_list.search_request.peek().paging
        self.current_limit: Signal[int] = signal(
            paging.limit if paging and paging.limit else default_limit or settings.default_page_size
        )
        self.current_cursor: Signal[str | None] = signal(paging.cursor if paging else None)

        self.has_next_page: Computed[bool] = computed(
            lambda: products_list.paging_metadata.get().has_next
        )
        self.has_prev_page: Computed[bool] = computed(
            lambda: products_list.paging_metadata.get().prev_cursor is not None
        )

        self._watcher = watch(
            lambda: (self.current_limit.get(), self.current_cursor.get()),
            self._apply_paging,
        )

    def _apply_paging(self, state: tuple[int, str | None]) -> None:
        limit, cursor = state
        request = self.products_list.search_request.peek()
        paging = CursorPaging(limit=limit, cursor=cursor) if limit > 0 else None
        self.products_list.set_search_request(request.with_paging(paging))

    def set_limit(self, limit: int) -> None:
        """Change the page size and go back to the first page.

        Raises:
            InvalidPageSizeError: If limit is negative.
        """
        if limit < 0:
            raise InvalidPageSizeError(limit, "Page size cannot be negative")
        with batch():
            self.current_limit.set(limit)
            self.current_cursor.set(None)

    def load_more(self, count: int) -> None:
        """Grow the page size by count, keeping the cursor.

        Raises:
            InvalidPageSizeError: If count is not positive.
        """
        if count <= 0:
            raise InvalidPageSizeError(count, "Load-more count must be positive")
        self.current_limit.set(self.current_limit.peek() + count)

    def next_page(self) -> None:
        """Move to the next page; does nothing without a next cursor."""
        next_cursor = self.products_list.paging_metadata.peek().next_cursor
        if next_cursor:
            self.current_cursor.set(next_cursor)

    def prev_page(self) -> None:
        """Move to the previous page; does nothing without a previous cursor."""
        prev_cursor = self.products_list.paging_metadata.peek().prev_cursor
        if prev_cursor:
            self.current_cursor.set(prev_cursor)

    def go_to_first_page(self) -> None:
        self.current_cursor.set(None)

    def dispose(self) -> None:
        self._watcher.dispose()
