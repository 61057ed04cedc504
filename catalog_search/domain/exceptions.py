"""Domain exceptions.

Errors raised when a catalog view is asked to do something its
invariants forbid. Backend failures are not domain errors; they are
raised by the stores client as StoresClientError.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Paging Errors
# ============================================================================


class PagingError(DomainError):
    """Base class for paging-related errors."""

    pass


class InvalidPageSizeError(PagingError):
    """Raised when a page size or load-more delta is out of range."""

    def __init__(self, value: int, reason: str) -> None:
        """Initialize invalid page size error.

        Args:
            value: The rejected value.
            reason: Explanation of why the value is invalid.
        """
        super().__init__(
            f"Invalid page size {value}: {reason}",
            details={"value": value, "reason": reason},
        )


# ============================================================================
# Sort Errors
# ============================================================================


class UnknownSortError(DomainError):
    """Raised when a sort name cannot be mapped to a SortType."""

    def __init__(self, value: str) -> None:
        """Initialize unknown sort error.

        Args:
            value: The unrecognised sort name.
        """
        super().__init__(
            f"Unknown sort '{value}'",
            details={"value": value},
        )
