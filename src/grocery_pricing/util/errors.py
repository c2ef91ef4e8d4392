from __future__ import annotations

from typing import Any, List, Optional


class RetryableError(Exception):
    """Indicates a failure that may succeed on retry."""


class NonRetryableError(Exception):
    """Indicates a failure that should not be retried."""


class InvalidRange(NonRetryableError):
    """Raised when price range bounds are malformed."""


class InvalidPercentage(NonRetryableError):
    """Raised when a percentage is outside the domain of its operation."""


class CatalogUnavailable(RetryableError):
    """Raised when the product catalog cannot be read or written."""


class BundleStoreUnavailable(RetryableError):
    """Raised when the bundle store cannot be read or written."""


class PartialApplyFailure(NonRetryableError):
    """A batch succeeded on a prefix of its ranges or bundles and then failed.

    ``completed`` holds what was already written (range indexes for the range
    engines, bundle ids for bundle markup) and ``failed`` the entry that broke.
    Completed writes are not rolled back.
    """

    def __init__(
        self,
        *,
        operation: str,
        completed: List[Any],
        failed: Any,
        cause: Optional[Exception],
        updated_count: int,
    ) -> None:
        super().__init__(
            f"{operation} failed at {failed!r} after {len(completed)} completed: {cause}"
        )
        self.operation = operation
        self.completed = completed
        self.failed = failed
        self.cause = cause
        self.updated_count = updated_count
