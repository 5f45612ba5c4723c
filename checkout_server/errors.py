"""Error taxonomy for the checkout core.

Per-record problems found while bulk-loading the catalog or the discount file
are not raised: they come back as ``LoadIssue`` entries so the load can go on.
Everything here aborts the operation that raised it.
"""


class CheckoutError(Exception):
    """Base class for checkout errors."""


class FatalConfigError(CheckoutError):
    """The product catalog is missing, unreadable or has nothing usable in it."""


class CartLoadCorruptError(CheckoutError):
    """A persisted cart record is malformed; the whole cart load is rejected."""

    def __init__(self, line_number: int, line: str, reason: str) -> None:
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"Corrupt cart file at line {line_number} ({line!r}): {reason}")


class NotFoundError(CheckoutError):
    """A product or cart entry does not exist."""


class StorageError(CheckoutError):
    """Reading or writing a persistence file failed."""


class CheckoutStateError(CheckoutError):
    """The operation is not allowed in the current shopping mode."""


class InvalidQuantityError(CheckoutError, ValueError):
    """Quantities must be positive integers."""
