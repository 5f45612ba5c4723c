"""Shopping cart and its file-backed session restore."""

import logging
from pathlib import Path
from typing import Iterator, Optional, Union

from .catalog import Catalog
from .errors import CartLoadCorruptError, InvalidQuantityError, NotFoundError, StorageError
from .storage import read_lines, truncate, write_lines

logger = logging.getLogger(__name__)


def _check_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantityError(f"Quantity must be a positive integer, got {quantity!r}")


class ShoppingCart:
    """Insertion-ordered mapping of product name to quantity.

    Every stored quantity is > 0; an entry whose quantity drops to zero or
    below is removed. The cart does not bound quantities from above.
    """

    def __init__(self, orders: Optional[dict[str, int]] = None) -> None:
        self._orders: dict[str, int] = {}
        for name, quantity in (orders or {}).items():
            self.add(name, quantity)

    def add(self, product_name: str, quantity: int) -> None:
        """Add ``quantity`` of a product, incrementing an existing entry."""
        _check_quantity(quantity)
        if not product_name:
            raise NotFoundError("Product name must not be empty")
        self._orders[product_name] = self._orders.get(product_name, 0) + quantity

    def remove(self, product_name: str, quantity: int) -> None:
        """Decrement an entry, deleting it when nothing is left."""
        _check_quantity(quantity)
        if product_name not in self._orders:
            raise NotFoundError(f"{product_name} is not in the cart")
        remaining = self._orders[product_name] - quantity
        if remaining <= 0:
            del self._orders[product_name]
        else:
            self._orders[product_name] = remaining

    def clear(self) -> None:
        self._orders = {}

    def merge(self, other: "ShoppingCart") -> None:
        """Add every entry of ``other`` to this cart."""
        for name, quantity in other.items():
            self.add(name, quantity)

    def quantity(self, product_name: str) -> int:
        return self._orders.get(product_name, 0)

    def items(self) -> list[tuple[str, int]]:
        return list(self._orders.items())

    def as_dict(self) -> dict[str, int]:
        return dict(self._orders)

    @property
    def is_empty(self) -> bool:
        return not self._orders

    def __contains__(self, product_name: object) -> bool:
        return product_name in self._orders

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._orders))

    def __len__(self) -> int:
        return len(self._orders)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShoppingCart):
            return NotImplemented
        return self._orders == other._orders

    def __repr__(self) -> str:
        return f"ShoppingCart({self._orders!r})"


class CartStore:
    """Persists a cart as ``name:quantity`` lines.

    The file is a single-use session restore: after a successful load it is
    truncated so the same cart is not restored twice.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    @property
    def exists(self) -> bool:
        return self.path.exists()

    def save(self, cart: ShoppingCart) -> None:
        """Overwrite the cart file with the current cart."""
        write_lines(self.path, (f"{name}:{quantity}" for name, quantity in cart.items()))
        logger.info(f"Cart saved to {self.path} ({len(cart)} entries)")

    def load(self, catalog: Catalog) -> ShoppingCart:
        """Read the persisted cart, keeping only products present in ``catalog``.

        Raises:
            CartLoadCorruptError: if any line is malformed; nothing is loaded.
            StorageError: if the file exists but cannot be read.
        """
        if not self.exists:
            logger.info(f"No saved cart at {self.path}")
            return ShoppingCart()

        parsed = self._parse(read_lines(self.path))

        cart = ShoppingCart()
        for name, quantity in parsed:
            if name in catalog:
                cart.add(name, quantity)
            else:
                logger.debug(f"Dropping saved cart entry for unknown product {name!r}")

        try:
            self.clear()
        except StorageError as e:
            logger.warning(f"Saved cart was loaded but could not be cleared: {e}")

        logger.info(f"Restored {len(cart)} cart entries from {self.path}")
        return cart

    def clear(self) -> None:
        if self.exists:
            truncate(self.path)

    @staticmethod
    def _parse(lines: list[str]) -> list[tuple[str, int]]:
        parsed: list[tuple[str, int]] = []
        seen: set[str] = set()
        for line_number, line in enumerate(lines, 1):
            fields = line.split(":")
            if len(fields) != 2:
                raise CartLoadCorruptError(line_number, line, "expected name:quantity")
            name, raw_quantity = fields
            if not name:
                raise CartLoadCorruptError(line_number, line, "missing product name")
            try:
                quantity = int(raw_quantity)
            except ValueError:
                raise CartLoadCorruptError(line_number, line, "quantity is not an integer") from None
            if quantity <= 0:
                raise CartLoadCorruptError(line_number, line, "quantity must be positive")
            if name in seen:
                raise CartLoadCorruptError(line_number, line, "duplicate product")
            seen.add(name)
            parsed.append((name, quantity))
        return parsed
