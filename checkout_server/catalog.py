"""Product catalog loaded from a ``name:description:price:unit`` file."""

import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from pydantic import ValidationError

from .errors import FatalConfigError, NotFoundError, StorageError
from .models import LoadIssue, Product
from .storage import read_lines

logger = logging.getLogger(__name__)


class Catalog:
    """The fixed set of products for a session, in file order."""

    def __init__(self, products: Iterable[Product] = ()) -> None:
        self._products: dict[str, Product] = {}
        for product in products:
            if product.name in self._products:
                raise ValueError(f"Duplicate product: {product.name}")
            self._products[product.name] = product

    @classmethod
    def load(cls, path: Union[str, Path]) -> tuple["Catalog", list[LoadIssue]]:
        """
        Load the catalog from a file.

        Args:
            path: Path to the products file

        Returns:
            The catalog and the records that were skipped

        Raises:
            FatalConfigError: If the file is missing, unreadable, empty or
                contains no usable product
        """
        try:
            lines = read_lines(path)
        except StorageError as e:
            raise FatalConfigError(f"Product file is missing or unreadable: {e}") from e

        if not lines:
            raise FatalConfigError(f"Product file {path} is empty")

        catalog, issues = cls.parse(lines)
        if not len(catalog):
            raise FatalConfigError(f"Product file {path} contains no valid products")

        logger.info(f"Loaded {len(catalog)} products from {path}")
        return catalog, issues

    @classmethod
    def parse(cls, lines: Iterable[str]) -> tuple["Catalog", list[LoadIssue]]:
        """Parse product records, skipping (and reporting) the bad ones."""
        catalog = cls()
        issues: list[LoadIssue] = []

        for line_number, line in enumerate(lines, 1):
            if not line:
                continue

            reason = catalog._parse_line(line)
            if reason:
                issue = LoadIssue(line_number=line_number, line=line, reason=reason)
                logger.warning(f"Skipping product record at {issue}")
                issues.append(issue)

        return catalog, issues

    def _parse_line(self, line: str) -> Optional[str]:
        """Add the product on ``line``; return why it was rejected, if it was."""
        fields = line.split(":")

        if not fields[0]:
            return "product must have a name"
        if fields[0] in self._products:
            return "duplicate product"
        if len(fields) != 4:
            return "product does not have exactly four fields"

        name, description, raw_price, unit = fields
        try:
            price = int(raw_price)
        except ValueError:
            return "price is not an integer"

        try:
            product = Product(name=name, description=description, price=price, price_unit=unit)
        except ValidationError as e:
            return "; ".join(err["msg"] for err in e.errors())

        self._products[name] = product
        return None

    def find_by_name(self, name: str) -> Optional[Product]:
        return self._products.get(name)

    def get(self, name: str) -> Product:
        """Return the named product or raise ``NotFoundError``."""
        product = self._products.get(name)
        if product is None:
            raise NotFoundError(f"Unknown product: {name}")
        return product

    def names(self) -> list[str]:
        return list(self._products)

    @property
    def products(self) -> list[Product]:
        return list(self._products.values())

    def __contains__(self, name: object) -> bool:
        return name in self._products

    def __iter__(self) -> Iterator[Product]:
        return iter(self.products)

    def __len__(self) -> int:
        return len(self._products)
