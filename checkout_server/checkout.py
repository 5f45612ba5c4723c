"""Receipt computation and the checkout session."""

import logging
from typing import Optional

from .cart import CartStore, ShoppingCart
from .catalog import Catalog
from .config import Settings
from .discounts import DISCOUNT_RATE_PERCENT, DiscountRegistry
from .errors import CartLoadCorruptError, CheckoutStateError, NotFoundError, StorageError
from .models import (
    ApplyResult,
    CheckoutOutcome,
    DiscountState,
    LoadIssue,
    Product,
    Receipt,
    ReceiptLine,
    ShoppingMode,
)

logger = logging.getLogger(__name__)


def compute_receipt(cart: ShoppingCart, catalog: Catalog, discount: DiscountState) -> Receipt:
    """Price every cart entry and apply the active discount, if any."""
    lines = []
    subtotal = 0
    for name, quantity in cart.items():
        product = catalog.get(name)
        line_total = product.price * quantity
        lines.append(
            ReceiptLine(name=name, quantity=quantity, unit=product.price_unit, line_total=line_total)
        )
        subtotal += line_total

    savings = None
    total = subtotal
    if discount.has_discount:
        savings = subtotal * DISCOUNT_RATE_PERCENT // 100
        total = subtotal * (100 - DISCOUNT_RATE_PERCENT) // 100

    return Receipt(lines=lines, subtotal=subtotal, savings=savings, total=total)


class CheckoutSession:
    """All state of one shopping session.

    Catalog and discount codes are loaded once; the cart, discount state and
    shopping mode change with every user action. Each method either completes
    or raises before touching any state.
    """

    def __init__(
        self,
        catalog: Catalog,
        registry: Optional[DiscountRegistry] = None,
        cart: Optional[ShoppingCart] = None,
        store: Optional[CartStore] = None,
    ) -> None:
        self.catalog = catalog
        self.registry = registry if registry is not None else DiscountRegistry()
        self.cart = cart if cart is not None else ShoppingCart()
        self.store = store
        self.discount = DiscountState()
        self.mode = ShoppingMode.SHOPPING
        self.receipt_text: Optional[str] = None
        self.load_issues: list[LoadIssue] = []
        self._saved = True

    @classmethod
    def open(cls, settings: Settings) -> "CheckoutSession":
        """
        Load catalog, discount codes and the saved cart.

        Raises:
            FatalConfigError: If the catalog cannot be loaded
            StorageError: If the discount file exists but cannot be read
        """
        catalog, catalog_issues = Catalog.load(settings.products_file)
        registry, discount_issues = DiscountRegistry.load(settings.discounts_file)

        store = CartStore(settings.cart_file)
        session = cls(catalog, registry, store=store)
        session.load_issues = catalog_issues + discount_issues

        try:
            session.cart = store.load(catalog)
        except (CartLoadCorruptError, StorageError) as e:
            logger.error(f"Could not restore saved cart, starting empty: {e}")

        return session

    @property
    def has_unsaved_changes(self) -> bool:
        return not self._saved

    @property
    def is_checking_out(self) -> bool:
        return self.mode == ShoppingMode.CHECKING_OUT

    def describe_product(self, name: str) -> Product:
        return self.catalog.get(name)

    def add_to_cart(self, name: str, quantity: int) -> None:
        if name not in self.catalog:
            raise NotFoundError(f"Unknown product: {name}")
        self.cart.add(name, quantity)
        self._saved = False

    def remove_from_cart(self, name: str, quantity: int) -> None:
        self.cart.remove(name, quantity)
        self._saved = False

    def clear_cart(self) -> None:
        self.cart.clear()
        self._saved = False

    def _require_store(self) -> CartStore:
        if self.store is None:
            raise StorageError("No cart file configured")
        return self.store

    def save_cart(self) -> None:
        self._require_store().save(self.cart)
        self._saved = True

    def load_cart(self) -> int:
        """Merge the saved cart into the current one; returns entries loaded."""
        loaded = self._require_store().load(self.catalog)
        self.cart.merge(loaded)
        if len(loaded):
            # The saved file was emptied by the load.
            self._saved = False
        return len(loaded)

    def apply_discount(self, code: str) -> ApplyResult:
        result = self.registry.try_apply(code, self.discount)
        if result == ApplyResult.APPLIED and self.is_checking_out:
            self.receipt_text = self.render_receipt().render()
        return result

    def render_receipt(self) -> Receipt:
        return compute_receipt(self.cart, self.catalog, self.discount)

    def begin_checkout(self) -> CheckoutOutcome:
        if self.is_checking_out:
            return CheckoutOutcome.ALREADY_CHECKING_OUT
        if self.cart.is_empty:
            return CheckoutOutcome.EMPTY_CART
        self.receipt_text = self.render_receipt().render()
        self.mode = ShoppingMode.CHECKING_OUT
        logger.info("Checkout started")
        return CheckoutOutcome.STARTED

    def resume_shopping(self) -> None:
        """Leave checkout without paying."""
        if not self.is_checking_out:
            raise CheckoutStateError("Not checking out")
        self.mode = ShoppingMode.SHOPPING
        self.receipt_text = None

    def complete_payment(self) -> Receipt:
        """Simulated payment: consume the discount code and empty the cart.

        Returns the receipt for what was paid.
        """
        receipt = self.render_receipt()
        if self.discount.has_discount and self.discount.used_code in self.registry:
            self.registry.consume(self.discount.used_code)
        self.cart.clear()
        self.mode = ShoppingMode.SHOPPING
        self.receipt_text = None
        self.discount.reset()
        logger.info(f"Payment completed, total {receipt.total}kr")
        return receipt

    def close(self, save_on_exit: bool = True) -> None:
        """Save a non-empty cart with unsaved changes before shutting down."""
        if save_on_exit and self.has_unsaved_changes and not self.cart.is_empty and self.store is not None:
            self.save_cart()
