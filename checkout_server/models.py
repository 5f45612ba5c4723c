"""Data models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DESCRIPTION = "Ingen beskrivning kunde hittas för den här produkten."


class PriceUnit(str, Enum):
    """Unit a product price refers to."""

    LITER = "l"
    KILOGRAM = "kg"
    UNIT = "st"

    @classmethod
    def parse(cls, text: Optional[str]) -> "PriceUnit":
        """Parse a unit string case-insensitively, defaulting to ``UNIT``."""
        if isinstance(text, cls):
            return text
        try:
            return cls((text or "").strip().lower())
        except ValueError:
            return cls.UNIT


class Product(BaseModel):
    """A purchasable catalog item. Immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Unique product name")
    description: str = Field(default=DEFAULT_DESCRIPTION, description="Product description")
    price: int = Field(gt=0, description="Price in kr per price unit")
    price_unit: PriceUnit = Field(default=PriceUnit.UNIT, description="Unit the price refers to")

    @field_validator("description", mode="before")
    @classmethod
    def _fallback_description(cls, value: Optional[str]) -> str:
        return value if value else DEFAULT_DESCRIPTION

    @field_validator("price_unit", mode="before")
    @classmethod
    def _parse_unit(cls, value) -> PriceUnit:
        return PriceUnit.parse(value)

    @property
    def price_label(self) -> str:
        return f"{self.price}kr / {self.price_unit.value}"


class DiscountState(BaseModel):
    """The single discount that may be active in a session."""

    has_discount: bool = False
    used_code: str = ""

    def activate(self, code: str) -> None:
        self.has_discount = True
        self.used_code = code

    def reset(self) -> None:
        self.has_discount = False
        self.used_code = ""


class ShoppingMode(str, Enum):
    SHOPPING = "shopping"
    CHECKING_OUT = "checking_out"


class ApplyResult(str, Enum):
    """Outcome of trying to apply a discount code."""

    APPLIED = "applied"
    ALREADY_HAS_DISCOUNT = "already_has_discount"
    INVALID = "invalid"
    EMPTY = "empty"


class CheckoutOutcome(str, Enum):
    """Outcome of a checkout request."""

    STARTED = "started"
    EMPTY_CART = "empty_cart"
    ALREADY_CHECKING_OUT = "already_checking_out"


class LoadIssue(BaseModel):
    """A record that was skipped while loading a source file."""

    line_number: int
    line: str
    reason: str

    def __str__(self) -> str:
        return f"line {self.line_number} ({self.line!r}): {self.reason}"


class ReceiptLine(BaseModel):
    """One cart entry on a receipt."""

    name: str
    quantity: int
    unit: PriceUnit
    line_total: int

    def render(self) -> str:
        return f"{self.name} {self.quantity} {self.unit.value}: {self.line_total} kr"


class Receipt(BaseModel):
    """Computed summary of a cart: lines, subtotal, savings and total."""

    lines: list[ReceiptLine] = Field(default_factory=list)
    subtotal: int = 0
    savings: Optional[int] = Field(None, description="Discount amount, None when no discount is active")
    total: int = 0

    def render(self) -> str:
        """Render the receipt as the text block shown to the shopper."""
        rendered = [line.render() for line in self.lines]
        if self.savings is not None:
            rendered.append(f"Du sparar: {self.savings} kr")
        rendered.append(f"Total kostnad: {self.total}kr")
        return "\n".join(rendered)
