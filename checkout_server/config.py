"""Runtime configuration."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "CHECKOUT_"


class Settings(BaseModel):
    products_file: Path = Field(Path("Products.txt"), description="Product catalog file")
    discounts_file: Path = Field(Path("Discount.txt"), description="Discount code file")
    cart_file: Path = Field(
        default_factory=lambda: Path.home() / ".checkout_cart.txt",
        description="Saved cart, restored (and emptied) at startup",
    )
    save_on_exit: bool = Field(True, description="Save a non-empty, unsaved cart on shutdown")
    log_level: str = "INFO"

    @field_validator("products_file", "discounts_file", "cart_file")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    @classmethod
    def from_env(cls, **overrides: Optional[object]) -> "Settings":
        """Build settings from ``CHECKOUT_*`` environment variables.

        Keyword overrides that are not None win over the environment.
        """
        values: dict[str, object] = {}
        for field in cls.model_fields:
            env_value = os.environ.get(f"{ENV_PREFIX}{field.upper()}")
            if env_value is not None:
                values[field] = env_value
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
