"""Tests for environment-driven settings."""

from pathlib import Path

from checkout_server.config import Settings


class TestFromEnv:
    def test_defaults(self, monkeypatch):
        for name in ("PRODUCTS_FILE", "DISCOUNTS_FILE", "CART_FILE", "SAVE_ON_EXIT", "LOG_LEVEL"):
            monkeypatch.delenv(f"CHECKOUT_{name}", raising=False)
        settings = Settings.from_env()
        assert settings.products_file == Path("Products.txt")
        assert settings.discounts_file == Path("Discount.txt")
        assert settings.save_on_exit is True

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("CHECKOUT_PRODUCTS_FILE", "/data/produkter.txt")
        monkeypatch.setenv("CHECKOUT_SAVE_ON_EXIT", "false")
        settings = Settings.from_env()
        assert settings.products_file == Path("/data/produkter.txt")
        assert settings.save_on_exit is False

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("CHECKOUT_CART_FILE", "/env/cart.txt")
        monkeypatch.delenv("CHECKOUT_DISCOUNTS_FILE", raising=False)
        settings = Settings.from_env(cart_file="/cli/cart.txt", discounts_file=None)
        assert settings.cart_file == Path("/cli/cart.txt")
        assert settings.discounts_file == Path("Discount.txt")

    def test_home_is_expanded(self, monkeypatch):
        monkeypatch.setenv("CHECKOUT_CART_FILE", "~/cart.txt")
        settings = Settings.from_env(products_file="~/produkter.txt")
        assert settings.cart_file == Path.home() / "cart.txt"
        assert settings.products_file == Path.home() / "produkter.txt"
