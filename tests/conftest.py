import pytest

from checkout_server.cart import CartStore, ShoppingCart
from checkout_server.catalog import Catalog
from checkout_server.checkout import CheckoutSession
from checkout_server.config import Settings
from checkout_server.discounts import DiscountRegistry

PRODUCTS = [
    "bananer:Gula och mogna:20:kg",
    "mjölk:Färsk mellanmjölk:12:l",
    "bröd:Surdegsbröd:35:st",
]

DISCOUNTS = ["A1B2", "C3D4"]


@pytest.fixture
def catalog():
    catalog, issues = Catalog.parse(PRODUCTS)
    assert issues == []
    return catalog


@pytest.fixture
def registry():
    return DiscountRegistry(DISCOUNTS)


@pytest.fixture
def cart_file(tmp_path):
    return tmp_path / "Cart.txt"


@pytest.fixture
def session(catalog, registry, cart_file):
    return CheckoutSession(catalog, registry, ShoppingCart(), store=CartStore(cart_file))


@pytest.fixture
def settings(tmp_path):
    products = tmp_path / "Products.txt"
    products.write_text("\n".join(PRODUCTS) + "\n", encoding="utf-8")
    discounts = tmp_path / "Discount.txt"
    discounts.write_text("\n".join(DISCOUNTS) + "\n", encoding="utf-8")
    return Settings(
        products_file=products,
        discounts_file=discounts,
        cart_file=tmp_path / "Cart.txt",
    )
