"""Tests for cart mutations and cart persistence."""

import pytest

from checkout_server.cart import CartStore, ShoppingCart
from checkout_server.catalog import Catalog
from checkout_server.errors import CartLoadCorruptError, InvalidQuantityError, NotFoundError, StorageError


class TestAdd:
    def test_add_new_entry(self):
        cart = ShoppingCart()
        cart.add("bananer", 4)
        assert cart.as_dict() == {"bananer": 4}

    def test_add_existing_entry_increments(self):
        cart = ShoppingCart({"bananer": 4})
        cart.add("bananer", 1)
        assert cart.quantity("bananer") == 5

    def test_add_is_not_bounded(self):
        cart = ShoppingCart()
        cart.add("bananer", 3)
        cart.add("bananer", 250)
        assert cart.quantity("bananer") == 253

    @pytest.mark.parametrize("quantity", [0, -2, 1.5, "3", True])
    def test_invalid_quantity_leaves_cart_untouched(self, quantity):
        cart = ShoppingCart({"bananer": 4})
        with pytest.raises(InvalidQuantityError):
            cart.add("bananer", quantity)
        assert cart.as_dict() == {"bananer": 4}

    def test_preserves_insertion_order(self):
        cart = ShoppingCart()
        for name in ["mjölk", "bananer", "bröd"]:
            cart.add(name, 1)
        cart.add("mjölk", 2)
        assert list(cart) == ["mjölk", "bananer", "bröd"]


class TestRemove:
    def test_remove_decrements(self):
        cart = ShoppingCart({"bananer": 4})
        cart.remove("bananer", 1)
        assert cart.quantity("bananer") == 3

    def test_remove_to_zero_deletes_entry(self):
        cart = ShoppingCart({"bananer": 4})
        cart.remove("bananer", 4)
        assert "bananer" not in cart

    def test_remove_more_than_present_deletes_entry(self):
        cart = ShoppingCart({"bananer": 2})
        cart.remove("bananer", 5)
        assert "bananer" not in cart
        assert cart.quantity("bananer") == 0

    def test_remove_absent_raises_not_found(self):
        cart = ShoppingCart({"bananer": 2})
        with pytest.raises(NotFoundError):
            cart.remove("mjölk", 1)
        assert cart.as_dict() == {"bananer": 2}

    def test_remove_invalid_quantity(self):
        cart = ShoppingCart({"bananer": 2})
        with pytest.raises(InvalidQuantityError):
            cart.remove("bananer", 0)
        assert cart.quantity("bananer") == 2


class TestClearAndMerge:
    def test_clear(self):
        cart = ShoppingCart({"bananer": 2, "mjölk": 1})
        cart.clear()
        assert cart.is_empty
        assert len(cart) == 0

    def test_merge_adds_quantities(self):
        cart = ShoppingCart({"bananer": 2})
        cart.merge(ShoppingCart({"bananer": 1, "bröd": 3}))
        assert cart.as_dict() == {"bananer": 3, "bröd": 3}


class TestCartStore:
    def test_save_writes_name_quantity_lines(self, cart_file):
        CartStore(cart_file).save(ShoppingCart({"bananer": 4, "mjölk": 2}))
        assert cart_file.read_text(encoding="utf-8") == "bananer:4\nmjölk:2\n"

    def test_save_overwrites(self, cart_file):
        store = CartStore(cart_file)
        store.save(ShoppingCart({"bananer": 4, "mjölk": 2}))
        store.save(ShoppingCart({"bröd": 1}))
        assert cart_file.read_text(encoding="utf-8") == "bröd:1\n"

    def test_save_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "Cart.txt"
        CartStore(path).save(ShoppingCart({"bröd": 1}))
        assert path.exists()

    def test_round_trip(self, catalog, cart_file):
        store = CartStore(cart_file)
        cart = ShoppingCart({"bröd": 1, "bananer": 4})
        store.save(cart)
        assert store.load(catalog) == cart

    def test_round_trip_drops_products_missing_from_catalog(self, cart_file):
        store = CartStore(cart_file)
        store.save(ShoppingCart({"bröd": 1, "kaviar": 2}))
        catalog, _ = Catalog.parse(["bröd:Surdeg:35:st"])
        assert store.load(catalog).as_dict() == {"bröd": 1}

    def test_load_missing_file_gives_empty_cart(self, catalog, cart_file):
        cart = CartStore(cart_file).load(catalog)
        assert cart.is_empty
        assert not cart_file.exists()

    def test_load_clears_the_file(self, catalog, cart_file):
        store = CartStore(cart_file)
        store.save(ShoppingCart({"bröd": 1}))
        store.load(catalog)
        assert cart_file.read_text(encoding="utf-8") == ""
        assert store.load(catalog).is_empty

    @pytest.mark.parametrize(
        "content",
        [
            "bananer:4\nmjölk\n",
            "bananer:4\nmjölk:två\n",
            "bananer:4\n:2\n",
            "bananer:4\n\nmjölk:1\n",
            "bananer:4\nmjölk:0\n",
            "bananer:4\nbananer:1\n",
            "bananer:4:1\n",
        ],
    )
    def test_corrupt_file_aborts_whole_load(self, catalog, cart_file, content):
        cart_file.write_text(content, encoding="utf-8")
        with pytest.raises(CartLoadCorruptError):
            CartStore(cart_file).load(catalog)
        assert cart_file.read_text(encoding="utf-8") == content

    def test_corrupt_error_reports_line(self, catalog, cart_file):
        cart_file.write_text("bananer:4\nmjölk:två\n", encoding="utf-8")
        with pytest.raises(CartLoadCorruptError) as excinfo:
            CartStore(cart_file).load(catalog)
        assert excinfo.value.line_number == 2
        assert excinfo.value.line == "mjölk:två"

    def test_invalid_utf8_aborts_load(self, catalog, cart_file):
        cart_file.write_bytes(b"br\xf6d:2\n")
        with pytest.raises(StorageError):
            CartStore(cart_file).load(catalog)
        assert cart_file.read_bytes() == b"br\xf6d:2\n"

    def test_unreadable_path_aborts_load(self, catalog, tmp_path):
        with pytest.raises(StorageError):
            CartStore(tmp_path).load(catalog)
