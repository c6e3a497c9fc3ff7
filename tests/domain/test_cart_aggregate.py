"""Tests for the ShoppingCart aggregate."""

import pytest
from protean.exceptions import ValidationError
from storefront.cart.cart import ShoppingCart
from storefront.cart.events import (
    CartCleared,
    CartCreated,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from storefront.catalogue.product import Product
from storefront.errors import InsufficientStock, NotFound


def _make_cart(owner_id="user-001"):
    return ShoppingCart.create(owner_id)


def _make_product(name="Mug", stock=5, price=8.0):
    return Product.register(name=name, price=price, stock=stock)


class TestCreateCart:
    def test_create_cart(self):
        cart = _make_cart()
        assert cart.owner_id == "user-001"
        assert cart.is_empty

    def test_create_raises_event(self):
        cart = _make_cart()
        assert isinstance(cart._events[0], CartCreated)
        assert cart._events[0].owner_id == "user-001"


class TestAddItem:
    def test_add_item(self):
        cart = _make_cart()
        product = _make_product()
        item = cart.add_item(product, 2)
        assert len(cart.items) == 1
        assert item.quantity == 2
        assert item.product_id == str(product.id)

    def test_add_same_product_merges_by_increment(self):
        cart = _make_cart()
        product = _make_product(stock=5)
        cart.add_item(product, 2)
        cart.add_item(product, 3)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_merged_quantity_is_checked_against_stock(self):
        cart = _make_cart()
        product = _make_product(stock=4)
        cart.add_item(product, 3)
        with pytest.raises(InsufficientStock):
            cart.add_item(product, 2)
        assert cart.items[0].quantity == 3

    def test_quantity_above_stock_fails(self):
        cart = _make_cart()
        product = _make_product(stock=1)
        with pytest.raises(InsufficientStock):
            cart.add_item(product, 2)
        assert cart.is_empty

    def test_add_item_raises_event(self):
        cart = _make_cart()
        product = _make_product()
        cart.add_item(product, 1)
        cart.add_item(product, 2)
        added = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert [e.new_quantity for e in added] == [1, 3]
        assert added[-1].quantity_added == 2

    def test_add_item_does_not_touch_stock(self):
        cart = _make_cart()
        product = _make_product(stock=5)
        cart.add_item(product, 5)
        assert product.stock == 5


class TestUpdateItemQuantity:
    def test_update_quantity(self):
        cart = _make_cart()
        product = _make_product(stock=10)
        item = cart.add_item(product, 1)
        cart._events.clear()
        cart.update_item_quantity(item.id, product, 7)
        assert cart.items[0].quantity == 7
        event = cart._events[0]
        assert isinstance(event, CartItemQuantityUpdated)
        assert event.previous_quantity == 1
        assert event.new_quantity == 7

    def test_update_above_stock_fails(self):
        cart = _make_cart()
        product = _make_product(stock=2)
        item = cart.add_item(product, 1)
        with pytest.raises(InsufficientStock):
            cart.update_item_quantity(item.id, product, 3)

    def test_update_zero_quantity_fails(self):
        cart = _make_cart()
        product = _make_product(stock=2)
        item = cart.add_item(product, 1)
        with pytest.raises(ValidationError):
            cart.update_item_quantity(item.id, product, 0)

    def test_update_unknown_item_fails(self):
        cart = _make_cart()
        with pytest.raises(NotFound):
            cart.update_item_quantity("missing", _make_product(), 1)


class TestRemoveItem:
    def test_remove_item(self):
        cart = _make_cart()
        item = cart.add_item(_make_product(), 1)
        cart.remove_item(item.id)
        assert cart.is_empty
        assert isinstance(cart._events[-1], CartItemRemoved)

    def test_remove_unknown_item_fails(self):
        cart = _make_cart()
        with pytest.raises(NotFound):
            cart.remove_item("missing")


class TestClearCart:
    def test_clear_removes_all_lines(self):
        cart = _make_cart()
        cart.add_item(_make_product(name="A"), 1)
        cart.add_item(_make_product(name="B"), 1)
        assert cart.clear() == 2
        assert cart.is_empty
        assert isinstance(cart._events[-1], CartCleared)

    def test_clear_empty_cart_is_noop(self):
        cart = _make_cart()
        cart._events.clear()
        assert cart.clear() == 0
        assert cart._events == []
