"""Application tests for cart commands and the cart summary."""

from decimal import Decimal

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartItem
from storefront.cart.management import ClearCart, OpenCart
from storefront.cart.summary import cart_summary_for
from storefront.catalogue.product import Product
from storefront.errors import InsufficientStock, NotFound


def _add(owner_id, product_id, quantity=1):
    return current_domain.process(
        AddToCart(owner_id=owner_id, product_id=product_id, quantity=quantity),
        asynchronous=False,
    )


def _cart(owner_id):
    return current_domain.repository_for(ShoppingCart).find_by_owner(owner_id)


class TestOpenCart:
    def test_open_creates_empty_cart(self):
        cart_id = current_domain.process(OpenCart(owner_id="user-001"), asynchronous=False)
        cart = current_domain.repository_for(ShoppingCart).get(cart_id)
        assert cart.owner_id == "user-001"
        assert cart.is_empty

    def test_open_is_idempotent(self):
        first = current_domain.process(OpenCart(owner_id="user-001"), asynchronous=False)
        second = current_domain.process(OpenCart(owner_id="user-001"), asynchronous=False)
        assert first == second


class TestAddToCart:
    def test_add_creates_cart_lazily(self, make_product):
        product_id = make_product(stock=5)
        assert _cart("user-001") is None

        item_id = _add("user-001", product_id, 2)

        cart = _cart("user-001")
        assert cart.find_item(item_id).quantity == 2

    def test_add_twice_merges_lines(self, make_product):
        product_id = make_product(stock=5)
        _add("user-001", product_id, 2)
        _add("user-001", product_id, 1)

        cart = _cart("user-001")
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 3

    def test_unknown_product_is_not_found(self):
        with pytest.raises(NotFound):
            _add("user-001", "missing-product")

    def test_quantity_above_stock_fails(self, make_product):
        product_id = make_product(stock=2)
        with pytest.raises(InsufficientStock):
            _add("user-001", product_id, 3)

    def test_zero_quantity_is_invalid(self, make_product):
        product_id = make_product()
        with pytest.raises(ValidationError):
            _add("user-001", product_id, 0)

    def test_add_never_changes_stock(self, make_product):
        product_id = make_product(stock=5)
        _add("user-001", product_id, 5)
        assert current_domain.repository_for(Product).get(product_id).stock == 5

    def test_two_carts_may_hold_the_last_unit(self, make_product):
        product_id = make_product(stock=1)
        _add("user-001", product_id, 1)
        _add("user-002", product_id, 1)
        assert _cart("user-001").items[0].quantity == 1
        assert _cart("user-002").items[0].quantity == 1


class TestUpdateCartItem:
    def test_update_quantity(self, make_product):
        product_id = make_product(stock=10)
        item_id = _add("user-001", product_id, 1)

        current_domain.process(
            UpdateCartItem(owner_id="user-001", item_id=item_id, quantity=4),
            asynchronous=False,
        )
        assert _cart("user-001").find_item(item_id).quantity == 4

    def test_update_above_stock_fails(self, make_product):
        product_id = make_product(stock=3)
        item_id = _add("user-001", product_id, 1)
        with pytest.raises(InsufficientStock):
            current_domain.process(
                UpdateCartItem(owner_id="user-001", item_id=item_id, quantity=4),
                asynchronous=False,
            )
        assert _cart("user-001").find_item(item_id).quantity == 1

    def test_cannot_update_another_owners_item(self, make_product):
        product_id = make_product(stock=10)
        item_id = _add("user-001", product_id, 1)
        _add("user-002", product_id, 1)

        with pytest.raises(NotFound):
            current_domain.process(
                UpdateCartItem(owner_id="user-002", item_id=item_id, quantity=2),
                asynchronous=False,
            )
        assert _cart("user-001").find_item(item_id).quantity == 1

    def test_owner_without_cart_is_not_found(self):
        with pytest.raises(NotFound):
            current_domain.process(
                UpdateCartItem(owner_id="user-001", item_id="item-001", quantity=2),
                asynchronous=False,
            )


class TestRemoveFromCart:
    def test_remove(self, make_product):
        item_id = _add("user-001", make_product())
        current_domain.process(RemoveFromCart(owner_id="user-001", item_id=item_id), asynchronous=False)
        assert _cart("user-001").is_empty

    def test_cannot_remove_another_owners_item(self, make_product):
        item_id = _add("user-001", make_product())
        _add("user-002", make_product(name="Other"))
        with pytest.raises(NotFound):
            current_domain.process(RemoveFromCart(owner_id="user-002", item_id=item_id), asynchronous=False)
        assert len(_cart("user-001").items) == 1


class TestClearCart:
    def test_clear(self, make_product):
        _add("user-001", make_product(name="A"))
        _add("user-001", make_product(name="B"))
        removed = current_domain.process(ClearCart(owner_id="user-001"), asynchronous=False)
        assert removed == 2
        assert _cart("user-001").is_empty

    def test_clear_empty_cart_is_noop(self):
        current_domain.process(OpenCart(owner_id="user-001"), asynchronous=False)
        assert current_domain.process(ClearCart(owner_id="user-001"), asynchronous=False) == 0

    def test_clear_without_cart_is_not_found(self):
        with pytest.raises(NotFound):
            current_domain.process(ClearCart(owner_id="nobody"), asynchronous=False)


class TestCartSummary:
    def test_summary_uses_live_prices(self, make_product):
        mug = make_product(name="Mug", price=19.99, stock=10)
        lamp = make_product(name="Lamp", price=5.0, stock=10)
        _add("user-001", mug, 2)
        _add("user-001", lamp, 1)

        summary = cart_summary_for("user-001")
        assert summary.item_count == 2
        assert summary.total_quantity == 3
        assert summary.subtotal == Decimal("44.98")

    def test_summary_reflects_price_changes(self, make_product):
        from storefront.catalogue.management import ChangeProductPrice

        mug = make_product(name="Mug", price=10.0, stock=10)
        _add("user-001", mug, 2)
        current_domain.process(ChangeProductPrice(product_id=mug, price=12.5), asynchronous=False)

        assert cart_summary_for("user-001").subtotal == Decimal("25.00")

    def test_summary_without_cart_is_empty(self):
        summary = cart_summary_for("user-001")
        assert summary.cart_id is None
        assert summary.item_count == 0
        assert summary.subtotal == Decimal("0.00")

    def test_line_for_a_missing_product_is_reported_unavailable(self, make_product):
        mug = make_product(name="Mug", price=10.0, stock=10)
        _add("user-001", mug, 1)

        # A product the catalogue no longer holds
        cart = _cart("user-001")
        cart.add_item(Product.register(name="Discontinued", price=3.0, stock=5), 2)
        current_domain.repository_for(ShoppingCart).add(cart)

        summary = cart_summary_for("user-001")
        assert [line.product_id for line in summary.lines] == [mug]
        assert len(summary.unavailable) == 1
        assert summary.unavailable[0] != mug
        assert summary.total_quantity == 1
        assert summary.subtotal == Decimal("10.00")
