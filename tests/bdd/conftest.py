"""Shared BDD fixtures and step definitions for the storefront."""

import json

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart
from storefront.catalogue.management import RegisterProduct
from storefront.catalogue.product import Product
from storefront.order.order import Order
from storefront.order.placement import PlaceOrder


@pytest.fixture()
def products():
    """Product ids registered in the scenario, by name."""
    return {}


@pytest.fixture()
def outcome():
    """Result of the last When step: either a value or the exception raised."""
    return {}


@pytest.fixture()
def order_ref():
    return {}


@pytest.fixture()
def checkout(shipping_address):
    """Place an order from the owner's cart and return its id."""

    def _checkout(owner_id):
        return current_domain.process(
            PlaceOrder(owner_id=owner_id, shipping_address=json.dumps(shipping_address)),
            asynchronous=False,
        )

    return _checkout


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(products, name, price, stock):
    products[name] = current_domain.process(
        RegisterProduct(name=name, price=price, stock=stock),
        asynchronous=False,
    )


@given(parsers.re(r'"(?P<owner>[^"]+)" has (?P<quantity>\d+) "(?P<name>[^"]+)" in their cart'))
def _(products, owner, quantity, name):
    current_domain.process(
        AddToCart(owner_id=owner, product_id=products[name], quantity=int(quantity)),
        asynchronous=False,
    )


@given(parsers.cfparse('"{owner}" has placed an order'))
def _(order_ref, checkout, owner):
    order_ref["id"] = checkout(owner)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(products, name, stock):
    assert current_domain.repository_for(Product).get(products[name]).stock == stock


@then(parsers.cfparse('the cart of "{owner}" is empty'))
def _(owner):
    assert current_domain.repository_for(ShoppingCart).find_by_owner(owner).is_empty


@then(parsers.cfparse('the cart of "{owner}" holds {quantity:d} "{name}"'))
def _(products, owner, quantity, name):
    cart = current_domain.repository_for(ShoppingCart).find_by_owner(owner)
    assert cart.item_for_product(products[name]).quantity == quantity


@then(parsers.cfparse('the request fails with "{error}"'))
def _(outcome, error):
    assert "error" in outcome, "expected the request to fail"
    assert outcome["error"].__class__.__name__ == error


@then(parsers.cfparse('the order is "{status}"'))
def _(order_ref, status):
    assert current_domain.repository_for(Order).get(order_ref["id"]).status == status


@then(parsers.cfparse("the order total is {total:f}"))
def _(order_ref, total):
    assert current_domain.repository_for(Order).get(order_ref["id"]).total == pytest.approx(total)
