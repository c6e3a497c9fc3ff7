"""Cart line management: commands and handler.

Every command is addressed by owner, never by cart id alone, so a caller can
only ever touch lines in their own cart.
"""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import fetch_product
from storefront.domain import storefront
from storefront.errors import NotFound


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    owner_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class UpdateCartItem:
    owner_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    owner_id = Identifier(required=True)
    item_id = Identifier(required=True)


def _owned_cart(repo, owner_id):
    cart = repo.find_by_owner(owner_id)
    if cart is None:
        raise NotFound("Cart", owner_id)
    return cart


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = fetch_product(command.product_id)

        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_or_create(command.owner_id)
        item = cart.add_item(product, command.quantity)
        repo.add(cart)
        return str(item.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _owned_cart(repo, command.owner_id)
        item = cart.find_item(command.item_id)

        product = fetch_product(item.product_id)
        cart.update_item_quantity(command.item_id, product, command.quantity)
        repo.add(cart)
        return str(item.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _owned_cart(repo, command.owner_id)
        cart.remove_item(command.item_id)
        repo.add(cart)
