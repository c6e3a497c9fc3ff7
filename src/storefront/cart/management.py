"""Cart management: opening and clearing an owner's cart."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront
from storefront.errors import NotFound


@storefront.command(part_of="ShoppingCart")
class OpenCart:
    """Return the owner's cart, creating an empty one on first use."""

    owner_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    owner_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(OpenCart)
    def open_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.find_by_owner(command.owner_id)
        if cart is None:
            cart = ShoppingCart.create(command.owner_id)
            repo.add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.find_by_owner(command.owner_id)
        if cart is None:
            raise NotFound("Cart", command.owner_id)

        removed = cart.clear()
        if removed:
            repo.add(cart)
        return removed
