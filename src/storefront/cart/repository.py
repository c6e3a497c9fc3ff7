"""Repository for the ShoppingCart aggregate."""

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.repository(part_of=ShoppingCart)
class CartRepository:
    def find_by_owner(self, owner_id) -> ShoppingCart | None:
        """The owner's cart, or None if they have never mutated one."""
        carts = self._dao.query.filter(owner_id=str(owner_id)).all().items
        return carts[0] if carts else None

    def get_or_create(self, owner_id) -> ShoppingCart:
        """The owner's cart, or a new unsaved empty one."""
        return self.find_by_owner(owner_id) or ShoppingCart.create(owner_id)
