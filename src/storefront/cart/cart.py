"""Shopping Cart aggregate (CQRS): one mutable cart per owner.

The owner is either an authenticated user id or an anonymous session token.
A cart is created lazily on the first mutation and is never deleted, only
emptied.

Stock is validated optimistically whenever a line changes, against the
product passed in by the caller. Nothing is reserved or locked: two carts can
both hold the last unit of a product, and the race is settled when one of
them is checked out.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from storefront.cart.events import (
    CartCleared,
    CartCreated,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from storefront.domain import storefront
from storefront.errors import InsufficientStock, NotFound


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@storefront.aggregate
class ShoppingCart:
    owner_id = Identifier(required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_line_per_product(self):
        product_ids = [str(item.product_id) for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner_id):
        now = datetime.now(UTC)
        cart = cls(owner_id=str(owner_id), created_at=now, updated_at=now)
        cart.raise_(
            CartCreated(
                cart_id=str(cart.id),
                owner_id=str(owner_id),
                created_at=now,
            )
        )
        return cart

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def find_item(self, item_id):
        """Return the line with ``item_id``; a line owned by another cart is simply not found."""
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise NotFound("CartItem", item_id)
        return item

    def item_for_product(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    @property
    def is_empty(self):
        return not self.items

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity):
        """Add ``quantity`` of ``product``, merging into an existing line for the same product."""
        existing = self.item_for_product(product.id)
        new_quantity = quantity + (existing.quantity if existing else 0)
        if not product.has_stock_for(new_quantity):
            raise InsufficientStock(
                product.id,
                product_name=product.name,
                requested=new_quantity,
                available=product.stock,
            )

        now = datetime.now(UTC)
        if existing:
            existing.quantity = new_quantity
            item = existing
        else:
            item = CartItem(product_id=str(product.id), quantity=quantity, added_at=now)
            self.add_items(item)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product.id),
                quantity_added=quantity,
                new_quantity=new_quantity,
            )
        )
        return item

    def update_item_quantity(self, item_id, product, new_quantity):
        """Set a line's quantity outright. ``product`` must be the line's product."""
        item = self.find_item(item_id)
        if not product.has_stock_for(new_quantity):
            raise InsufficientStock(
                product.id,
                product_name=product.name,
                requested=new_quantity,
                available=product.stock,
            )

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item.id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )
        return item

    def remove_item(self, item_id):
        item = self.find_item(item_id)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(item.product_id),
            )
        )

    def clear(self):
        """Remove every line. Clearing an empty cart changes nothing."""
        lines = list(self.items)
        if not lines:
            return 0

        for item in lines:
            self.remove_items(item)
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                items_removed=len(lines),
                cleared_at=now,
            )
        )
        return len(lines)
