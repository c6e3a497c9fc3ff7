"""Catalogue maintenance: registering products, repricing and restocking."""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product, fetch_product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class RegisterProduct:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)


@storefront.command(part_of="Product")
class ChangeProductPrice:
    product_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)


@storefront.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        product = Product.register(
            name=command.name,
            price=command.price,
            stock=command.stock or 0,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(ChangeProductPrice)
    def change_product_price(self, command):
        product = fetch_product(command.product_id)
        product.change_price(command.price)
        current_domain.repository_for(Product).add(product)

    @handle(RestockProduct)
    def restock_product(self, command):
        product = fetch_product(command.product_id)
        product.adjust_stock(command.quantity, reason="restock")
        current_domain.repository_for(Product).add(product)
