"""Storefront API package."""

from storefront.api.errors import register_exception_handlers
from storefront.api.routes import admin_router, cart_router, order_router, product_router

__all__ = [
    "admin_router",
    "cart_router",
    "order_router",
    "product_router",
    "register_exception_handlers",
]
