"""Domain package."""

from .cart import CartItem, ProductDescriptor, dump_cart, load_cart

__all__ = [
    "CartItem",
    "ProductDescriptor",
    "dump_cart",
    "load_cart",
]
