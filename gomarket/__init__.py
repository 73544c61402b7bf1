"""GoMarketplace client-side cart."""

from gomarket.core.cart_manager import CartManager, cart_provider, use_cart
from gomarket.domain.cart import CartItem, ProductDescriptor

__version__ = "1.0.0"

__all__ = [
    "CartItem",
    "CartManager",
    "ProductDescriptor",
    "cart_provider",
    "use_cart",
]
