from .cart import (
    AddToCartResult,
    Cart,
    CartItem,
    CartLine,
    CartRef,
    CartView,
    NumericCartRef,
    OpaqueCartRef,
    parse_cart_ref,
)
from .client import Client, ClientSession
from .product import Product, ProductVariant, VariantStock

__all__ = [
    "AddToCartResult", "Cart", "CartItem", "CartLine", "CartRef", "CartView",
    "NumericCartRef", "OpaqueCartRef", "parse_cart_ref",
    "Client", "ClientSession",
    "Product", "ProductVariant", "VariantStock",
]
