from deliveryapp.cart.engine import CART_STORAGE_KEY, CartEngine
from deliveryapp.cart.line_item import CartLineItem, SelectedAddOn, fingerprint, line_total
from deliveryapp.cart.storage import FileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    "CART_STORAGE_KEY",
    "CartEngine",
    "CartLineItem",
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "SelectedAddOn",
    "fingerprint",
    "line_total",
]
