"""Storefront page objects."""

from .base import BasePage, PageTimeouts, StorefrontState
from .cart import CartPage
from .checkout import CONFIRMATION_TEXT, CheckoutPage
from .inventory import InventoryPage
from .login import LoginPage
from .products import PRODUCT_IDS, product_test_id
from .storefront import Storefront

__all__ = [
    "BasePage",
    "CONFIRMATION_TEXT",
    "CartPage",
    "CheckoutPage",
    "InventoryPage",
    "LoginPage",
    "PRODUCT_IDS",
    "PageTimeouts",
    "Storefront",
    "StorefrontState",
    "product_test_id",
]
