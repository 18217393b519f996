"""Facade bundling the storefront page objects of one scenario."""

from typing import Optional

from playwright.async_api import Page

from ..models import CartState, CheckoutState, PageLocation
from .base import PageTimeouts, StorefrontState
from .cart import CartPage
from .checkout import CheckoutPage
from .inventory import InventoryPage
from .login import LoginPage


class Storefront:
    """
    Page objects sharing one page and one session state.

    Built fresh for every scenario and discarded at teardown.
    """

    def __init__(self, page: Page, timeouts: Optional[PageTimeouts] = None) -> None:
        self.page = page
        self.state = StorefrontState()
        self.login = LoginPage(page, self.state, timeouts)
        self.inventory = InventoryPage(page, self.state, timeouts)
        self.cart = CartPage(page, self.state, timeouts)
        self.checkout = CheckoutPage(page, self.state, timeouts)

    @property
    def location(self) -> PageLocation:
        return self.state.location

    @property
    def cart_state(self) -> CartState:
        return self.state.cart

    @property
    def checkout_state(self) -> CheckoutState:
        return self.state.checkout
