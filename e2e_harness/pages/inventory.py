"""Storefront inventory (product listing) page."""

from typing import Optional

from playwright.async_api import Locator, Page

from ..logging_config import get_logger
from ..models import PageLocation
from .base import BasePage, PageTimeouts, StorefrontState
from .products import product_test_id

logger = get_logger(__name__)


class InventoryPage(BasePage):
    """Product listing with add/remove controls and the cart badge."""

    def __init__(
        self,
        page: Page,
        state: Optional[StorefrontState] = None,
        timeouts: Optional[PageTimeouts] = None,
    ) -> None:
        super().__init__(page, state, timeouts)

        self.page_title = self.by_test_id("title")
        self.inventory_container = self.by_test_id("inventory-container")
        self.cart_badge = self.by_test_id("shopping-cart-badge")
        self.cart_link = self.by_test_id("shopping-cart-link")
        self.menu_button = page.locator("#react-burger-menu-btn")
        self.logout_link = page.locator("#logout_sidebar_link")

    def product(self, product_name: str) -> Locator:
        """Locate the listing card of a product by its display name."""
        return self.page.locator('[data-test="inventory-item"]', has_text=product_name)

    def add_button(self, product_name: str) -> Locator:
        return self.by_test_id(f"add-to-cart-{product_test_id(product_name)}")

    def remove_button(self, product_name: str) -> Locator:
        return self.by_test_id(f"remove-{product_test_id(product_name)}")

    async def add_to_cart(self, product_name: str) -> None:
        """Add a product; a product already in the cart is left as is."""
        if product_name in self.state.cart:
            logger.debug(
                "Product already in cart",
                extra={"extra_fields": {"product": product_name}},
            )
            return

        await self.add_button(product_name).click(timeout=self.timeouts.action_ms)
        self.state.cart.add(product_name)

    async def remove_from_cart(self, product_name: str) -> None:
        await self.remove_button(product_name).click(timeout=self.timeouts.action_ms)
        self.state.cart.remove(product_name)

    async def cart_count(self) -> int:
        """
        Number shown on the cart badge.

        The badge is absent while the cart is empty, so absence reads as 0.
        """
        if not await self.cart_badge.is_visible():
            return 0
        text = (await self.cart_badge.text_content()) or ""
        return int(text.strip() or 0)

    async def go_to_cart(self) -> None:
        await self.cart_link.click(timeout=self.timeouts.action_ms)
        self.state.checkout.restart()
        self._move_to(PageLocation.CART)

    async def sign_out(self) -> None:
        await self.menu_button.click(timeout=self.timeouts.action_ms)
        await self.logout_link.click(timeout=self.timeouts.action_ms)
        self._move_to(PageLocation.LOGIN)
