"""Storefront cart page."""

from typing import List, Optional

from playwright.async_api import Page

from ..models import CheckoutStep, PageLocation
from .base import BasePage, PageTimeouts, StorefrontState
from .products import product_test_id


class CartPage(BasePage):
    """Cart contents and the entry point of the checkout flow."""

    def __init__(
        self,
        page: Page,
        state: Optional[StorefrontState] = None,
        timeouts: Optional[PageTimeouts] = None,
    ) -> None:
        super().__init__(page, state, timeouts)

        self.cart_items = self.by_test_id("inventory-item")
        self.item_name_labels = self.by_test_id("inventory-item-name")
        self.checkout_button = self.by_test_id("checkout")
        self.continue_shopping_button = self.by_test_id("continue-shopping")

    async def item_names(self) -> List[str]:
        """Names of the products in the cart, in display order."""
        return await self.item_name_labels.all_text_contents()

    async def remove_item(self, product_name: str) -> None:
        remove_button = self.by_test_id(f"remove-{product_test_id(product_name)}")
        await remove_button.click(timeout=self.timeouts.action_ms)
        self.state.cart.remove(product_name)

    async def proceed_to_checkout(self) -> None:
        """Cart -> Information."""
        self.state.checkout.require(CheckoutStep.INFORMATION)
        await self.checkout_button.click(timeout=self.timeouts.action_ms)
        self.state.checkout.advance(CheckoutStep.INFORMATION)
        self._move_to(PageLocation.CHECKOUT_INFORMATION)

    async def continue_shopping(self) -> None:
        """Return to the inventory; the cart is kept."""
        await self.continue_shopping_button.click(timeout=self.timeouts.action_ms)
        self._move_to(PageLocation.INVENTORY)
