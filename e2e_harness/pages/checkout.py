"""
Storefront checkout flow: information form, overview, completion.

Each operation checks the checkout state machine before touching the page,
so an out-of-order step fails with StateTransitionError instead of a
selector timeout.
"""

import re
from typing import Optional

from playwright.async_api import Page, expect

from ..exceptions import StateTransitionError
from ..logging_config import get_logger
from ..models import CheckoutStep, PageLocation
from .base import BasePage, PageTimeouts, StorefrontState

logger = get_logger(__name__)

CONFIRMATION_TEXT = "Thank you for your order!"


class CheckoutPage(BasePage):
    """Drives the Information -> Overview -> Complete part of checkout."""

    def __init__(
        self,
        page: Page,
        state: Optional[StorefrontState] = None,
        timeouts: Optional[PageTimeouts] = None,
    ) -> None:
        super().__init__(page, state, timeouts)

        # Information
        self.first_name_input = self.by_test_id("firstName")
        self.last_name_input = self.by_test_id("lastName")
        self.postal_code_input = self.by_test_id("postalCode")
        self.continue_button = self.by_test_id("continue")

        # Overview
        self.finish_button = self.by_test_id("finish")
        self.cancel_button = self.by_test_id("cancel")

        # Complete
        self.complete_header = self.by_test_id("complete-header")
        self.complete_text = self.by_test_id("complete-text")
        self.back_home_button = self.by_test_id("back-to-products")

    async def submit_information(
        self, first_name: str, last_name: str, postal_code: str
    ) -> None:
        """
        Fill the shipping form and continue (Information -> Overview).

        Raises:
            StateTransitionError: If a field is empty or the flow is not
                at the Information step
        """
        checkout = self.state.checkout
        checkout.require_information(first_name, last_name, postal_code)

        action_ms = self.timeouts.action_ms
        await self.first_name_input.fill(first_name, timeout=action_ms)
        await self.last_name_input.fill(last_name, timeout=action_ms)
        await self.postal_code_input.fill(postal_code, timeout=action_ms)
        await self.continue_button.click(timeout=action_ms)

        checkout.advance(CheckoutStep.OVERVIEW)
        self._move_to(PageLocation.CHECKOUT_OVERVIEW)

    async def finish(self) -> None:
        """Overview -> Complete."""
        self.state.checkout.require(CheckoutStep.COMPLETE)
        await self.finish_button.click(timeout=self.timeouts.action_ms)
        self.state.checkout.advance(CheckoutStep.COMPLETE)
        self._move_to(PageLocation.CHECKOUT_COMPLETE)
        logger.info(
            "Checkout finished",
            extra={"extra_fields": {"items": sorted(self.state.cart.items)}},
        )

    async def cancel(self) -> None:
        """Overview -> Cart."""
        self.state.checkout.require(CheckoutStep.CART)
        await self.cancel_button.click(timeout=self.timeouts.action_ms)
        self.state.checkout.advance(CheckoutStep.CART)
        self._move_to(PageLocation.CART)

    async def back_to_products(self) -> None:
        """Leave the completion page for the inventory."""
        checkout = self.state.checkout
        if not checkout.is_complete:
            raise StateTransitionError(
                checkout.step.value,
                PageLocation.INVENTORY.value,
                "checkout is not complete",
            )
        await self.back_home_button.click(timeout=self.timeouts.action_ms)
        self._move_to(PageLocation.INVENTORY)

    async def assert_complete(self) -> None:
        """
        Assert the completion banner is shown with the confirmation text.

        Visibility and exact text are checked on one locator in a single
        auto-waiting assertion, so a visible banner with stale text fails.
        """
        banner = self.complete_header.filter(
            has_text=re.compile(rf"^\s*{re.escape(CONFIRMATION_TEXT)}\s*$")
        )
        await expect(banner).to_be_visible(timeout=self.timeouts.action_ms)
