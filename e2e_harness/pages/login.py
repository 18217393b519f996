"""Storefront sign-in page."""

from typing import Optional

from playwright.async_api import Page

from ..logging_config import get_logger
from ..models import PageLocation
from ..sample_data import STOREFRONT_USERS
from .base import BasePage, PageTimeouts, StorefrontState

logger = get_logger(__name__)


class LoginPage(BasePage):
    """
    Session entry point.

    A rejected sign-in does not raise: the page keeps its error indicator
    visible and the session stays on the login page.
    """

    def __init__(
        self,
        page: Page,
        state: Optional[StorefrontState] = None,
        timeouts: Optional[PageTimeouts] = None,
    ) -> None:
        super().__init__(page, state, timeouts)

        self.username_input = self.by_test_id("username")
        self.password_input = self.by_test_id("password")
        self.login_button = self.by_test_id("login-button")
        self.error_message = self.by_test_id("error")
        self.inventory_container = self.by_test_id("inventory-container")

    async def open(self) -> None:
        """Navigate to the storefront root."""
        await self.page.goto("/", timeout=self.timeouts.navigation_ms)
        self._move_to(PageLocation.LOGIN)

    async def sign_in(self, username: str, password: str) -> bool:
        """
        Submit credentials and wait for the storefront to settle.

        Args:
            username: Storefront username
            password: Storefront password

        Returns:
            True when the inventory page loaded, False when the error
            indicator is shown instead
        """
        await self.username_input.fill(username, timeout=self.timeouts.action_ms)
        await self.password_input.fill(password, timeout=self.timeouts.action_ms)
        await self.login_button.click(timeout=self.timeouts.action_ms)

        settled = self.inventory_container.or_(self.error_message)
        await settled.first.wait_for(state="visible", timeout=self.timeouts.navigation_ms)

        if await self.error_message.is_visible():
            logger.info(
                "Sign-in rejected",
                extra={"extra_fields": {"username": username}},
            )
            return False

        self._move_to(PageLocation.INVENTORY)
        return True

    async def sign_in_as_standard_user(self) -> bool:
        user = STOREFRONT_USERS["standard"]
        return await self.sign_in(user.username, user.password)

    async def error_text(self) -> str:
        """Text of the error indicator, empty when none is shown."""
        if not await self.error_message.is_visible():
            return ""
        return (await self.error_message.text_content()) or ""
