"""
Shared plumbing for storefront page objects.

Every page object of one scenario wraps the same Playwright page and the
same StorefrontState, so cart contents and checkout progress follow the
scenario across page transitions.
"""

from dataclasses import dataclass, field
from typing import Optional

from playwright.async_api import Locator, Page

from ..logging_config import get_logger
from ..models import CartState, CheckoutState, PageLocation

logger = get_logger(__name__)


@dataclass(frozen=True)
class PageTimeouts:
    """Max waits for page operations, in milliseconds."""

    action_ms: int = 10_000
    navigation_ms: int = 30_000


@dataclass
class StorefrontState:
    """Session-side model of one scenario's storefront session."""

    location: PageLocation = PageLocation.LOGIN
    cart: CartState = field(default_factory=CartState)
    checkout: CheckoutState = field(default_factory=CheckoutState)


class BasePage:
    """
    Base class for page objects.

    Attributes:
        page: Playwright page the object drives
        state: Session state shared with sibling page objects
        timeouts: Max waits applied to interactions and navigations
    """

    def __init__(
        self,
        page: Page,
        state: Optional[StorefrontState] = None,
        timeouts: Optional[PageTimeouts] = None,
    ) -> None:
        self.page = page
        self.state = state or StorefrontState()
        self.timeouts = timeouts or PageTimeouts()

    def by_test_id(self, test_id: str) -> Locator:
        """Locate an element by its data-test attribute."""
        return self.page.locator(f'[data-test="{test_id}"]')

    def _move_to(self, location: PageLocation) -> None:
        if location is not self.state.location:
            logger.debug(
                "Storefront page transition",
                extra={
                    "extra_fields": {
                        "from": self.state.location.value,
                        "to": location.value,
                    }
                },
            )
        self.state.location = location
