"""
Tests for the storefront page objects.

Pages drive a mocked Playwright page, so these tests check selectors,
session state and checkout ordering rather than rendering.
"""

from typing import Dict, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from e2e_harness.exceptions import StateTransitionError
from e2e_harness.models import CheckoutStep, PageLocation
from e2e_harness.pages import CONFIRMATION_TEXT, PageTimeouts, Storefront
from e2e_harness.pages.checkout import CheckoutPage


def make_locator() -> MagicMock:
    """Mock Locator with awaitable actions."""
    locator = MagicMock()
    locator.click = AsyncMock()
    locator.fill = AsyncMock()
    locator.wait_for = AsyncMock()
    locator.is_visible = AsyncMock(return_value=False)
    locator.text_content = AsyncMock(return_value="")
    locator.all_text_contents = AsyncMock(return_value=[])
    combined = make_leaf_locator()
    combined.first = make_leaf_locator()
    locator.or_.return_value = combined
    return locator


def make_leaf_locator() -> MagicMock:
    locator = MagicMock()
    locator.wait_for = AsyncMock()
    return locator


class FakePage:
    """Stand-in for a Playwright page handing out one mock per selector."""

    def __init__(self) -> None:
        self.locators: Dict[Tuple[str, Optional[str]], MagicMock] = {}
        self.goto = AsyncMock()

    def locator(self, selector: str, has_text: Optional[str] = None) -> MagicMock:
        return self.locators.setdefault((selector, has_text), make_locator())

    def test_id(self, test_id: str) -> MagicMock:
        return self.locator(f'[data-test="{test_id}"]')


@pytest.fixture
def page() -> FakePage:
    return FakePage()


@pytest.fixture
def storefront(page: FakePage) -> Storefront:
    return Storefront(page, PageTimeouts(action_ms=1000, navigation_ms=2000))


@pytest.mark.asyncio
async def test_open_navigates_to_root(storefront: Storefront, page: FakePage) -> None:
    await storefront.login.open()

    page.goto.assert_awaited_once_with("/", timeout=2000)
    assert storefront.location is PageLocation.LOGIN


@pytest.mark.asyncio
async def test_sign_in_success(storefront: Storefront, page: FakePage) -> None:
    """
    Test successful sign-in.

    Credentials go into the data-test inputs and the session moves to the
    inventory page.
    """
    signed_in = await storefront.login.sign_in("standard_user", "secret_sauce")

    assert signed_in is True
    page.test_id("username").fill.assert_awaited_once_with("standard_user", timeout=1000)
    page.test_id("password").fill.assert_awaited_once_with("secret_sauce", timeout=1000)
    page.test_id("login-button").click.assert_awaited_once()
    assert storefront.location is PageLocation.INVENTORY


@pytest.mark.asyncio
async def test_sign_in_rejected(storefront: Storefront, page: FakePage) -> None:
    """
    Test rejected sign-in.

    No exception is raised; the error indicator is shown and the session
    stays on the login page.
    """
    error = page.test_id("error")
    error.is_visible.return_value = True
    error.text_content.return_value = "Epic sadface: Sorry, this user has been locked out."

    signed_in = await storefront.login.sign_in("locked_out_user", "secret_sauce")

    assert signed_in is False
    assert storefront.location is PageLocation.LOGIN
    assert "locked out" in await storefront.login.error_text()


@pytest.mark.asyncio
async def test_error_text_empty_without_error(storefront: Storefront) -> None:
    assert await storefront.login.error_text() == ""


@pytest.mark.asyncio
async def test_sign_in_as_standard_user(storefront: Storefront, page: FakePage) -> None:
    await storefront.login.sign_in_as_standard_user()

    page.test_id("username").fill.assert_awaited_once_with("standard_user", timeout=1000)


@pytest.mark.asyncio
async def test_add_to_cart_once_per_product(storefront: Storefront, page: FakePage) -> None:
    """Adding the same product twice leaves one cart entry and one click."""
    await storefront.inventory.add_to_cart("Sauce Labs Backpack")
    await storefront.inventory.add_to_cart("Sauce Labs Backpack")

    page.test_id("add-to-cart-sauce-labs-backpack").click.assert_awaited_once()
    assert storefront.cart_state.count == 1


@pytest.mark.asyncio
async def test_remove_from_cart(storefront: Storefront, page: FakePage) -> None:
    await storefront.inventory.add_to_cart("Sauce Labs Bike Light")

    await storefront.inventory.remove_from_cart("Sauce Labs Bike Light")

    page.test_id("remove-sauce-labs-bike-light").click.assert_awaited_once()
    assert storefront.cart_state.count == 0


@pytest.mark.asyncio
async def test_cart_count_reads_badge(storefront: Storefront, page: FakePage) -> None:
    badge = page.test_id("shopping-cart-badge")

    assert await storefront.inventory.cart_count() == 0

    badge.is_visible.return_value = True
    badge.text_content.return_value = "2"
    assert await storefront.inventory.cart_count() == 2


@pytest.mark.asyncio
async def test_product_locator_filters_by_name(storefront: Storefront, page: FakePage) -> None:
    product = storefront.inventory.product("Sauce Labs Onesie")

    assert product is page.locator('[data-test="inventory-item"]', has_text="Sauce Labs Onesie")


@pytest.mark.asyncio
async def test_sign_out(storefront: Storefront, page: FakePage) -> None:
    await storefront.login.sign_in_as_standard_user()
    await storefront.inventory.add_to_cart("Sauce Labs Backpack")

    await storefront.inventory.sign_out()

    page.locator("#react-burger-menu-btn").click.assert_awaited_once()
    page.locator("#logout_sidebar_link").click.assert_awaited_once()
    assert storefront.location is PageLocation.LOGIN
    assert "Sauce Labs Backpack" in storefront.cart_state


@pytest.mark.asyncio
async def test_cart_item_names(storefront: Storefront, page: FakePage) -> None:
    page.test_id("inventory-item-name").all_text_contents.return_value = [
        "Sauce Labs Backpack"
    ]

    assert await storefront.cart.item_names() == ["Sauce Labs Backpack"]


@pytest.mark.asyncio
async def test_continue_shopping_keeps_cart(storefront: Storefront) -> None:
    await storefront.inventory.add_to_cart("Sauce Labs Backpack")
    await storefront.inventory.go_to_cart()

    await storefront.cart.continue_shopping()

    assert storefront.location is PageLocation.INVENTORY
    assert storefront.cart_state.count == 1


@pytest.mark.asyncio
async def test_full_checkout_flow(storefront: Storefront, page: FakePage) -> None:
    """
    Test the complete purchase flow.

    Each step advances the checkout state machine in order and ends with
    the completion banner asserted.
    """
    await storefront.login.open()
    await storefront.login.sign_in_as_standard_user()
    await storefront.inventory.add_to_cart("Sauce Labs Backpack")
    await storefront.inventory.go_to_cart()
    assert storefront.location is PageLocation.CART

    await storefront.cart.proceed_to_checkout()
    assert storefront.checkout_state.step is CheckoutStep.INFORMATION

    await storefront.checkout.submit_information("John", "Doe", "12345")
    assert storefront.location is PageLocation.CHECKOUT_OVERVIEW
    page.test_id("postalCode").fill.assert_awaited_once_with("12345", timeout=1000)

    await storefront.checkout.finish()
    assert storefront.location is PageLocation.CHECKOUT_COMPLETE

    with patch("e2e_harness.pages.checkout.expect") as mock_expect:
        mock_expect.return_value.to_be_visible = AsyncMock()
        await storefront.checkout.assert_complete()

    mock_expect.return_value.to_be_visible.assert_awaited_once_with(timeout=1000)

    await storefront.checkout.back_to_products()
    assert storefront.location is PageLocation.INVENTORY


@pytest.mark.asyncio
async def test_submit_information_with_empty_field(storefront: Storefront, page: FakePage) -> None:
    """An empty field fails the step before the form is touched."""
    await storefront.inventory.go_to_cart()
    await storefront.cart.proceed_to_checkout()

    with pytest.raises(StateTransitionError) as exc_info:
        await storefront.checkout.submit_information("John", "Doe", "")

    assert exc_info.value.details["missing"] == ["postal_code"]
    page.test_id("firstName").fill.assert_not_awaited()
    assert storefront.checkout_state.step is CheckoutStep.INFORMATION


@pytest.mark.asyncio
async def test_finish_out_of_order(storefront: Storefront, page: FakePage) -> None:
    await storefront.inventory.go_to_cart()

    with pytest.raises(StateTransitionError):
        await storefront.checkout.finish()

    page.test_id("finish").click.assert_not_awaited()


@pytest.mark.asyncio
async def test_cancel_from_overview(storefront: Storefront) -> None:
    await storefront.inventory.go_to_cart()
    await storefront.cart.proceed_to_checkout()
    await storefront.checkout.submit_information("John", "Doe", "12345")

    await storefront.checkout.cancel()

    assert storefront.checkout_state.step is CheckoutStep.CART
    assert storefront.location is PageLocation.CART


@pytest.mark.asyncio
async def test_back_to_products_requires_completion(storefront: Storefront) -> None:
    with pytest.raises(StateTransitionError, match="checkout is not complete"):
        await storefront.checkout.back_to_products()


@pytest.mark.asyncio
async def test_assert_complete_matches_exact_confirmation(page: FakePage) -> None:
    """The banner locator is narrowed to the exact confirmation text."""
    checkout = CheckoutPage(page)
    header = page.test_id("complete-header")

    with patch("e2e_harness.pages.checkout.expect") as mock_expect:
        mock_expect.return_value.to_be_visible = AsyncMock()
        await checkout.assert_complete()

    pattern = header.filter.call_args.kwargs["has_text"]
    assert pattern.match(CONFIRMATION_TEXT)
    assert pattern.match(f"  {CONFIRMATION_TEXT}\n")
    assert not pattern.match("Thank you")
    assert not pattern.match(f"{CONFIRMATION_TEXT} Come again")
    mock_expect.assert_called_once_with(header.filter.return_value)
