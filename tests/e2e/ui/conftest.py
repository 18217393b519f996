"""
Storefront scenario configuration.

Every scenario gets its own browser context through the ``storefront``
fixture of the harness plugin; nothing here is shared between tests.
"""

import re

import pytest_asyncio
from playwright.async_api import expect

from e2e_harness.pages import Storefront

INVENTORY_URL = re.compile(r".*inventory\.html")


@pytest_asyncio.fixture
async def signed_in_storefront(storefront: Storefront) -> Storefront:
    """Storefront signed in as the standard user, showing the inventory."""
    await storefront.login.open()
    assert await storefront.login.sign_in_as_standard_user()
    await expect(storefront.page).to_have_url(INVENTORY_URL)
    return storefront
