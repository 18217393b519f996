"""Product display name to storefront element identifier resolution."""

import re
from typing import Dict

# Catalogue of the storefront's products and their element identifiers
PRODUCT_IDS: Dict[str, str] = {
    "Sauce Labs Backpack": "sauce-labs-backpack",
    "Sauce Labs Bike Light": "sauce-labs-bike-light",
    "Sauce Labs Bolt T-Shirt": "sauce-labs-bolt-t-shirt",
    "Sauce Labs Fleece Jacket": "sauce-labs-fleece-jacket",
    "Sauce Labs Onesie": "sauce-labs-onesie",
    "Test.allTheThings() T-Shirt (Red)": "test.allthethings()-t-shirt-(red)",
}

_WHITESPACE_RUN = re.compile(r"\s+")


def product_test_id(product_name: str) -> str:
    """
    Resolve a product display name to its element identifier.

    Known names come from PRODUCT_IDS; any other name is lowercased with each
    whitespace run replaced by a hyphen. Every page object that targets a
    product control goes through this function.
    """
    known = PRODUCT_IDS.get(product_name)
    if known:
        return known
    return _WHITESPACE_RUN.sub("-", product_name.lower())
