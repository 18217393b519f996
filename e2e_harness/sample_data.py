"""
Shared sample data for storefront and booking API scenarios.

Scenarios isolate themselves from each other through unique identifying
data, never through locks: every booking a scenario creates carries a
suffix from unique_suffix().
"""

import random
import secrets
import time
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Optional

from .models import Booking, BookingDates


@dataclass(frozen=True)
class StorefrontUser:
    """Storefront account used by UI scenarios."""

    username: str
    password: str


STOREFRONT_PASSWORD = "secret_sauce"

STOREFRONT_USERS: Dict[str, StorefrontUser] = {
    "standard": StorefrontUser("standard_user", STOREFRONT_PASSWORD),
    "locked": StorefrontUser("locked_out_user", STOREFRONT_PASSWORD),
    "problem": StorefrontUser("problem_user", STOREFRONT_PASSWORD),
    "performance": StorefrontUser("performance_glitch_user", STOREFRONT_PASSWORD),
    "error": StorefrontUser("error_user", STOREFRONT_PASSWORD),
    "visual": StorefrontUser("visual_user", STOREFRONT_PASSWORD),
}

SAMPLE_BOOKINGS: Dict[str, Booking] = {
    "default": Booking(
        firstname="John",
        lastname="Doe",
        totalprice=150,
        depositpaid=True,
        bookingdates=BookingDates(checkin=date(2024, 1, 1), checkout=date(2024, 1, 5)),
        additionalneeds="Breakfast",
    ),
    "extended": Booking(
        firstname="Jane",
        lastname="Smith",
        totalprice=500,
        depositpaid=False,
        bookingdates=BookingDates(checkin=date(2024, 3, 15), checkout=date(2024, 3, 30)),
        additionalneeds="Late checkout",
    ),
    "minimal": Booking(
        firstname="Bob",
        lastname="Wilson",
        totalprice=100,
        depositpaid=True,
        bookingdates=BookingDates(checkin=date(2024, 2, 10), checkout=date(2024, 2, 11)),
        additionalneeds="",
    ),
}

_FIRST_NAMES = ["Alice", "Bob", "Charlie", "Diana", "Edward"]
_LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones"]
_ADDITIONAL_NEEDS = ["Breakfast", "Late checkout", "Early checkin", "Parking", ""]


def unique_suffix() -> str:
    """Time-based suffix, with a random tail for calls in the same instant."""
    return f"{time.time_ns() // 1_000_000}{secrets.token_hex(2)}"


def sample_booking(name: str = "default", **overrides) -> Booking:
    """Copy of a sample booking with some fields replaced."""
    return SAMPLE_BOOKINGS[name].model_copy(update=overrides, deep=True)


def generate_random_booking(today: Optional[date] = None) -> Booking:
    """
    Random booking with a stay starting 1-30 days from today.

    Args:
        today: Reference date, defaults to the current date

    Returns:
        Booking with checkin strictly before checkout
    """
    today = today or date.today()
    checkin = today + timedelta(days=random.randint(1, 30))
    checkout = checkin + timedelta(days=random.randint(1, 10))

    return Booking(
        firstname=random.choice(_FIRST_NAMES),
        lastname=random.choice(_LAST_NAMES),
        totalprice=random.randint(100, 599),
        depositpaid=random.random() > 0.5,
        bookingdates=BookingDates(checkin=checkin, checkout=checkout),
        additionalneeds=random.choice(_ADDITIONAL_NEEDS),
    )


def generate_unique_email(prefix: str = "test") -> str:
    return f"{prefix}+{unique_suffix()}@example.com"
