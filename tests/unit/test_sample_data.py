"""Tests for the shared sample data helpers."""

from datetime import date

from e2e_harness.sample_data import (
    SAMPLE_BOOKINGS,
    STOREFRONT_USERS,
    generate_random_booking,
    generate_unique_email,
    sample_booking,
    unique_suffix,
)


def test_storefront_users_share_password() -> None:
    assert STOREFRONT_USERS["standard"].username == "standard_user"
    assert STOREFRONT_USERS["locked"].username == "locked_out_user"
    assert {user.password for user in STOREFRONT_USERS.values()} == {"secret_sauce"}


def test_sample_booking_copies() -> None:
    """Overrides apply to a copy; the shared sample stays unchanged."""
    booking = sample_booking("default", firstname="Unique")

    assert booking.firstname == "Unique"
    assert SAMPLE_BOOKINGS["default"].firstname == "John"
    assert booking.bookingdates == SAMPLE_BOOKINGS["default"].bookingdates


def test_unique_suffix_differs() -> None:
    assert len({unique_suffix() for _ in range(50)}) == 50


def test_random_booking_dates_in_future() -> None:
    today = date(2024, 6, 1)

    for _ in range(20):
        booking = generate_random_booking(today)
        assert booking.bookingdates.checkin > today
        assert booking.bookingdates.checkout > booking.bookingdates.checkin
        assert 100 <= booking.totalprice < 600


def test_unique_email() -> None:
    email = generate_unique_email("buyer")

    assert email.startswith("buyer+")
    assert email.endswith("@example.com")
