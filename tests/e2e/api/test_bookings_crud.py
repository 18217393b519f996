"""
Booking API CRUD scenarios.

smoke: create and read, the operations everything else depends on.
regression: update, patch, delete and several bookings side by side.

Every booking carries a unique name suffix so parallel workers and other
pipelines targeting the same API never collide. Bookings are registered
with ``booking_cleanup`` and deleted at teardown.
"""

import asyncio
from datetime import date

import pytest

from e2e_harness.booker_client import RestfulBookerClient
from e2e_harness.exceptions import NotFoundError
from e2e_harness.models import AuthToken, Booking, BookingDates, BookingQuery
from e2e_harness.orchestration.cleanup import BookingCleanup
from e2e_harness.sample_data import sample_booking, unique_suffix


@pytest.mark.smoke
@pytest.mark.asyncio
async def test_create_booking(
    booker_client: RestfulBookerClient, booking_cleanup: BookingCleanup
) -> None:
    booking = sample_booking(firstname=f"Test_{unique_suffix()}", lastname="User")

    created = await booker_client.create_booking(booking)
    booking_cleanup.track(created.bookingid)

    assert created.bookingid > 0
    assert created.booking.firstname == booking.firstname
    assert created.booking.lastname == booking.lastname
    assert created.booking.totalprice == booking.totalprice
    assert created.booking.depositpaid == booking.depositpaid


@pytest.mark.smoke
@pytest.mark.asyncio
async def test_get_booking_by_id(
    booker_client: RestfulBookerClient, booking_cleanup: BookingCleanup
) -> None:
    booking = sample_booking(firstname=f"GetTest_{unique_suffix()}", lastname="User")
    created = await booker_client.create_booking(booking)
    booking_cleanup.track(created.bookingid)

    fetched = await booker_client.get_booking(created.bookingid)

    assert fetched == booking


@pytest.mark.regression
@pytest.mark.asyncio
async def test_find_booking_by_name(
    booker_client: RestfulBookerClient, booking_cleanup: BookingCleanup
) -> None:
    firstname = f"Query_{unique_suffix()}"
    created = await booker_client.create_booking(sample_booking(firstname=firstname))
    booking_cleanup.track(created.bookingid)

    ids = await booker_client.get_booking_ids(BookingQuery(firstname=firstname))

    assert created.bookingid in ids


@pytest.mark.regression
@pytest.mark.asyncio
async def test_update_booking(
    booker_client: RestfulBookerClient,
    booking_cleanup: BookingCleanup,
    auth_token: AuthToken,
) -> None:
    suffix = unique_suffix()
    created = await booker_client.create_booking(
        sample_booking(firstname=f"Initial_{suffix}")
    )
    booking_cleanup.track(created.bookingid)
    replacement = Booking(
        firstname=f"Updated_{suffix}",
        lastname="NewLastName",
        totalprice=999,
        depositpaid=False,
        bookingdates=BookingDates(checkin=date(2024, 12, 1), checkout=date(2024, 12, 10)),
        additionalneeds="Updated needs",
    )

    updated = await booker_client.update_booking(created.bookingid, replacement, auth_token)

    assert updated == replacement
    assert (await booker_client.get_booking(created.bookingid)).firstname == replacement.firstname


@pytest.mark.regression
@pytest.mark.asyncio
async def test_patch_booking(
    booker_client: RestfulBookerClient,
    booking_cleanup: BookingCleanup,
    auth_token: AuthToken,
) -> None:
    suffix = unique_suffix()
    original = sample_booking(firstname=f"PatchTest_{suffix}", lastname="OriginalLast")
    created = await booker_client.create_booking(original)
    booking_cleanup.track(created.bookingid)

    patched = await booker_client.patch_booking(
        created.bookingid,
        {"firstname": f"PartiallyUpdated_{suffix}", "totalprice": 777},
        auth_token,
    )

    assert patched.firstname == f"PartiallyUpdated_{suffix}"
    assert patched.totalprice == 777
    assert patched.lastname == original.lastname
    assert patched.depositpaid == original.depositpaid
    assert patched.bookingdates == original.bookingdates
    assert patched.additionalneeds == original.additionalneeds


@pytest.mark.regression
@pytest.mark.asyncio
async def test_delete_booking(
    booker_client: RestfulBookerClient, auth_token: AuthToken
) -> None:
    created = await booker_client.create_booking(
        sample_booking(firstname=f"DeleteTest_{unique_suffix()}")
    )

    outcome = await booker_client.delete_booking(created.bookingid, auth_token)

    assert outcome.deleted
    assert outcome.status_code == 201
    with pytest.raises(NotFoundError):
        await booker_client.get_booking(created.bookingid)

    again = await booker_client.delete_booking(created.bookingid, auth_token)
    assert not again.deleted


@pytest.mark.regression
@pytest.mark.asyncio
async def test_multiple_bookings_are_independent(
    booker_client: RestfulBookerClient, booking_cleanup: BookingCleanup
) -> None:
    suffix = unique_suffix()
    bookings = [
        sample_booking("default", firstname=f"Multi1_{suffix}"),
        sample_booking("extended", firstname=f"Multi2_{suffix}"),
        sample_booking("minimal", firstname=f"Multi3_{suffix}"),
    ]

    created = await asyncio.gather(
        *(booker_client.create_booking(booking) for booking in bookings)
    )
    for item in created:
        booking_cleanup.track(item.bookingid)

    assert len({item.bookingid for item in created}) == 3
    for item, booking in zip(created, bookings):
        assert (await booker_client.get_booking(item.bookingid)).firstname == booking.firstname
