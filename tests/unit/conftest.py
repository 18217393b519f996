"""
Unit test configuration.

Provides an in-memory booking API behind an httpx.MockTransport so the
client, cleanup and runner can be exercised without network access.
"""

import json
import re
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from e2e_harness.booker_client import RestfulBookerClient
from e2e_harness.models import AuthToken, Booking, BookingDates

FAKE_BASE_URL = "http://booker.test"
VALID_USER = "admin"
VALID_PASS = "password123"
VALID_TOKEN = "abc123token"

_BOOKING_PATH = re.compile(r"^/booking/(\d+)$")


class FakeBookerServer:
    """
    In-memory stand-in for the booking API.

    Mirrors the live service's quirks: /ping answers 201, bad credentials
    answer 200 with a reason, deletes answer 201, and deleting an unknown
    booking answers 405.
    """

    def __init__(self) -> None:
        self.bookings: Dict[int, Dict[str, Any]] = {}
        self.next_id = 1
        self.requests: List[httpx.Request] = []
        self.ping_status = 201
        self.fail_with: Optional[Exception] = None

    def _authorized(self, request: httpx.Request) -> bool:
        return request.headers.get("cookie") == f"token={VALID_TOKEN}"

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

        path = request.url.path
        method = request.method

        if path == "/ping":
            return httpx.Response(self.ping_status, text="Created")

        if path == "/auth" and method == "POST":
            body = json.loads(request.content)
            if body.get("username") == VALID_USER and body.get("password") == VALID_PASS:
                return httpx.Response(200, json={"token": VALID_TOKEN})
            return httpx.Response(200, json={"reason": "Bad credentials"})

        if path == "/booking" and method == "POST":
            booking = json.loads(request.content)
            booking_id = self.next_id
            self.next_id += 1
            self.bookings[booking_id] = booking
            return httpx.Response(200, json={"bookingid": booking_id, "booking": booking})

        if path == "/booking" and method == "GET":
            filters = dict(request.url.params)
            matches = [
                {"bookingid": booking_id}
                for booking_id, booking in self.bookings.items()
                if all(
                    booking.get(key) == value
                    for key, value in filters.items()
                    if key in ("firstname", "lastname")
                )
            ]
            return httpx.Response(200, json=matches)

        match = _BOOKING_PATH.match(path)
        if match is None:
            return httpx.Response(404, text="Not Found")
        booking_id = int(match.group(1))

        if method == "GET":
            if booking_id not in self.bookings:
                return httpx.Response(404, text="Not Found")
            return httpx.Response(200, json=self.bookings[booking_id])

        if not self._authorized(request):
            return httpx.Response(403, text="Forbidden")

        if booking_id not in self.bookings:
            return httpx.Response(405, text="Method Not Allowed")

        if method == "PUT":
            self.bookings[booking_id] = json.loads(request.content)
            return httpx.Response(200, json=self.bookings[booking_id])

        if method == "PATCH":
            self.bookings[booking_id].update(json.loads(request.content))
            return httpx.Response(200, json=self.bookings[booking_id])

        if method == "DELETE":
            del self.bookings[booking_id]
            return httpx.Response(201, text="Created")

        return httpx.Response(405, text="Method Not Allowed")


@pytest.fixture
def fake_booker() -> FakeBookerServer:
    return FakeBookerServer()


@pytest_asyncio.fixture
async def fake_client(fake_booker: FakeBookerServer) -> AsyncIterator[RestfulBookerClient]:
    """Booking client wired to the in-memory server."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_booker.handle))
    client = RestfulBookerClient(FAKE_BASE_URL, timeout=5.0, http_client=http_client)
    yield client
    await http_client.aclose()


@pytest.fixture
def valid_token() -> AuthToken:
    return AuthToken(VALID_TOKEN)


@pytest.fixture
def booking() -> Booking:
    """
    Sample booking for testing.

    Returns:
        Booking matching the default sample booking
    """
    return Booking(
        firstname="John",
        lastname="Doe",
        totalprice=150,
        depositpaid=True,
        bookingdates=BookingDates(checkin="2024-01-01", checkout="2024-01-05"),
        additionalneeds="Breakfast",
    )
