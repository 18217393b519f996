"""
Best-effort teardown of bookings created by a scenario.

Each scenario owns the ids of the bookings it creates until it deletes them.
At teardown every remaining id is deleted; failures are logged and returned
as NonCriticalOutcome values, never raised, since the booking may already
be gone.
"""

from typing import Awaitable, Callable, List, Optional

from ..booker_client import RestfulBookerClient
from ..logging_config import get_logger
from ..models import AuthToken, NonCriticalOutcome

logger = get_logger(__name__)

TokenProvider = Callable[[], Awaitable[AuthToken]]


class BookingCleanup:
    """
    Per-scenario list of owned booking ids.

    Attributes:
        client: Booking client of the owning scenario
    """

    def __init__(
        self,
        client: RestfulBookerClient,
        token: Optional[AuthToken] = None,
        token_provider: Optional[TokenProvider] = None,
    ) -> None:
        """
        Initialize cleanup registry.

        Args:
            client: Booking client of the owning scenario
            token: Token used for deletions
            token_provider: Called lazily for a token when none was given
        """
        self.client = client
        self._token = token
        self._token_provider = token_provider
        self._booking_ids: List[int] = []

    @property
    def booking_ids(self) -> List[int]:
        return list(self._booking_ids)

    def track(self, booking_id: int) -> int:
        """Record a created booking; returns the id for chaining."""
        if booking_id not in self._booking_ids:
            self._booking_ids.append(booking_id)
        return booking_id

    def forget(self, booking_id: int) -> None:
        """Stop owning a booking, e.g. after the scenario deleted it itself."""
        if booking_id in self._booking_ids:
            self._booking_ids.remove(booking_id)

    async def _resolve_token(self) -> AuthToken:
        if self._token is None:
            if self._token_provider is None:
                raise RuntimeError("No token available for cleanup")
            self._token = await self._token_provider()
        return self._token

    async def release_all(self) -> List[NonCriticalOutcome]:
        """
        Delete every owned booking.

        Returns:
            One outcome per owned id; the registry is empty afterwards
        """
        booking_ids, self._booking_ids = self._booking_ids, []
        if not booking_ids:
            return []

        try:
            token = await self._resolve_token()
        except Exception as error:
            logger.warning(
                "Cleanup skipped, no token",
                extra={
                    "extra_fields": {
                        "booking_ids": booking_ids,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
            )
            return [
                NonCriticalOutcome("delete_booking", str(booking_id), False, str(error))
                for booking_id in booking_ids
            ]

        outcomes = []
        for booking_id in booking_ids:
            outcomes.append(await self._release(booking_id, token))
        return outcomes

    async def _release(self, booking_id: int, token: AuthToken) -> NonCriticalOutcome:
        try:
            result = await self.client.delete_booking(booking_id, token)
        except Exception as error:
            logger.warning(
                f"Cleanup: could not delete booking {booking_id}",
                extra={
                    "extra_fields": {
                        "booking_id": booking_id,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
            )
            return NonCriticalOutcome("delete_booking", str(booking_id), False, str(error))

        if not result.deleted:
            logger.info(
                f"Cleanup: booking {booking_id} already gone",
                extra={"extra_fields": {"status_code": result.status_code}},
            )
            return NonCriticalOutcome(
                "delete_booking",
                str(booking_id),
                False,
                f"status {result.status_code}",
            )

        return NonCriticalOutcome("delete_booking", str(booking_id), True)
