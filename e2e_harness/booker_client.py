"""
HTTP client module for the booking API under test.

Provides an async, typed client over the booking resource: health check,
token creation, and create/read/update/patch/delete of bookings. Owns the
mapping between domain verbs and HTTP verbs, and between HTTP outcomes and
the harness exception taxonomy. Request execution itself is delegated to an
``httpx.AsyncClient`` which may be injected by the caller.
"""

import time
from typing import Any, Dict, List, Optional, Union

import httpx

from .exceptions import (
    AuthenticationError,
    AuthorizationError,
    BookerApiError,
    NotFoundError,
    TransportUnavailable,
)
from .logging_config import get_logger, get_scenario_id
from .models import (
    AuthCredentials,
    AuthResult,
    AuthToken,
    Booking,
    BookingPatch,
    BookingQuery,
    CreatedBooking,
    DeleteOutcome,
    TokenGranted,
    TokenRefused,
)

logger = get_logger(__name__)

PING_SUCCESS_STATUS = 201


class RestfulBookerClient:
    """
    Client for the booking API.

    One instance belongs to one scenario. It holds no credential state:
    tokens are passed explicitly to every mutating operation.

    Attributes:
        base_url: Base URL of the booking API
        timeout: Request timeout in seconds
        health_timeout: Timeout for the liveness probe in seconds
        _client: Underlying httpx.AsyncClient (injected or owned)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize booking API client.

        Args:
            base_url: Base URL of the booking API
            timeout: Request timeout in seconds
            http_client: Optional pre-built transport; closed by its owner, not here
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.health_timeout = min(timeout, 5.0)

        self._client: Optional[httpx.AsyncClient] = http_client
        self._owns_client = http_client is None

        logger.debug(
            f"Initialized RestfulBookerClient: base_url={self.base_url}, "
            f"timeout={self.timeout}s"
        )

    async def __aenter__(self) -> "RestfulBookerClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_client(self) -> httpx.AsyncClient:
        """
        Get or create the HTTP client.

        Returns:
            Configured httpx.AsyncClient instance
        """
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
            logger.debug("Created new HTTP client")
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
            logger.debug("Closed HTTP client")

    def _get_request_headers(self, token: Optional[AuthToken] = None) -> Dict[str, str]:
        """
        Build request headers, carrying the token as a cookie when given.

        Args:
            token: Optional auth token for mutating operations

        Returns:
            Dictionary of HTTP headers
        """
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

        scenario_id = get_scenario_id()
        if scenario_id:
            headers["X-Request-ID"] = scenario_id

        if token is not None:
            headers["Cookie"] = f"token={token}"

        return headers

    async def _send(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        token: Optional[AuthToken] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """
        Execute one request and log its outcome.

        Raises:
            TransportUnavailable: If the API cannot be reached
        """
        start_time = time.perf_counter()
        url = f"{self.base_url}{path}"

        try:
            client = await self._get_client()
            response = await client.request(
                method,
                url,
                json=json,
                params=params,
                headers=self._get_request_headers(token),
                timeout=timeout or self.timeout,
            )
        except httpx.TransportError as error:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Booking API unreachable",
                extra={
                    "extra_fields": {
                        "operation": operation,
                        "method": method,
                        "url": url,
                        "duration_ms": duration_ms,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
            )
            raise TransportUnavailable(
                self.base_url, str(error) or type(error).__name__
            ) from error

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Booking API responded",
            extra={
                "extra_fields": {
                    "operation": operation,
                    "method": method,
                    "path": path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 1),
                }
            },
        )
        return response

    @staticmethod
    def _raise_for_status(
        response: httpx.Response,
        operation: str,
        booking_id: Optional[int] = None,
    ) -> None:
        """Translate a non-success response into a harness exception."""
        if response.is_success:
            return

        status_code = response.status_code
        if status_code in (401, 403):
            raise AuthorizationError(operation, status_code)
        if status_code == 404:
            raise NotFoundError("Booking", booking_id)
        raise BookerApiError(operation, status_code, response.text)

    @staticmethod
    def _json(response: httpx.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as error:
            raise BookerApiError(
                operation,
                response.status_code,
                response.text,
                details={"error": "response body is not JSON"},
            ) from error

    async def health_check(self) -> bool:
        """
        Check whether the booking API is reachable.

        Never raises: any transport or unexpected failure becomes False.

        Returns:
            True only when the liveness probe answers 201
        """
        try:
            response = await self._send(
                "health_check", "GET", "/ping", timeout=self.health_timeout
            )
            is_healthy = response.status_code == PING_SUCCESS_STATUS

            if not is_healthy:
                logger.warning(
                    "Booking API health check failed",
                    extra={
                        "extra_fields": {
                            "backend_url": self.base_url,
                            "status_code": response.status_code,
                        }
                    },
                )

            return is_healthy

        except Exception as error:
            logger.warning(
                "Booking API health check failed with exception",
                extra={
                    "extra_fields": {
                        "backend_url": self.base_url,
                        "error_type": type(error).__name__,
                        "error_message": str(error),
                    }
                },
            )
            return False

    async def request_token(self, username: str, password: str) -> AuthResult:
        """
        Ask for a token and report the outcome as a tagged result.

        The API answers bad credentials with a success status and a
        ``reason`` payload; that case yields TokenRefused instead of raising.

        Args:
            username: API username
            password: API password

        Returns:
            TokenGranted with the token, or TokenRefused with the reason

        Raises:
            AuthenticationError: If the payload carries neither token nor reason
            TransportUnavailable: If the API cannot be reached
        """
        credentials = AuthCredentials(username=username, password=password)
        response = await self._send(
            "authenticate", "POST", "/auth", json=credentials.model_dump()
        )
        self._raise_for_status(response, "authenticate")
        payload = self._json(response, "authenticate")

        token = payload.get("token") if isinstance(payload, dict) else None
        if token:
            return TokenGranted(AuthToken(token))

        reason = payload.get("reason") if isinstance(payload, dict) else None
        if reason:
            logger.info(
                "Token refused",
                extra={"extra_fields": {"username": username, "reason": reason}},
            )
            return TokenRefused(reason, status_code=response.status_code)

        raise AuthenticationError(
            username,
            details={"payload": payload if isinstance(payload, dict) else str(payload)},
        )

    async def authenticate(self, username: str, password: str) -> AuthToken:
        """
        Obtain a token or fail.

        Raises:
            AuthenticationError: If no token was issued (reason kept in details)
        """
        result = await self.request_token(username, password)
        if isinstance(result, TokenRefused):
            raise AuthenticationError(username, result.reason)
        return result.token

    async def create_booking(self, booking: Booking) -> CreatedBooking:
        """
        Create a booking.

        Input is not validated locally; the API decides what it accepts.

        Args:
            booking: Booking details

        Returns:
            Server-assigned id and the stored booking
        """
        response = await self._send(
            "create_booking", "POST", "/booking", json=booking.to_payload()
        )
        self._raise_for_status(response, "create_booking")
        created = CreatedBooking.model_validate(self._json(response, "create_booking"))
        logger.info(
            "Booking created",
            extra={"extra_fields": {"booking_id": created.bookingid}},
        )
        return created

    async def get_booking(self, booking_id: int) -> Booking:
        """
        Fetch one booking.

        Raises:
            NotFoundError: If no booking has this id
        """
        response = await self._send("get_booking", "GET", f"/booking/{booking_id}")
        self._raise_for_status(response, "get_booking", booking_id)
        return Booking.model_validate(self._json(response, "get_booking"))

    async def get_booking_ids(self, query: Optional[BookingQuery] = None) -> List[int]:
        """
        List booking ids, optionally filtered by name or stay dates.

        Args:
            query: Optional filters

        Returns:
            Matching booking ids in API order
        """
        params = query.to_params() if query else None
        response = await self._send("get_booking_ids", "GET", "/booking", params=params)
        self._raise_for_status(response, "get_booking_ids")
        payload = self._json(response, "get_booking_ids")
        return [int(item["bookingid"]) for item in payload]

    async def update_booking(
        self,
        booking_id: int,
        booking: Booking,
        token: AuthToken,
    ) -> Booking:
        """
        Replace a booking entirely.

        Raises:
            AuthorizationError: If the token is invalid or stale
            NotFoundError: If no booking has this id
        """
        response = await self._send(
            "update_booking",
            "PUT",
            f"/booking/{booking_id}",
            json=booking.to_payload(),
            token=token,
        )
        self._raise_for_status(response, "update_booking", booking_id)
        return Booking.model_validate(self._json(response, "update_booking"))

    async def patch_booking(
        self,
        booking_id: int,
        patch: Union[BookingPatch, Dict[str, Any]],
        token: AuthToken,
    ) -> Booking:
        """
        Update only the provided fields of a booking.

        Fields absent from the patch must come back unchanged.

        Raises:
            AuthorizationError: If the token is invalid or stale
            NotFoundError: If no booking has this id
        """
        if not isinstance(patch, BookingPatch):
            patch = BookingPatch(**patch)

        response = await self._send(
            "patch_booking",
            "PATCH",
            f"/booking/{booking_id}",
            json=patch.to_payload(),
            token=token,
        )
        self._raise_for_status(response, "patch_booking", booking_id)
        return Booking.model_validate(self._json(response, "patch_booking"))

    async def delete_booking(self, booking_id: int, token: AuthToken) -> DeleteOutcome:
        """
        Delete a booking.

        Deleting an id that is already gone yields a failed outcome rather
        than an exception, so repeated cleanup stays harmless.

        Returns:
            DeleteOutcome with deleted=True on success

        Raises:
            AuthorizationError: If the token is invalid or stale
            TransportUnavailable: If the API cannot be reached
        """
        response = await self._send(
            "delete_booking", "DELETE", f"/booking/{booking_id}", token=token
        )

        if response.status_code in (401, 403):
            raise AuthorizationError("delete_booking", response.status_code)

        deleted = response.is_success
        if not deleted:
            logger.warning(
                "Booking not deleted",
                extra={
                    "extra_fields": {
                        "booking_id": booking_id,
                        "status_code": response.status_code,
                    }
                },
            )

        return DeleteOutcome(
            booking_id=booking_id,
            deleted=deleted,
            status_code=response.status_code,
        )
