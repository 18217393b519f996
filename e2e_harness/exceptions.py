"""
Custom exception classes for the end-to-end harness.

Provides one exception per failure category raised by the booking client
and the storefront page objects, so scenarios can react to the category
rather than to raw HTTP status codes or DOM state.
"""

from typing import Any, Dict, Optional


class HarnessException(Exception):
    """
    Base exception for all harness errors.

    All custom exceptions should inherit from this class
    for consistent error handling.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize harness exception.

        Args:
            message: Human-readable error message
            details: Additional context about the error
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class TransportUnavailable(HarnessException):
    """
    Raised when the system under test cannot be reached.

    Wraps network-level failures (connection refused, DNS, timeouts).
    """

    def __init__(
        self,
        target: str,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.target = target
        self.reason = reason
        message = f"Target '{target}' is unreachable"
        if reason:
            message += f": {reason}"
        super().__init__(message, details)


class AuthenticationError(HarnessException):
    """Raised when an authentication response carries no usable token."""

    def __init__(
        self,
        username: str,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.username = username
        self.reason = reason
        message = f"No token issued for user '{username}'"
        if reason:
            message += f": {reason}"
        super().__init__(message, {"reason": reason, **(details or {})})


class AuthorizationError(HarnessException):
    """Raised when a mutating operation is rejected for a bad or missing token."""

    def __init__(
        self,
        operation: str,
        status_code: int,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        message = f"Operation '{operation}' rejected with status {status_code}"
        super().__init__(message, details)


class NotFoundError(HarnessException):
    """Raised when an entity id does not exist on the remote service."""

    def __init__(
        self,
        entity: str,
        entity_id: Any,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found", details)


class ValidationMismatch(HarnessException):
    """
    Raised when a success response carries a semantic failure reason.

    The remote service may answer 200 with a payload such as
    ``{"reason": "Bad credentials"}``; callers must look at the payload.
    """

    def __init__(
        self,
        reason: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.reason = reason
        self.status_code = status_code
        message = f"Request reported failure: {reason}"
        super().__init__(message, details)


class StateTransitionError(HarnessException):
    """Raised when a UI flow step is attempted with its prerequisites unmet."""

    def __init__(
        self,
        current: str,
        target: str,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.current = current
        self.target = target
        self.reason = reason
        message = f"Cannot move from '{current}' to '{target}'"
        if reason:
            message += f": {reason}"
        super().__init__(message, details)


class BookerApiError(HarnessException):
    """Raised for unexpected non-success responses from the booking API."""

    def __init__(
        self,
        operation: str,
        status_code: int,
        body: str = "",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.body = body
        message = f"Operation '{operation}' failed with status {status_code}"
        super().__init__(message, {"body": body[:200], **(details or {})})


class ScenarioTimeout(HarnessException):
    """Raised when a scenario exceeds its total time budget."""

    def __init__(
        self,
        scenario: str,
        timeout_seconds: float,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.scenario = scenario
        self.timeout_seconds = timeout_seconds
        message = f"Scenario '{scenario}' exceeded its budget of {timeout_seconds}s"
        super().__init__(message, details)
