"""
Entity model for the booking API and the storefront flows.

Wire models are Pydantic models whose field names match the booking API
payloads. Session-side state (cart, checkout progress, tokens, operation
outcomes) are plain dataclasses with no I/O.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Set, Union

from pydantic import BaseModel, Field

from .exceptions import StateTransitionError, ValidationMismatch

# ==================== Booking API wire models ====================


class BookingDates(BaseModel):
    """Stay range of a booking. checkin <= checkout is left to the server."""

    checkin: date
    checkout: date


class Booking(BaseModel):
    """A booking as accepted and returned by the booking API."""

    firstname: str
    lastname: str
    totalprice: Union[int, float] = Field(..., description="Non-negative total price")
    depositpaid: bool
    bookingdates: BookingDates
    additionalneeds: Optional[str] = None

    def to_payload(self) -> Dict:
        """Serialize to the JSON body expected by the API."""
        return self.model_dump(mode="json", exclude_none=True)


class BookingPatch(BaseModel):
    """Partial booking update. Only fields explicitly set are sent."""

    firstname: Optional[str] = None
    lastname: Optional[str] = None
    totalprice: Optional[Union[int, float]] = None
    depositpaid: Optional[bool] = None
    bookingdates: Optional[BookingDates] = None
    additionalneeds: Optional[str] = None

    def to_payload(self) -> Dict:
        return self.model_dump(mode="json", exclude_unset=True)


class CreatedBooking(BaseModel):
    """Response of a booking creation: server-assigned id plus stored booking."""

    bookingid: int
    booking: Booking


class BookingQuery(BaseModel):
    """Filters accepted by the booking id listing."""

    firstname: Optional[str] = None
    lastname: Optional[str] = None
    checkin: Optional[date] = None
    checkout: Optional[date] = None

    def to_params(self) -> Dict[str, str]:
        return self.model_dump(mode="json", exclude_none=True)


class AuthCredentials(BaseModel):
    """Credential pair posted to the auth endpoint."""

    username: str
    password: str


# ==================== Credentials and outcomes ====================


@dataclass(frozen=True)
class AuthToken:
    """
    Opaque credential required by mutating booking operations.

    Owned by the scenario that created it and passed explicitly to every
    call needing it. No expiry is modeled.
    """

    value: str

    def __str__(self) -> str:
        return self.value

    def __bool__(self) -> bool:
        return bool(self.value)


@dataclass(frozen=True)
class TokenGranted:
    """Authentication succeeded and yielded a token."""

    token: AuthToken

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> AuthToken:
        return self.token


@dataclass(frozen=True)
class TokenRefused:
    """Authentication answered successfully but carried a failure reason."""

    reason: str
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> AuthToken:
        raise ValidationMismatch(self.reason, status_code=self.status_code)


AuthResult = Union[TokenGranted, TokenRefused]


@dataclass(frozen=True)
class DeleteOutcome:
    """Result of a booking deletion. A missing booking is a failed outcome."""

    booking_id: int
    deleted: bool
    status_code: int


@dataclass(frozen=True)
class NonCriticalOutcome:
    """
    Result of a best-effort operation such as teardown cleanup.

    Failures are recorded here and logged, never raised.
    """

    operation: str
    target: str
    succeeded: bool
    error: Optional[str] = None


# ==================== Storefront session state ====================


class PageLocation(str, Enum):
    """Storefront page currently shown in a scenario's browser context."""

    LOGIN = "login"
    INVENTORY = "inventory"
    CART = "cart"
    CHECKOUT_INFORMATION = "checkout_information"
    CHECKOUT_OVERVIEW = "checkout_overview"
    CHECKOUT_COMPLETE = "checkout_complete"


@dataclass
class CartState:
    """
    Products currently in the cart of one storefront session.

    Product names are unique; adding one twice leaves the count unchanged.
    Survives navigation and is only cleared by removal or session end.
    """

    items: Set[str] = field(default_factory=set)

    @property
    def count(self) -> int:
        return len(self.items)

    def __contains__(self, product_name: str) -> bool:
        return product_name in self.items

    def add(self, product_name: str) -> bool:
        """Add a product. Returns False when it was already in the cart."""
        if product_name in self.items:
            return False
        self.items.add(product_name)
        return True

    def remove(self, product_name: str) -> bool:
        """Remove a product. Returns False when it was not in the cart."""
        if product_name not in self.items:
            return False
        self.items.discard(product_name)
        return True

    def clear(self) -> None:
        self.items.clear()


class CheckoutStep(str, Enum):
    """Steps of the checkout flow."""

    CART = "cart"
    INFORMATION = "information"
    OVERVIEW = "overview"
    COMPLETE = "complete"


# Overview -> Cart is the cancel transition; Complete is terminal.
CHECKOUT_TRANSITIONS: Dict[CheckoutStep, FrozenSet[CheckoutStep]] = {
    CheckoutStep.CART: frozenset({CheckoutStep.INFORMATION}),
    CheckoutStep.INFORMATION: frozenset({CheckoutStep.OVERVIEW}),
    CheckoutStep.OVERVIEW: frozenset({CheckoutStep.COMPLETE, CheckoutStep.CART}),
    CheckoutStep.COMPLETE: frozenset(),
}


@dataclass
class CheckoutState:
    """
    Ordered checkout state machine.

    Cart -> Information -> Overview -> Complete, with cancel taking
    Overview back to Cart. Information needs first name, last name and
    postal code before it can advance.
    """

    step: CheckoutStep = CheckoutStep.CART
    history: List[CheckoutStep] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return self.step is CheckoutStep.COMPLETE

    def can_advance(self, target: CheckoutStep) -> bool:
        return target in CHECKOUT_TRANSITIONS[self.step]

    def advance(self, target: CheckoutStep) -> None:
        """
        Move to target step.

        Raises:
            StateTransitionError: If target is not reachable from the current step
        """
        self.require(target)
        self.history.append(self.step)
        self.step = target

    def require(self, target: CheckoutStep) -> None:
        """Raise unless target is reachable from the current step."""
        if not self.can_advance(target):
            reason = "checkout is complete" if self.is_complete else None
            raise StateTransitionError(self.step.value, target.value, reason)

    def require_information(self, first_name: str, last_name: str, postal_code: str) -> None:
        """Raise unless Information can advance with these field values."""
        self.require(CheckoutStep.OVERVIEW)
        missing = [
            name
            for name, value in (
                ("first_name", first_name),
                ("last_name", last_name),
                ("postal_code", postal_code),
            )
            if not value or not value.strip()
        ]
        if missing:
            raise StateTransitionError(
                self.step.value,
                CheckoutStep.OVERVIEW.value,
                f"missing {', '.join(missing)}",
                details={"missing": missing},
            )

    def submit_information(self, first_name: str, last_name: str, postal_code: str) -> None:
        """Advance Information -> Overview once every field is filled."""
        self.require_information(first_name, last_name, postal_code)
        self.advance(CheckoutStep.OVERVIEW)

    def restart(self) -> None:
        """Start a fresh flow at the Cart step."""
        self.history.clear()
        self.step = CheckoutStep.CART
