"""
Domain entities with business logic.

Patterns used
-------------
- **Value Objects**: ``RideCapacity``, ``PriceQuote``, ``PaymentAllocation``
  and ``LuggageSurcharge`` are immutable; ``RideCapacity`` validates its own
  seat invariants and returns a new instance on every change.
- **State Pattern** on ``Ride``: enforces valid lifecycle transitions
  (ACTIVE <-> FULL -> CANCELLED | COMPLETED).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from .enums import RIDE_TRANSITIONS, PriceTier, RideStatus
from .exceptions import InvalidCapacity, InvalidPaymentInput, InvalidStateTransition


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Location:
    landmark: str = ""
    area: str = ""
    state: str = ""


@dataclass(frozen=True)
class RideCapacity:
    """How full a ride is: ``0 <= booked_seats <= total_seats``, ``total_seats >= 1``."""

    total_seats: int
    booked_seats: int = 0

    def __post_init__(self) -> None:
        if self.total_seats <= 0:
            raise InvalidCapacity(
                f"total_seats must be positive, got {self.total_seats}"
            )
        if self.booked_seats < 0:
            raise InvalidCapacity(
                f"booked_seats must not be negative, got {self.booked_seats}"
            )
        if self.booked_seats > self.total_seats:
            raise InvalidCapacity(
                f"booked_seats ({self.booked_seats}) exceeds "
                f"total_seats ({self.total_seats})"
            )

    @property
    def available_seats(self) -> int:
        return self.total_seats - self.booked_seats

    @property
    def occupancy_rate(self) -> float:
        return self.booked_seats / self.total_seats

    @property
    def is_full(self) -> bool:
        return self.booked_seats == self.total_seats

    def book(self, seats: int) -> RideCapacity:
        if seats < 1:
            raise InvalidCapacity(f"Cannot book {seats} seats")
        return replace(self, booked_seats=self.booked_seats + seats)

    def release(self, seats: int) -> RideCapacity:
        if seats < 1:
            raise InvalidCapacity(f"Cannot release {seats} seats")
        return replace(self, booked_seats=self.booked_seats - seats)


@dataclass(frozen=True)
class PriceQuote:
    base_price_per_seat: int
    occupancy_rate: float
    current_price_per_seat: int


@dataclass(frozen=True)
class PaymentAllocation:
    total_amount: int
    platform_fee: int
    driver_earnings: int


@dataclass(frozen=True)
class PriceSuggestion:
    tier: PriceTier
    price_per_seat: int
    driver_earnings: int
    platform_fee: int


@dataclass(frozen=True)
class LuggageSurcharge:
    flat_fee: int = 0

    def __post_init__(self) -> None:
        if self.flat_fee < 0:
            raise InvalidPaymentInput(
                f"Luggage fee must not be negative, got {self.flat_fee}"
            )


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class Ride:
    id: Optional[int] = None
    driver_id: int = 0
    origin: Location = field(default_factory=Location)
    destination: Location = field(default_factory=Location)
    capacity: RideCapacity = field(default_factory=lambda: RideCapacity(1))
    base_price_per_seat: int = 0
    allows_luggage: bool = False
    luggage_price: Optional[int] = None
    status: RideStatus = RideStatus.ACTIVE

    @property
    def is_interstate(self) -> bool:
        return (
            self.origin.state.strip().lower()
            != self.destination.state.strip().lower()
        )

    @property
    def luggage_surcharge(self) -> LuggageSurcharge:
        if not self.allows_luggage:
            return LuggageSurcharge()
        return LuggageSurcharge(self.luggage_price or 0)

    def transition_to(self, new_status: RideStatus) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        allowed = RIDE_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition from {self.status.value} to {new_status.value}"
            )
        self.status = new_status

    def book(self, seats: int) -> None:
        """Take *seats* and flip to FULL when the last seat goes."""
        if self.status != RideStatus.ACTIVE:
            raise InvalidStateTransition(
                f"Cannot book seats on a {self.status.value} ride"
            )
        self.capacity = self.capacity.book(seats)
        if self.capacity.is_full:
            self.transition_to(RideStatus.FULL)

    def release(self, seats: int) -> None:
        """Give back *seats*; a FULL ride becomes bookable again."""
        if self.status not in (RideStatus.ACTIVE, RideStatus.FULL):
            raise InvalidStateTransition(
                f"Cannot release seats on a {self.status.value} ride"
            )
        self.capacity = self.capacity.release(seats)
        if self.status == RideStatus.FULL and not self.capacity.is_full:
            self.transition_to(RideStatus.ACTIVE)
