"""
Seat Pricing & Earnings Allocation
==================================

Formula
-------
Current_Price = round50(Base_Price x (1 - Occupancy x Max_Discount))

* **Occupancy**    = booked_seats / total_seats, in [0, 1]
* **Max_Discount** = 5 %, reached only when the ride is fully booked
* **round50**      = nearest multiple of 50 Naira, halves rounded up

The rounding step can leave the price a few Naira above base at zero
occupancy, or just past the 5 % cap when full.  Callers rely on these exact
numbers, so the rounding is kept as is.

Settlement
----------
Total           = Price_Per_Seat x Seats + Luggage_Fee   (luggage once per booking)
Platform_Fee    = round(Total x Commission)               (15 % by default)
Driver_Earnings = Total - Platform_Fee                    (never rounded separately)

``compute_driver_advertised_earnings`` is the single-seat preview shown while
a driver sets a price.  It rounds per seat and is deliberately *not* derived
from the settlement above.

Every function here is pure.  Complexity: O(1) per call, except
``compute_occupancy_schedule`` which is O(total_seats).
"""

from __future__ import annotations

import math

from .entities import (
    PaymentAllocation,
    PriceQuote,
    PriceSuggestion,
    RideCapacity,
)
from .enums import PriceTier
from .exceptions import InvalidPaymentInput

MAX_DISCOUNT_RATE = 0.05
COMMISSION_RATE = 0.15
ROUNDING_UNIT = 50

# Pricing advice: cost per km and value per minute of driving time
FUEL_COST_PER_KM = {False: 15, True: 25}
TIME_VALUE_PER_MINUTE = {False: 8, True: 15}
TIER_MULTIPLIERS = {
    False: {PriceTier.ECONOMY: 1.2, PriceTier.STANDARD: 1.5, PriceTier.PREMIUM: 2.0},
    True: {PriceTier.ECONOMY: 1.8, PriceTier.STANDARD: 2.2, PriceTier.PREMIUM: 2.8},
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity."""
    return int(math.floor(value + 0.5))


def _check_rate(name: str, rate: float) -> None:
    if not 0 <= rate <= 1:
        raise InvalidPaymentInput(f"{name} must be within [0, 1], got {rate}")


def _check_amount(name: str, amount: float) -> None:
    if amount < 0:
        raise InvalidPaymentInput(f"{name} must not be negative, got {amount}")


# ── Occupancy pricing ─────────────────────────────────────────────────


def compute_current_price(
    base_price_per_seat: int,
    total_seats: int,
    booked_seats: int,
    max_discount_rate: float = MAX_DISCOUNT_RATE,
    rounding_unit: int = ROUNDING_UNIT,
) -> int:
    """Live per-seat price for a ride at its current occupancy.

    Raises ``InvalidCapacity`` for impossible seat counts and
    ``InvalidPaymentInput`` for a negative base price.
    """
    _check_amount("base_price_per_seat", base_price_per_seat)
    _check_rate("max_discount_rate", max_discount_rate)
    capacity = RideCapacity(total_seats, booked_seats)

    discount_rate = capacity.occupancy_rate * max_discount_rate
    raw_price = base_price_per_seat * (1 - discount_rate)
    return round_half_up(raw_price / rounding_unit) * rounding_unit


def quote_price(
    base_price_per_seat: int,
    total_seats: int,
    booked_seats: int,
    max_discount_rate: float = MAX_DISCOUNT_RATE,
    rounding_unit: int = ROUNDING_UNIT,
) -> PriceQuote:
    current = compute_current_price(
        base_price_per_seat,
        total_seats,
        booked_seats,
        max_discount_rate=max_discount_rate,
        rounding_unit=rounding_unit,
    )
    return PriceQuote(
        base_price_per_seat=base_price_per_seat,
        occupancy_rate=booked_seats / total_seats,
        current_price_per_seat=current,
    )


def compute_discount_percentage(
    base_price_per_seat: int, current_price_per_seat: int
) -> int:
    """The "X% off" badge.  Negative when rounding lifted the price above base."""
    _check_amount("base_price_per_seat", base_price_per_seat)
    if base_price_per_seat == 0:
        return 0
    savings = base_price_per_seat - current_price_per_seat
    return round_half_up(savings / base_price_per_seat * 100)


def compute_occupancy_schedule(
    base_price_per_seat: int,
    total_seats: int,
    max_discount_rate: float = MAX_DISCOUNT_RATE,
    rounding_unit: int = ROUNDING_UNIT,
) -> list[PriceQuote]:
    """Quotes for every occupancy level from empty to full."""
    capacity = RideCapacity(total_seats)
    return [
        quote_price(
            base_price_per_seat,
            capacity.total_seats,
            booked,
            max_discount_rate=max_discount_rate,
            rounding_unit=rounding_unit,
        )
        for booked in range(capacity.total_seats + 1)
    ]


# ── Settlement ────────────────────────────────────────────────────────


def compute_payment_allocation(
    price_per_seat: int,
    seats_booked: int,
    luggage_flat_fee: int = 0,
    commission_rate: float = COMMISSION_RATE,
) -> PaymentAllocation:
    """Split a booking's charge into platform fee and driver earnings.

    ``platform_fee + driver_earnings == total_amount`` holds exactly.
    """
    _check_amount("price_per_seat", price_per_seat)
    _check_amount("luggage_flat_fee", luggage_flat_fee)
    _check_rate("commission_rate", commission_rate)
    if seats_booked < 1:
        raise InvalidPaymentInput(
            f"seats_booked must be at least 1, got {seats_booked}"
        )

    total_amount = price_per_seat * seats_booked + luggage_flat_fee
    platform_fee = round_half_up(total_amount * commission_rate)
    return PaymentAllocation(
        total_amount=total_amount,
        platform_fee=platform_fee,
        driver_earnings=total_amount - platform_fee,
    )


def compute_driver_advertised_earnings(
    price_per_seat: int, commission_rate: float = COMMISSION_RATE
) -> int:
    _check_amount("price_per_seat", price_per_seat)
    _check_rate("commission_rate", commission_rate)
    return round_half_up(price_per_seat * (1 - commission_rate))


# ── Pricing advice ────────────────────────────────────────────────────


def suggest_prices(
    distance_km: float,
    duration_minutes: float,
    is_interstate: bool = False,
    commission_rate: float = COMMISSION_RATE,
    rounding_unit: int = ROUNDING_UNIT,
) -> list[PriceSuggestion]:
    """Economy / standard / premium per-seat prices for a route."""
    _check_amount("distance_km", distance_km)
    _check_amount("duration_minutes", duration_minutes)
    _check_rate("commission_rate", commission_rate)

    fuel_cost = distance_km * FUEL_COST_PER_KM[is_interstate]
    time_value = duration_minutes * TIME_VALUE_PER_MINUTE[is_interstate]

    suggestions = []
    for tier, multiplier in TIER_MULTIPLIERS[is_interstate].items():
        price = (
            round_half_up((fuel_cost + time_value) * multiplier / rounding_unit)
            * rounding_unit
        )
        suggestions.append(
            PriceSuggestion(
                tier=tier,
                price_per_seat=price,
                driver_earnings=compute_driver_advertised_earnings(
                    price, commission_rate
                ),
                platform_fee=round_half_up(price * commission_rate),
            )
        )
    return suggestions


# ── Engine facade ─────────────────────────────────────────────────────


class PricingEngine:
    """High-level API used by the ride, booking and pricing routes."""

    def __init__(
        self,
        commission_rate: float = COMMISSION_RATE,
        max_discount_rate: float = MAX_DISCOUNT_RATE,
        rounding_unit: int = ROUNDING_UNIT,
    ):
        _check_rate("commission_rate", commission_rate)
        _check_rate("max_discount_rate", max_discount_rate)
        if rounding_unit <= 0:
            raise ValueError(f"rounding_unit must be positive, got {rounding_unit}")
        self.commission_rate = commission_rate
        self.max_discount_rate = max_discount_rate
        self.rounding_unit = rounding_unit

    def current_price(
        self, base_price_per_seat: int, total_seats: int, booked_seats: int
    ) -> int:
        return compute_current_price(
            base_price_per_seat,
            total_seats,
            booked_seats,
            max_discount_rate=self.max_discount_rate,
            rounding_unit=self.rounding_unit,
        )

    def quote(
        self, base_price_per_seat: int, total_seats: int, booked_seats: int
    ) -> PriceQuote:
        return quote_price(
            base_price_per_seat,
            total_seats,
            booked_seats,
            max_discount_rate=self.max_discount_rate,
            rounding_unit=self.rounding_unit,
        )

    @staticmethod
    def discount_percentage(
        base_price_per_seat: int, current_price_per_seat: int
    ) -> int:
        return compute_discount_percentage(
            base_price_per_seat, current_price_per_seat
        )

    def schedule(
        self, base_price_per_seat: int, total_seats: int
    ) -> list[PriceQuote]:
        return compute_occupancy_schedule(
            base_price_per_seat,
            total_seats,
            max_discount_rate=self.max_discount_rate,
            rounding_unit=self.rounding_unit,
        )

    def allocate(
        self, price_per_seat: int, seats_booked: int, luggage_flat_fee: int = 0
    ) -> PaymentAllocation:
        return compute_payment_allocation(
            price_per_seat,
            seats_booked,
            luggage_flat_fee=luggage_flat_fee,
            commission_rate=self.commission_rate,
        )

    def advertised_earnings(self, price_per_seat: int) -> int:
        return compute_driver_advertised_earnings(
            price_per_seat, self.commission_rate
        )

    def advertised_commission(self, price_per_seat: int) -> int:
        _check_amount("price_per_seat", price_per_seat)
        return round_half_up(price_per_seat * self.commission_rate)

    def advice(
        self,
        distance_km: float,
        duration_minutes: float,
        is_interstate: bool = False,
    ) -> list[PriceSuggestion]:
        return suggest_prices(
            distance_km,
            duration_minutes,
            is_interstate,
            commission_rate=self.commission_rate,
            rounding_unit=self.rounding_unit,
        )
