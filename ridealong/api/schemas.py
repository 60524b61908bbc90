"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, Field

from ridealong.domain.enums import (
    PaymentMethod,
    PaymentStatus,
    PriceTier,
    RideStatus,
)


class LocationSchema(BaseModel):
    landmark: str = Field("", max_length=120)
    area: str = Field(..., min_length=1, max_length=120)
    state: str = Field(..., min_length=1, max_length=60)


# ── Requests ──────────────────────────────────────────────────────────


class RideCreateRequest(BaseModel):
    driver_id: int
    origin: LocationSchema
    destination: LocationSchema
    departure_date: date
    departure_time: time
    total_seats: int = Field(..., ge=1, le=8)
    base_price_per_seat: int = Field(..., ge=0, description="NGN, before discounts.")
    allows_luggage: bool = False
    luggage_price: Optional[int] = Field(
        None,
        ge=0,
        description="Flat NGN fee per booking; defaults to 200 when luggage is allowed.",
    )
    description: Optional[str] = Field(None, max_length=500)


class BookingCreateRequest(BaseModel):
    passenger_id: int
    seats: int = Field(1, ge=1, le=8)
    has_luggage: bool = False
    payment_method: PaymentMethod = PaymentMethod.CARD
    idempotency_key: Optional[str] = Field(
        None,
        max_length=64,
        description="Client-generated UUID to prevent double-booking on retries.",
    )


class AllocationRequest(BaseModel):
    price_per_seat: int = Field(..., ge=0)
    seats_booked: int = Field(..., ge=1)
    luggage_fee: int = Field(0, ge=0)


class PricingAdviceRequest(BaseModel):
    distance_km: float = Field(..., ge=0)
    duration_minutes: float = Field(..., ge=0)
    is_interstate: bool = False


# ── Responses ─────────────────────────────────────────────────────────


class RideResponse(BaseModel):
    id: int
    driver_id: int
    origin: LocationSchema
    destination: LocationSchema
    departure_date: date
    departure_time: time
    total_seats: int
    booked_seats: int
    available_seats: int
    base_price_per_seat: int
    current_price_per_seat: int
    discount_percentage: int
    driver_earnings_per_seat: int
    allows_luggage: bool
    luggage_price: Optional[int] = None
    is_interstate: bool
    description: Optional[str] = None
    status: RideStatus
    estimated_total: Optional[int] = Field(
        None, description="Price for the searched passengers, luggage included."
    )
    created_at: Optional[datetime] = None


class BookingResponse(BaseModel):
    id: int
    ride_id: int
    passenger_id: int
    seats_booked: int
    has_luggage: bool
    price_per_seat: int
    luggage_fee: int
    total_amount: int
    platform_fee: int
    driver_earnings: int
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    idempotency_key: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PriceQuoteResponse(BaseModel):
    base_price_per_seat: int
    total_seats: int
    booked_seats: int
    occupancy_rate: float
    current_price_per_seat: int
    discount_percentage: int


class AllocationResponse(BaseModel):
    total_amount: int
    platform_fee: int
    driver_earnings: int
    currency: str


class EarningsPreviewResponse(BaseModel):
    price_per_seat: int
    driver_earnings: int
    platform_fee: int
    commission_rate: float


class PriceSuggestionResponse(BaseModel):
    tier: PriceTier
    price_per_seat: int
    driver_earnings: int
    platform_fee: int


class HealthResponse(BaseModel):
    status: str = "ok"


class ErrorResponse(BaseModel):
    detail: str


class PricingPolicyResponse(BaseModel):
    commission_rate: float
    max_discount_rate: float
    rounding_unit: int
    default_luggage_price: int
    currency: str
