"""
Ride endpoints
==============

POST  /api/v1/rides                 -- post a ride as a driver (201)
GET   /api/v1/rides                 -- search bookable rides with live prices
GET   /api/v1/rides/{ride_id}       -- ride details with live price
PATCH /api/v1/rides/{ride_id}/cancel   -- cancel a ride, refunding its bookings
PATCH /api/v1/rides/{ride_id}/complete -- mark a ride as completed
"""

from __future__ import annotations

import logging
from datetime import date, time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ridealong.api.dependencies import get_db, get_pricing_engine
from ridealong.api.middleware import DEFAULT_LIMIT, limiter
from ridealong.api.schemas import (
    ErrorResponse,
    LocationSchema,
    RideCreateRequest,
    RideResponse,
)
from ridealong.config import settings
from ridealong.domain.entities import Location, Ride, RideCapacity
from ridealong.domain.enums import PaymentStatus, RideStatus
from ridealong.domain.pricing import PricingEngine
from ridealong.infrastructure.models import RideModel
from ridealong.infrastructure.repositories import (
    BookingRepository,
    RideRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rides", tags=["rides"])


def to_entity(ride: RideModel) -> Ride:
    return Ride(
        id=ride.id,
        driver_id=ride.driver_id,
        origin=Location(ride.from_landmark, ride.from_area, ride.from_state),
        destination=Location(ride.to_landmark, ride.to_area, ride.to_state),
        capacity=RideCapacity(ride.total_seats, ride.booked_seats),
        base_price_per_seat=ride.base_price_per_seat,
        allows_luggage=ride.allows_luggage,
        luggage_price=ride.luggage_price,
        status=RideStatus(ride.status),
    )


def to_response(
    ride: RideModel,
    pricing: PricingEngine,
    passengers: Optional[int] = None,
    needs_luggage: bool = False,
) -> RideResponse:
    current = pricing.current_price(
        ride.base_price_per_seat, ride.total_seats, ride.booked_seats
    )
    estimated_total = None
    if passengers:
        estimated_total = current * passengers
        if needs_luggage and ride.allows_luggage:
            estimated_total += ride.luggage_price or 0

    return RideResponse(
        id=ride.id,
        driver_id=ride.driver_id,
        origin=LocationSchema(
            landmark=ride.from_landmark, area=ride.from_area, state=ride.from_state
        ),
        destination=LocationSchema(
            landmark=ride.to_landmark, area=ride.to_area, state=ride.to_state
        ),
        departure_date=ride.departure_date,
        departure_time=ride.departure_time,
        total_seats=ride.total_seats,
        booked_seats=ride.booked_seats,
        available_seats=ride.total_seats - ride.booked_seats,
        base_price_per_seat=ride.base_price_per_seat,
        current_price_per_seat=current,
        discount_percentage=pricing.discount_percentage(
            ride.base_price_per_seat, current
        ),
        driver_earnings_per_seat=pricing.advertised_earnings(current),
        allows_luggage=ride.allows_luggage,
        luggage_price=ride.luggage_price,
        is_interstate=ride.is_interstate,
        description=ride.description,
        status=RideStatus(ride.status),
        estimated_total=estimated_total,
        created_at=ride.created_at,
    )


@router.post(
    "",
    status_code=201,
    response_model=RideResponse,
    summary="Post a ride",
    responses={404: {"model": ErrorResponse, "description": "Driver not found."}},
)
@limiter.limit(DEFAULT_LIMIT)
async def post_ride(
    request: Request,
    body: RideCreateRequest,
    db: AsyncSession = Depends(get_db),
    pricing: PricingEngine = Depends(get_pricing_engine),
):
    if not await UserRepository(db).get_by_id(body.driver_id):
        raise HTTPException(status_code=404, detail="Driver not found")

    luggage_price = None
    if body.allows_luggage:
        luggage_price = (
            body.luggage_price
            if body.luggage_price is not None
            else settings.default_luggage_price
        )

    entity = Ride(
        driver_id=body.driver_id,
        origin=Location(**body.origin.model_dump()),
        destination=Location(**body.destination.model_dump()),
        capacity=RideCapacity(body.total_seats),
        base_price_per_seat=body.base_price_per_seat,
        allows_luggage=body.allows_luggage,
        luggage_price=luggage_price,
    )
    ride = await RideRepository(db).create(
        RideModel(
            driver_id=entity.driver_id,
            from_landmark=entity.origin.landmark,
            from_area=entity.origin.area,
            from_state=entity.origin.state,
            to_landmark=entity.destination.landmark,
            to_area=entity.destination.area,
            to_state=entity.destination.state,
            departure_date=body.departure_date,
            departure_time=body.departure_time,
            total_seats=entity.capacity.total_seats,
            booked_seats=entity.capacity.booked_seats,
            base_price_per_seat=entity.base_price_per_seat,
            allows_luggage=entity.allows_luggage,
            luggage_price=entity.luggage_price,
            is_interstate=entity.is_interstate,
            description=body.description,
            status=entity.status,
        )
    )
    logger.info(
        "Ride %d posted by driver %d (%d seats at %d %s)",
        ride.id,
        ride.driver_id,
        ride.total_seats,
        ride.base_price_per_seat,
        settings.currency,
    )
    return to_response(ride, pricing)


@router.get(
    "",
    response_model=list[RideResponse],
    summary="Search bookable rides",
)
@limiter.limit(DEFAULT_LIMIT)
async def search_rides(
    request: Request,
    from_state: Optional[str] = None,
    from_area: Optional[str] = None,
    to_state: Optional[str] = None,
    to_area: Optional[str] = None,
    departure_date: Optional[date] = Query(None, alias="date"),
    earliest_time: Optional[time] = Query(None, alias="time"),
    passengers: int = Query(1, ge=1, le=8),
    has_luggage: bool = False,
    interstate: Optional[bool] = None,
    db: AsyncSession = Depends(get_db),
    pricing: PricingEngine = Depends(get_pricing_engine),
):
    rides = await RideRepository(db).search(
        from_state=from_state,
        from_area=from_area,
        to_state=to_state,
        to_area=to_area,
        departure_date=departure_date,
        earliest_time=earliest_time,
        passengers=passengers,
        needs_luggage=has_luggage,
        interstate=interstate,
    )
    return [
        to_response(r, pricing, passengers=passengers, needs_luggage=has_luggage)
        for r in rides
    ]


@router.get(
    "/{ride_id}",
    response_model=RideResponse,
    summary="Get a ride with its live price",
)
@limiter.limit(DEFAULT_LIMIT)
async def get_ride(
    request: Request,
    ride_id: int,
    db: AsyncSession = Depends(get_db),
    pricing: PricingEngine = Depends(get_pricing_engine),
):
    ride = await RideRepository(db).get_by_id(ride_id)
    if not ride:
        raise HTTPException(status_code=404, detail="Ride not found")
    return to_response(ride, pricing)


@router.patch(
    "/{ride_id}/cancel",
    response_model=RideResponse,
    summary="Cancel a ride",
    description=(
        "Transitions an ACTIVE or FULL ride to CANCELLED. "
        "Every paid booking on the ride is refunded."
    ),
)
@limiter.limit(DEFAULT_LIMIT)
async def cancel_ride(
    request: Request,
    ride_id: int,
    db: AsyncSession = Depends(get_db),
    pricing: PricingEngine = Depends(get_pricing_engine),
):
    ride = await RideRepository(db).get_by_id_for_update(ride_id)
    if not ride:
        raise HTTPException(status_code=404, detail="Ride not found")

    entity = to_entity(ride)
    entity.transition_to(RideStatus.CANCELLED)

    refunded = await BookingRepository(db).get_paid_for_ride(ride_id)
    for booking in refunded:
        booking.payment_status = PaymentStatus.REFUNDED

    ride.status = entity.status
    logger.info("Ride %d cancelled, %d bookings refunded", ride_id, len(refunded))
    return to_response(ride, pricing)


@router.patch(
    "/{ride_id}/complete",
    response_model=RideResponse,
    summary="Complete a ride",
)
@limiter.limit(DEFAULT_LIMIT)
async def complete_ride(
    request: Request,
    ride_id: int,
    db: AsyncSession = Depends(get_db),
    pricing: PricingEngine = Depends(get_pricing_engine),
):
    ride = await RideRepository(db).get_by_id_for_update(ride_id)
    if not ride:
        raise HTTPException(status_code=404, detail="Ride not found")

    entity = to_entity(ride)
    entity.transition_to(RideStatus.COMPLETED)
    ride.status = entity.status
    logger.info("Ride %d completed", ride_id)
    return to_response(ride, pricing)
