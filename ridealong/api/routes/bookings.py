"""
Booking endpoints
=================

POST  /api/v1/rides/{ride_id}/bookings   -- book seats and settle payment (201)
GET   /api/v1/rides/{ride_id}/bookings   -- list a ride's bookings
PATCH /api/v1/bookings/{booking_id}/cancel -- cancel a booking, refund, free seats

Seat changes run under a per-ride Redis lock and a row lock on the ride,
and are committed before the Redis lock is released.
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ridealong.api.dependencies import get_db, get_pricing_engine
from ridealong.api.middleware import DEFAULT_LIMIT, limiter
from ridealong.api.routes.rides import to_entity
from ridealong.api.schemas import (
    BookingCreateRequest,
    BookingResponse,
    ErrorResponse,
)
from ridealong.config import settings
from ridealong.domain.enums import PaymentStatus, RideStatus
from ridealong.domain.pricing import PricingEngine
from ridealong.infrastructure.locks import DistributedLock, LockNotAcquired
from ridealong.infrastructure.models import BookingModel
from ridealong.infrastructure.redis_client import get_redis
from ridealong.infrastructure.repositories import (
    BookingRepository,
    RideRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings"])

_BUSY = "Ride is being booked by someone else, please retry"
_KEY_REUSED = "Idempotency key was already used for a different booking"


def _replay(
    existing: BookingModel, ride_id: int, body: BookingCreateRequest
) -> BookingModel:
    """Return the booking a retried request created, or 409 on key reuse."""
    if existing.ride_id != ride_id or existing.passenger_id != body.passenger_id:
        raise HTTPException(status_code=409, detail=_KEY_REUSED)
    return existing


@router.post(
    "/rides/{ride_id}/bookings",
    status_code=201,
    response_model=BookingResponse,
    summary="Book seats on a ride",
    responses={
        404: {"model": ErrorResponse, "description": "Ride or passenger not found."},
        409: {
            "model": ErrorResponse,
            "description": (
                "Ride not bookable, not enough seats, no luggage space, "
                "or idempotency key reused for another booking."
            ),
        },
    },
)
@limiter.limit(DEFAULT_LIMIT)
async def book_seats(
    request: Request,
    ride_id: int,
    body: BookingCreateRequest,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
    pricing: PricingEngine = Depends(get_pricing_engine),
):
    bookings = BookingRepository(db)

    # ── Idempotency guard ─────────────────────────────────────────
    if body.idempotency_key:
        existing = await bookings.get_by_idempotency_key(body.idempotency_key)
        if existing:
            return _replay(existing, ride_id, body)

    if not await UserRepository(db).get_by_id(body.passenger_id):
        raise HTTPException(status_code=404, detail="Passenger not found")

    try:
        async with DistributedLock.for_ride_seats(
            redis, ride_id, ttl_seconds=settings.booking_lock_ttl_seconds
        ):
            ride = await RideRepository(db).get_by_id_for_update(ride_id)
            if not ride:
                raise HTTPException(status_code=404, detail="Ride not found")

            # A retry may have committed while this request waited for the lock
            if body.idempotency_key:
                existing = await bookings.get_by_idempotency_key(body.idempotency_key)
                if existing:
                    return _replay(existing, ride_id, body)

            entity = to_entity(ride)
            if entity.status != RideStatus.ACTIVE:
                raise HTTPException(
                    status_code=409,
                    detail=f"Cannot book seats on a {entity.status.value} ride",
                )
            if body.has_luggage and not entity.allows_luggage:
                raise HTTPException(
                    status_code=409,
                    detail="This ride does not accommodate luggage",
                )
            available = entity.capacity.available_seats
            if body.seats > available:
                raise HTTPException(
                    status_code=409,
                    detail=f"Only {available} seat(s) available on this ride",
                )

            # Price at the occupancy the passenger saw, before their seats count
            price = pricing.current_price(
                entity.base_price_per_seat,
                entity.capacity.total_seats,
                entity.capacity.booked_seats,
            )
            luggage_fee = entity.luggage_surcharge.flat_fee if body.has_luggage else 0
            allocation = pricing.allocate(price, body.seats, luggage_fee)

            entity.book(body.seats)
            ride.booked_seats = entity.capacity.booked_seats
            ride.status = entity.status

            try:
                booking = await bookings.create(
                    BookingModel(
                        ride_id=ride_id,
                        passenger_id=body.passenger_id,
                        seats_booked=body.seats,
                        has_luggage=body.has_luggage,
                        price_per_seat=price,
                        luggage_fee=luggage_fee,
                        total_amount=allocation.total_amount,
                        platform_fee=allocation.platform_fee,
                        driver_earnings=allocation.driver_earnings,
                        payment_method=body.payment_method,
                        payment_status=PaymentStatus.PAID,
                        idempotency_key=body.idempotency_key,
                    )
                )
            except IntegrityError:
                # Same key committed concurrently on another ride's lock
                logger.warning(
                    "Idempotency key %r already used, ride %d",
                    body.idempotency_key,
                    ride_id,
                )
                raise HTTPException(status_code=409, detail=_KEY_REUSED)
            await db.commit()
    except LockNotAcquired:
        logger.warning("Seat lock busy for ride %d", ride_id)
        raise HTTPException(status_code=409, detail=_BUSY)

    logger.info(
        "Booking %d: %d seat(s) on ride %d, total=%d fee=%d driver=%d",
        booking.id,
        booking.seats_booked,
        ride_id,
        booking.total_amount,
        booking.platform_fee,
        booking.driver_earnings,
    )
    return booking


@router.get(
    "/rides/{ride_id}/bookings",
    response_model=list[BookingResponse],
    summary="List bookings on a ride",
)
@limiter.limit(DEFAULT_LIMIT)
async def list_bookings(
    request: Request,
    ride_id: int,
    db: AsyncSession = Depends(get_db),
):
    if not await RideRepository(db).get_by_id(ride_id):
        raise HTTPException(status_code=404, detail="Ride not found")
    return await BookingRepository(db).get_for_ride(ride_id)


@router.patch(
    "/bookings/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking",
    responses={
        404: {"model": ErrorResponse, "description": "Booking not found."},
        409: {"model": ErrorResponse, "description": "Booking not paid or ride closed."},
    },
    description=(
        "Refunds a paid booking and returns its seats to the ride. "
        "A FULL ride becomes bookable again."
    ),
)
@limiter.limit(DEFAULT_LIMIT)
async def cancel_booking(
    request: Request,
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
):
    booking = await BookingRepository(db).get_by_id(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    try:
        async with DistributedLock.for_ride_seats(
            redis, booking.ride_id, ttl_seconds=settings.booking_lock_ttl_seconds
        ):
            await db.refresh(booking)
            if booking.payment_status != PaymentStatus.PAID:
                raise HTTPException(
                    status_code=409,
                    detail=f"Booking is already {booking.payment_status.value}",
                )

            ride = await RideRepository(db).get_by_id_for_update(booking.ride_id)
            entity = to_entity(ride)
            entity.release(booking.seats_booked)

            ride.booked_seats = entity.capacity.booked_seats
            ride.status = entity.status
            booking.payment_status = PaymentStatus.REFUNDED
            await db.commit()
    except LockNotAcquired:
        logger.warning("Seat lock busy for ride %d", booking.ride_id)
        raise HTTPException(status_code=409, detail=_BUSY)

    logger.info(
        "Booking %d cancelled, %d seat(s) returned to ride %d",
        booking_id,
        booking.seats_booked,
        booking.ride_id,
    )
    return booking
