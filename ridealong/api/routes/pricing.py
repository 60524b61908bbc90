"""
Pricing endpoints (stateless previews)
======================================

GET  /api/v1/pricing/quote            -- live per-seat price at an occupancy
GET  /api/v1/pricing/schedule         -- price at every occupancy level
GET  /api/v1/pricing/earnings-preview -- what a driver keeps per seat
POST /api/v1/pricing/allocation       -- platform fee / driver split of a charge
POST /api/v1/pricing/advice           -- economy / standard / premium suggestions
"""

from fastapi import APIRouter, Depends, Query, Request

from ridealong.api.dependencies import get_pricing_engine
from ridealong.api.middleware import DEFAULT_LIMIT, limiter
from ridealong.api.schemas import (
    AllocationRequest,
    AllocationResponse,
    EarningsPreviewResponse,
    PriceQuoteResponse,
    PriceSuggestionResponse,
    PricingAdviceRequest,
)
from ridealong.config import settings
from ridealong.domain.entities import PriceQuote
from ridealong.domain.pricing import PricingEngine

router = APIRouter(prefix="/pricing", tags=["pricing"])


def _quote_response(
    quote: PriceQuote, total_seats: int, booked_seats: int
) -> PriceQuoteResponse:
    return PriceQuoteResponse(
        base_price_per_seat=quote.base_price_per_seat,
        total_seats=total_seats,
        booked_seats=booked_seats,
        occupancy_rate=quote.occupancy_rate,
        current_price_per_seat=quote.current_price_per_seat,
        discount_percentage=PricingEngine.discount_percentage(
            quote.base_price_per_seat, quote.current_price_per_seat
        ),
    )


@router.get("/quote", response_model=PriceQuoteResponse, summary="Quote a seat price")
@limiter.limit(DEFAULT_LIMIT)
async def quote(
    request: Request,
    base_price_per_seat: int = Query(..., ge=0),
    total_seats: int = Query(..., ge=1),
    booked_seats: int = Query(0, ge=0),
    pricing: PricingEngine = Depends(get_pricing_engine),
):
    # booked_seats > total_seats is rejected by the engine (422)
    result = pricing.quote(base_price_per_seat, total_seats, booked_seats)
    return _quote_response(result, total_seats, booked_seats)


@router.get(
    "/schedule",
    response_model=list[PriceQuoteResponse],
    summary="Seat price for every occupancy level",
)
@limiter.limit(DEFAULT_LIMIT)
async def schedule(
    request: Request,
    base_price_per_seat: int = Query(..., ge=0),
    total_seats: int = Query(..., ge=1, le=8),
    pricing: PricingEngine = Depends(get_pricing_engine),
):
    return [
        _quote_response(q, total_seats, booked)
        for booked, q in enumerate(
            pricing.schedule(base_price_per_seat, total_seats)
        )
    ]


@router.get(
    "/earnings-preview",
    response_model=EarningsPreviewResponse,
    summary="Driver earnings per seat after commission",
)
@limiter.limit(DEFAULT_LIMIT)
async def earnings_preview(
    request: Request,
    price_per_seat: int = Query(..., ge=0),
    pricing: PricingEngine = Depends(get_pricing_engine),
):
    return EarningsPreviewResponse(
        price_per_seat=price_per_seat,
        driver_earnings=pricing.advertised_earnings(price_per_seat),
        platform_fee=pricing.advertised_commission(price_per_seat),
        commission_rate=pricing.commission_rate,
    )


@router.post(
    "/allocation",
    response_model=AllocationResponse,
    summary="Split a booking charge between platform and driver",
)
@limiter.limit(DEFAULT_LIMIT)
async def allocation(
    request: Request,
    body: AllocationRequest,
    pricing: PricingEngine = Depends(get_pricing_engine),
):
    result = pricing.allocate(body.price_per_seat, body.seats_booked, body.luggage_fee)
    return AllocationResponse(
        total_amount=result.total_amount,
        platform_fee=result.platform_fee,
        driver_earnings=result.driver_earnings,
        currency=settings.currency,
    )


@router.post(
    "/advice",
    response_model=list[PriceSuggestionResponse],
    summary="Suggested seat prices for a route",
)
@limiter.limit(DEFAULT_LIMIT)
async def advice(
    request: Request,
    body: PricingAdviceRequest,
    pricing: PricingEngine = Depends(get_pricing_engine),
):
    return [
        PriceSuggestionResponse(
            tier=s.tier,
            price_per_seat=s.price_per_seat,
            driver_earnings=s.driver_earnings,
            platform_fee=s.platform_fee,
        )
        for s in pricing.advice(
            body.distance_km, body.duration_minutes, body.is_interstate
        )
    ]
