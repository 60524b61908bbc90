"""
Admin / observability endpoints
===============================

GET /api/v1/admin/health        -- simple health check
GET /api/v1/admin/pricing-policy -- the pricing constants this instance runs with
"""

from fastapi import APIRouter, Depends

from ridealong.api.dependencies import get_pricing_engine
from ridealong.api.schemas import HealthResponse, PricingPolicyResponse
from ridealong.config import settings
from ridealong.domain.pricing import PricingEngine

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()


@router.get(
    "/pricing-policy",
    response_model=PricingPolicyResponse,
    summary="Active pricing policy",
)
async def pricing_policy(pricing: PricingEngine = Depends(get_pricing_engine)):
    return PricingPolicyResponse(
        commission_rate=pricing.commission_rate,
        max_discount_rate=pricing.max_discount_rate,
        rounding_unit=pricing.rounding_unit,
        default_luggage_price=settings.default_luggage_price,
        currency=settings.currency,
    )
