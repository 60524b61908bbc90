"""
FastAPI application factory.

* Registers routes for rides, bookings, pricing and admin.
* Maps domain errors to HTTP responses (pricing input -> 422,
  illegal ride transition -> 409).
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from ridealong.api.middleware import limiter
from ridealong.api.routes import admin, bookings, pricing, rides
from ridealong.config import settings
from ridealong.domain.exceptions import InvalidStateTransition, PricingError
from ridealong.infrastructure import database, redis_client

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release DB and Redis pools on shutdown."""
    logger.info(
        "Pricing policy: commission=%.2f max_discount=%.2f unit=%d %s",
        settings.commission_rate,
        settings.max_discount_rate,
        settings.price_rounding_unit,
        settings.currency,
    )
    yield
    await redis_client.close_pool()
    await database.dispose_engine()


async def _pricing_error_handler(request: Request, exc: PricingError):
    logger.info("Rejected pricing input on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


async def _state_error_handler(request: Request, exc: InvalidStateTransition):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


def create_app() -> FastAPI:
    app = FastAPI(
        title="Ridealong Marketplace API",
        description=(
            "Carpooling marketplace: drivers post rides, passengers search "
            "and book seats.  Seat prices drop with occupancy (max 5 %) and "
            "every booking is split between platform fee and driver earnings."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Domain errors
    app.add_exception_handler(PricingError, _pricing_error_handler)
    app.add_exception_handler(InvalidStateTransition, _state_error_handler)

    # Routers
    app.include_router(rides.router, prefix="/api/v1")
    app.include_router(bookings.router, prefix="/api/v1")
    app.include_router(pricing.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
