"""FastAPI dependency injection helpers."""

from sqlalchemy.ext.asyncio import AsyncSession

from ridealong.config import settings
from ridealong.domain.pricing import PricingEngine
from ridealong.infrastructure.database import async_session_factory


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_pricing_engine() -> PricingEngine:
    """Pricing policy as configured for this deployment."""
    return PricingEngine(
        commission_rate=settings.commission_rate,
        max_discount_rate=settings.max_discount_rate,
        rounding_unit=settings.price_rounding_unit,
    )
