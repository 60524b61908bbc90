"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.
"""

from __future__ import annotations

from datetime import date, time
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import BookingModel, RideModel, UserModel
from ridealong.domain.enums import PaymentStatus, RideStatus


class RideRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, ride: RideModel) -> RideModel:
        self.session.add(ride)
        await self.session.flush()
        await self.session.refresh(ride)
        return ride

    async def get_by_id(self, ride_id: int) -> Optional[RideModel]:
        return await self.session.get(RideModel, ride_id)

    async def get_by_id_for_update(self, ride_id: int) -> Optional[RideModel]:
        """SELECT ... FOR UPDATE so seat counts change one booking at a time."""
        result = await self.session.execute(
            select(RideModel).where(RideModel.id == ride_id).with_for_update()
        )
        return result.scalar_one_or_none()

    async def search(
        self,
        *,
        from_state: str | None = None,
        from_area: str | None = None,
        to_state: str | None = None,
        to_area: str | None = None,
        departure_date: date | None = None,
        earliest_time: time | None = None,
        passengers: int = 1,
        needs_luggage: bool = False,
        interstate: bool | None = None,
    ) -> list[RideModel]:
        """Bookable rides matching the filters, soonest first.

        Place filters are case-insensitive substring matches.
        """
        query = select(RideModel).where(
            RideModel.status == RideStatus.ACTIVE,
            RideModel.total_seats - RideModel.booked_seats >= passengers,
        )
        for column, needle in (
            (RideModel.from_state, from_state),
            (RideModel.from_area, from_area),
            (RideModel.to_state, to_state),
            (RideModel.to_area, to_area),
        ):
            if needle:
                query = query.where(column.ilike(f"%{needle}%"))
        if departure_date:
            query = query.where(RideModel.departure_date == departure_date)
        if earliest_time:
            query = query.where(RideModel.departure_time >= earliest_time)
        if needs_luggage:
            query = query.where(RideModel.allows_luggage.is_(True))
        if interstate is not None:
            query = query.where(RideModel.is_interstate.is_(interstate))

        result = await self.session.execute(
            query.order_by(
                RideModel.departure_date, RideModel.departure_time, RideModel.id
            )
        )
        return list(result.scalars().all())


class BookingRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, booking: BookingModel) -> BookingModel:
        self.session.add(booking)
        await self.session.flush()
        await self.session.refresh(booking)
        return booking

    async def get_by_id(self, booking_id: int) -> Optional[BookingModel]:
        return await self.session.get(BookingModel, booking_id)

    async def get_by_idempotency_key(self, key: str) -> Optional[BookingModel]:
        result = await self.session.execute(
            select(BookingModel).where(BookingModel.idempotency_key == key)
        )
        return result.scalar_one_or_none()

    async def get_for_ride(self, ride_id: int) -> list[BookingModel]:
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.ride_id == ride_id)
            .order_by(BookingModel.id)
        )
        return list(result.scalars().all())

    async def get_paid_for_ride(self, ride_id: int) -> list[BookingModel]:
        result = await self.session.execute(
            select(BookingModel).where(
                BookingModel.ride_id == ride_id,
                BookingModel.payment_status == PaymentStatus.PAID,
            )
        )
        return list(result.scalars().all())


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)
