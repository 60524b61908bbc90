"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 6 sample users (drivers and passengers)
  - 5 sample rides around Abuja, plus Lagos -> Abuja and Kano -> Abuja
  - paid bookings matching each ride's booked seats, priced by the engine
"""

import asyncio
from datetime import date, time, timedelta

from sqlalchemy import text

from ridealong.config import settings
from ridealong.domain.entities import Location, Ride, RideCapacity
from ridealong.domain.enums import PaymentMethod, PaymentStatus
from ridealong.domain.pricing import PricingEngine
from ridealong.infrastructure.database import (
    async_session_factory,
    create_tables,
    dispose_engine,
)
from ridealong.infrastructure.models import BookingModel, RideModel, UserModel


USERS = [
    {"name": "Kemi Adebayo", "email": "kemi@example.com", "phone": "+2348012345678", "rating": 4.8, "verified": True},
    {"name": "Chidi Okonkwo", "email": "chidi@example.com", "phone": "+2348023456789", "rating": 4.6, "verified": True},
    {"name": "Fatima Ibrahim", "email": "fatima@example.com", "phone": "+2348034567890", "rating": 4.9, "verified": True},
    {"name": "Tunde Bakare", "email": "tunde@example.com", "phone": "+2348045678901", "rating": 4.7, "verified": True},
    {"name": "Ngozi Eze", "email": "ngozi@example.com", "phone": "+2348056789012", "rating": 4.5, "verified": False},
    {"name": "Musa Abdullahi", "email": "musa@example.com", "phone": "+2348067890123", "rating": 4.4, "verified": True},
]

TODAY = date.today()
TOMORROW = TODAY + timedelta(days=1)

RIDES = [
    {
        "driver": 0,
        "origin": Location("Berger Junction", "Wuse", "Abuja FCT"),
        "destination": Location("CBN Headquarters", "Central Business District", "Abuja FCT"),
        "date": TODAY, "time": time(8, 0),
        "seats": 4, "booked": 1, "base": 1000,
        "luggage": 300,
        "description": "Morning commute, leaving sharp at 8.",
    },
    {
        "driver": 3,
        "origin": Location("Shoprite Mall", "Gwarinpa", "Abuja FCT"),
        "destination": Location("Federal Secretariat", "Central Business District", "Abuja FCT"),
        "date": TODAY, "time": time(17, 30),
        "seats": 3, "booked": 0, "base": 800,
        "luggage": None,
        "description": None,
    },
    {
        "driver": 5,
        "origin": Location("Lagos Island", "Victoria Island", "Lagos"),
        "destination": Location("Berger Junction", "Wuse", "Abuja FCT"),
        "date": TOMORROW, "time": time(7, 15),
        "seats": 4, "booked": 2, "base": 8500,
        "luggage": 1000,
        "description": "Long trip, two rest stops on the way.",
    },
    {
        "driver": 5,
        "origin": Location("Kano Central", "Sabon Gari", "Kano"),
        "destination": Location("Jabi Lake Mall", "Jabi", "Abuja FCT"),
        "date": TOMORROW, "time": time(6, 0),
        "seats": 5, "booked": 0, "base": 6500,
        "luggage": 800,
        "description": None,
    },
    {
        "driver": 0,
        "origin": Location("University of Abuja", "Gwagwalada", "Abuja FCT"),
        "destination": Location("Maitama District Hospital", "Maitama", "Abuja FCT"),
        "date": TODAY, "time": time(14, 0),
        "seats": 4, "booked": 0, "base": 1200,
        "luggage": 250,
        "description": None,
    },
]

# Passengers that fill the pre-booked seats, one seat each
PASSENGERS = [1, 2, 4]


async def seed():
    engine = PricingEngine(
        commission_rate=settings.commission_rate,
        max_discount_rate=settings.max_discount_rate,
        rounding_unit=settings.price_rounding_unit,
    )

    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM users"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Users ─────────────────────────────────────────────────────
        user_models = [UserModel(**u) for u in USERS]
        session.add_all(user_models)
        await session.flush()
        print(f"  Created {len(user_models)} users")

        # ── Rides and their bookings ──────────────────────────────────
        booking_count = 0
        for r in RIDES:
            entity = Ride(
                driver_id=user_models[r["driver"]].id,
                origin=r["origin"],
                destination=r["destination"],
                capacity=RideCapacity(r["seats"]),
                base_price_per_seat=r["base"],
                allows_luggage=r["luggage"] is not None,
                luggage_price=r["luggage"],
            )
            ride = RideModel(
                driver_id=entity.driver_id,
                from_landmark=entity.origin.landmark,
                from_area=entity.origin.area,
                from_state=entity.origin.state,
                to_landmark=entity.destination.landmark,
                to_area=entity.destination.area,
                to_state=entity.destination.state,
                departure_date=r["date"],
                departure_time=r["time"],
                total_seats=entity.capacity.total_seats,
                booked_seats=0,
                base_price_per_seat=entity.base_price_per_seat,
                allows_luggage=entity.allows_luggage,
                luggage_price=entity.luggage_price,
                is_interstate=entity.is_interstate,
                description=r["description"],
            )
            session.add(ride)
            await session.flush()

            for passenger in PASSENGERS[: r["booked"]]:
                price = engine.current_price(
                    entity.base_price_per_seat,
                    entity.capacity.total_seats,
                    entity.capacity.booked_seats,
                )
                allocation = engine.allocate(price, 1)
                entity.book(1)
                session.add(
                    BookingModel(
                        ride_id=ride.id,
                        passenger_id=user_models[passenger].id,
                        seats_booked=1,
                        price_per_seat=price,
                        total_amount=allocation.total_amount,
                        platform_fee=allocation.platform_fee,
                        driver_earnings=allocation.driver_earnings,
                        payment_method=PaymentMethod.CARD,
                        payment_status=PaymentStatus.PAID,
                    )
                )
                booking_count += 1

            ride.booked_seats = entity.capacity.booked_seats
            ride.status = entity.status
        await session.flush()
        print(f"  Created {len(RIDES)} rides")
        print(f"  Created {booking_count} bookings")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await create_tables()
    await seed()
    await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
