"""
SQLAlchemy ORM models  (maps to PostgreSQL).

Tables
------
* ``users``     -- drivers and passengers
* ``rides``     -- rides posted by drivers, with live seat counts
* ``bookings``  -- seats taken on a ride, with the settled payment split

Only the driver-set base price is stored on a ride; the current
per-seat price is always recomputed from occupancy.

Indexes
-------
* **B-Tree** on ``status``, ``departure_date``, ``from_state``, ``to_state``
  for ride search, and on ``ride_id``, ``passenger_id``, ``idempotency_key``
  for booking look-ups.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    func,
)

from .database import Base
from ridealong.domain.enums import PaymentMethod, PaymentStatus, RideStatus


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(32), nullable=True)
    rating = Column(Float, default=5.0)
    verified = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class RideModel(Base):
    __tablename__ = "rides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    from_landmark = Column(String(120), nullable=False, default="")
    from_area = Column(String(120), nullable=False)
    from_state = Column(String(60), nullable=False)
    to_landmark = Column(String(120), nullable=False, default="")
    to_area = Column(String(120), nullable=False)
    to_state = Column(String(60), nullable=False)

    departure_date = Column(Date, nullable=False)
    departure_time = Column(Time, nullable=False)

    total_seats = Column(Integer, nullable=False)
    booked_seats = Column(Integer, default=0, nullable=False)
    base_price_per_seat = Column(Integer, nullable=False)

    allows_luggage = Column(Boolean, default=False, nullable=False)
    luggage_price = Column(Integer, nullable=True)
    is_interstate = Column(Boolean, default=False, nullable=False)
    description = Column(Text, nullable=True)

    status = Column(Enum(RideStatus), default=RideStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_rides_status", "status"),
        Index("idx_rides_driver", "driver_id"),
        Index("idx_rides_departure", "departure_date"),
        Index("idx_rides_from_state", "from_state"),
        Index("idx_rides_to_state", "to_state"),
        CheckConstraint(
            "booked_seats >= 0 AND booked_seats <= total_seats",
            name="ck_rides_seat_bounds",
        ),
    )


class BookingModel(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ride_id = Column(Integer, ForeignKey("rides.id"), nullable=False)
    passenger_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    seats_booked = Column(Integer, nullable=False)
    has_luggage = Column(Boolean, default=False, nullable=False)

    # Settlement snapshot at confirmation time
    price_per_seat = Column(Integer, nullable=False)
    luggage_fee = Column(Integer, default=0, nullable=False)
    total_amount = Column(Integer, nullable=False)
    platform_fee = Column(Integer, nullable=False)
    driver_earnings = Column(Integer, nullable=False)

    payment_method = Column(
        Enum(PaymentMethod), default=PaymentMethod.CARD, nullable=False
    )
    payment_status = Column(
        Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False
    )
    idempotency_key = Column(String(64), unique=True, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_bookings_ride", "ride_id"),
        Index("idx_bookings_passenger", "passenger_id"),
        Index("idx_bookings_idempotency", "idempotency_key"),
        CheckConstraint(
            "platform_fee + driver_earnings = total_amount",
            name="ck_bookings_split_sums_to_total",
        ),
    )
