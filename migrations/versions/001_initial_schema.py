"""Initial schema: users, rides and bookings.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("rating", sa.Float, default=5.0),
        sa.Column("verified", sa.Boolean, default=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── rides ─────────────────────────────────────────────────────────
    op.create_table(
        "rides",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "driver_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("from_landmark", sa.String(120), nullable=False),
        sa.Column("from_area", sa.String(120), nullable=False),
        sa.Column("from_state", sa.String(60), nullable=False),
        sa.Column("to_landmark", sa.String(120), nullable=False),
        sa.Column("to_area", sa.String(120), nullable=False),
        sa.Column("to_state", sa.String(60), nullable=False),
        sa.Column("departure_date", sa.Date, nullable=False),
        sa.Column("departure_time", sa.Time, nullable=False),
        sa.Column("total_seats", sa.Integer, nullable=False),
        sa.Column("booked_seats", sa.Integer, default=0, nullable=False),
        sa.Column("base_price_per_seat", sa.Integer, nullable=False),
        sa.Column("allows_luggage", sa.Boolean, default=False, nullable=False),
        sa.Column("luggage_price", sa.Integer, nullable=True),
        sa.Column("is_interstate", sa.Boolean, default=False, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "ACTIVE",
                "FULL",
                "CANCELLED",
                "COMPLETED",
                name="ridestatus",
            ),
            default="ACTIVE",
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "booked_seats >= 0 AND booked_seats <= total_seats",
            name="ck_rides_seat_bounds",
        ),
    )
    op.create_index("idx_rides_status", "rides", ["status"])
    op.create_index("idx_rides_driver", "rides", ["driver_id"])
    op.create_index("idx_rides_departure", "rides", ["departure_date"])
    op.create_index("idx_rides_from_state", "rides", ["from_state"])
    op.create_index("idx_rides_to_state", "rides", ["to_state"])

    # ── bookings ──────────────────────────────────────────────────────
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "ride_id", sa.Integer, sa.ForeignKey("rides.id"), nullable=False
        ),
        sa.Column(
            "passenger_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("seats_booked", sa.Integer, nullable=False),
        sa.Column("has_luggage", sa.Boolean, default=False, nullable=False),
        sa.Column("price_per_seat", sa.Integer, nullable=False),
        sa.Column("luggage_fee", sa.Integer, default=0, nullable=False),
        sa.Column("total_amount", sa.Integer, nullable=False),
        sa.Column("platform_fee", sa.Integer, nullable=False),
        sa.Column("driver_earnings", sa.Integer, nullable=False),
        sa.Column(
            "payment_method",
            sa.Enum(
                "CARD",
                "BANK_TRANSFER",
                "USSD",
                "WALLET",
                name="paymentmethod",
            ),
            default="CARD",
            nullable=False,
        ),
        sa.Column(
            "payment_status",
            sa.Enum("PENDING", "PAID", "REFUNDED", name="paymentstatus"),
            default="PENDING",
            nullable=False,
        ),
        sa.Column("idempotency_key", sa.String(64), unique=True, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "platform_fee + driver_earnings = total_amount",
            name="ck_bookings_split_sums_to_total",
        ),
    )
    op.create_index("idx_bookings_ride", "bookings", ["ride_id"])
    op.create_index("idx_bookings_passenger", "bookings", ["passenger_id"])
    op.create_index("idx_bookings_idempotency", "bookings", ["idempotency_key"])


def downgrade() -> None:
    op.drop_table("bookings")
    op.drop_table("rides")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS paymentstatus")
    op.execute("DROP TYPE IF EXISTS paymentmethod")
    op.execute("DROP TYPE IF EXISTS ridestatus")
