"""Domain enumerations and state-transition rules."""

import enum


class RideStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    FULL = "FULL"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


# State machine: maps current status -> set of valid next statuses
RIDE_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.ACTIVE: {
        RideStatus.FULL,
        RideStatus.CANCELLED,
        RideStatus.COMPLETED,
    },
    RideStatus.FULL: {
        RideStatus.ACTIVE,
        RideStatus.CANCELLED,
        RideStatus.COMPLETED,
    },
    RideStatus.CANCELLED: set(),
    RideStatus.COMPLETED: set(),
}


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


class PaymentMethod(str, enum.Enum):
    CARD = "CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    USSD = "USSD"
    WALLET = "WALLET"


class PriceTier(str, enum.Enum):
    ECONOMY = "ECONOMY"
    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"
