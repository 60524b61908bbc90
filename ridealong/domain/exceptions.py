"""Domain errors raised by pricing and ride lifecycle logic."""


class PricingError(ValueError):
    """Base class for malformed pricing inputs."""


class InvalidCapacity(PricingError):
    """Raised when seat counts are impossible (non-positive total, overbooked...)."""


class InvalidPaymentInput(PricingError):
    """Raised when a price, seat count, fee or commission rate is malformed."""


class InvalidStateTransition(Exception):
    """Raised when a ride status change violates the state machine."""
