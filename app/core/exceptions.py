from typing import List, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class NotFoundError(DomainError):
    """Raised when a requested record does not exist."""


class ConcurrencyConflictError(DomainError):
    """Raised when a record kept changing underneath a conditional update."""


class PunchVerificationError(DomainError):
    """Raised when a punch fails the Wi-Fi and/or location check."""

    def __init__(
        self,
        failures: List[str],
        distance_meters: Optional[float],
        allowed_radius: float,
        wifi_valid: bool,
        location_valid: bool,
    ):
        super().__init__("; ".join(failures))
        self.failures = failures
        self.distance_meters = distance_meters
        self.allowed_radius = allowed_radius
        self.wifi_valid = wifi_valid
        self.location_valid = location_valid
