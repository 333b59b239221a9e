"""
Domain error taxonomy.

Expected business outcomes are modelled as ``DomainError`` instances and
returned inside ``Err`` (see ``app.core.result``) instead of being raised.
Each error knows its wire code and HTTP status, so the route layer can turn
any of them into the standard error envelope without a lookup table.
"""
from typing import Any, Dict, Optional

from fastapi import status


class DomainError(Exception):
    code: str = "DOMAIN_ERROR"
    http_status: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __eq__(self, other):
        return type(self) is type(other) and self.message == other.message

    def __hash__(self):
        return hash((type(self), self.message))


# --- Not found (404) ------------------------------------------------------

class NotFoundError(DomainError):
    code = "NOT_FOUND"
    http_status = status.HTTP_404_NOT_FOUND
    entity = "Resource"

    def __init__(self, identifier: str):
        super().__init__(f"{self.entity} not found: {identifier}")
        self.identifier = identifier


class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"
    entity = "User"


class DriverNotFoundError(NotFoundError):
    code = "DRIVER_NOT_FOUND"
    entity = "Driver"


class BrandNotFoundError(NotFoundError):
    code = "BRAND_NOT_FOUND"
    entity = "Brand"


class VehicleNotFoundError(NotFoundError):
    code = "VEHICLE_NOT_FOUND"
    entity = "Vehicle"


class TripNotFoundError(NotFoundError):
    code = "TRIP_NOT_FOUND"
    entity = "Trip"


class InscriptionNotFoundError(NotFoundError):
    code = "INSCRIPTION_NOT_FOUND"
    entity = "Inscription"


# --- Conflicts (409) ------------------------------------------------------

class ConflictError(DomainError):
    code = "CONFLICT"
    http_status = status.HTTP_409_CONFLICT


class AlreadyInscribedError(ConflictError):
    code = "ALREADY_INSCRIBED"

    def __init__(self, user_id: str, trip_id: str):
        super().__init__(f"User {user_id} is already inscribed to trip {trip_id}")


class NoSeatsAvailableError(ConflictError):
    code = "NO_SEATS_AVAILABLE"

    def __init__(self, trip_id: str):
        super().__init__(f"No seats available on trip {trip_id}")


class SeatsBelowBookingsError(ConflictError):
    code = "SEATS_BELOW_BOOKINGS"

    def __init__(self, trip_id: str, seats: int, active: int):
        super().__init__(
            f"Trip {trip_id} already has {active} active bookings, cannot reduce seats to {seats}",
            details={"seats": seats, "active_inscriptions": active},
        )


class DriverAlreadyExistsError(ConflictError):
    code = "DRIVER_ALREADY_EXISTS"

    def __init__(self, user_id: str):
        super().__init__(f"A driver already exists for user \"{user_id}\"")


class VehicleAlreadyExistsError(ConflictError):
    code = "VEHICLE_ALREADY_EXISTS"

    def __init__(self, license_plate: str):
        super().__init__(f"A vehicle with license plate \"{license_plate}\" already exists")


class AccountAlreadyExistsError(ConflictError):
    code = "ACCOUNT_ALREADY_EXISTS"

    def __init__(self, email: str):
        super().__init__(f"An account with email \"{email}\" already exists")


class BrandAlreadyExistsError(ConflictError):
    code = "BRAND_ALREADY_EXISTS"

    def __init__(self, name: str):
        super().__init__(f"Brand already exists: {name}")


# --- Access (401/403) -----------------------------------------------------

class ForbiddenError(DomainError):
    code = "FORBIDDEN"
    http_status = status.HTTP_403_FORBIDDEN

    def __init__(self, resource: str, identifier: str, action: str = "modify"):
        super().__init__(f"You are not allowed to {action} {resource} {identifier}")


class InvalidCredentialsError(DomainError):
    code = "INVALID_CREDENTIALS"
    http_status = status.HTTP_401_UNAUTHORIZED

    def __init__(self):
        super().__init__("Invalid email or password")
