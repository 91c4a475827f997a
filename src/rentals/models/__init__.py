"""
Pydantic models for the rentals service.
"""

from rentals.models.booking import (
    BOOK_CAR_REQUIRED_FIELDS,
    BookCarRequest,
    Booking,
    ExtendBookingRequest,
    UpdateBookingRequest,
)
from rentals.models.car import Availability, Car
from rentals.models.showroom import Showroom

__all__ = [
    "Availability",
    "BOOK_CAR_REQUIRED_FIELDS",
    "BookCarRequest",
    "Booking",
    "Car",
    "ExtendBookingRequest",
    "Showroom",
    "UpdateBookingRequest",
]
