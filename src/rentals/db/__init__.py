"""
DynamoDB repositories for cars, showrooms and bookings.
"""

from rentals.db.bookings import BookingRepository
from rentals.db.cars import CarRepository
from rentals.db.showrooms import ShowroomRepository

__all__ = ["BookingRepository", "CarRepository", "ShowroomRepository"]
