"""
Core business logic package for the car rental bookings service.

All business logic, data access, and service integrations live here.
Lambda handlers in src/handlers/ are thin wrappers that call into rentals/.
"""

__all__: list[str] = []
