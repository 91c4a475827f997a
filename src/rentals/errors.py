"""
Custom exceptions and error handling for the rentals service.

Defines application-specific exceptions with error codes and HTTP status codes
so every Lambda handler translates failures into responses the same way.

Usage:
    from rentals.errors import ConflictError, ErrorCode

    raise ConflictError("Car is not available for booking.", code=ErrorCode.CAR_UNAVAILABLE)
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for client-facing error messages."""

    # Authentication errors
    AUTH_FAILED = "AUTH_FAILED"

    # Lookup errors
    CAR_NOT_FOUND = "CAR_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    NO_BOOKINGS = "NO_BOOKINGS"

    # Booking state errors
    CAR_UNAVAILABLE = "CAR_UNAVAILABLE"
    BOOKING_OVERLAP = "BOOKING_OVERLAP"
    RENTAL_STARTED = "RENTAL_STARTED"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"
    DUPLICATE_BOOKING = "DUPLICATE_BOOKING"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELDS = "MISSING_FIELDS"
    INVALID_DATES = "INVALID_DATES"
    INVALID_REQUEST = "INVALID_REQUEST"
    PRICE_CALCULATION_FAILED = "PRICE_CALCULATION_FAILED"

    # System errors
    DATABASE_ERROR = "DATABASE_ERROR"
    INVOICE_FAILED = "INVOICE_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.AUTH_FAILED: "Authentication failed. Please sign in again.",
    ErrorCode.CAR_NOT_FOUND: "Car not found.",
    ErrorCode.BOOKING_NOT_FOUND: "Booking not found.",
    ErrorCode.NO_BOOKINGS: "No active bookings found.",
    ErrorCode.CAR_UNAVAILABLE: "Car is not available for booking.",
    ErrorCode.BOOKING_OVERLAP: "The car is already booked for the selected dates.",
    ErrorCode.RENTAL_STARTED: "Bookings can only be changed before the rental start time.",
    ErrorCode.CONCURRENT_MODIFICATION: "The booking was changed by another request. Please try again.",
    ErrorCode.DUPLICATE_BOOKING: "Duplicate booking detected.",
    ErrorCode.VALIDATION_ERROR: "Your request contains invalid information. Please check and try again.",
    ErrorCode.MISSING_FIELDS: "All fields are required.",
    ErrorCode.INVALID_DATES: "The rental dates are invalid.",
    ErrorCode.INVALID_REQUEST: "Invalid request format. Please try again.",
    ErrorCode.PRICE_CALCULATION_FAILED: "Failed to calculate total price.",
    ErrorCode.DATABASE_ERROR: "Database error occurred. Please try again later.",
    ErrorCode.INVOICE_FAILED: "Invoice could not be generated. Please try again later.",
    ErrorCode.INTERNAL_ERROR: "Server error. Please try again later.",
}


class RentalError(Exception):
    """Base exception for all rentals errors."""

    status_code: int = 500

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INTERNAL_ERROR, details: object = None):
        self.message = message
        self.code = code
        self.details = details
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(self.code, USER_MESSAGES[ErrorCode.INTERNAL_ERROR])


class ValidationError(RentalError):
    """Missing or malformed input, or an invalid date ordering."""

    status_code = 400

    def __init__(self, message: str, code: ErrorCode = ErrorCode.VALIDATION_ERROR, details: object = None):
        super().__init__(message, code, details)


class AuthenticationError(RentalError):
    """Caller identity missing from the request context."""

    status_code = 401

    def __init__(self, message: str, code: ErrorCode = ErrorCode.AUTH_FAILED, details: object = None):
        super().__init__(message, code, details)


class NotFoundError(RentalError):
    """Car, booking or user bookings could not be found."""

    status_code = 404


class ConflictError(RentalError):
    """Request conflicts with the current state of a car or booking."""

    status_code = 409


class InvoiceError(RentalError):
    """Invoice renderer failed or returned an unusable response."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVOICE_FAILED, details: object = None):
        super().__init__(message, code, details)


class ServerError(RentalError):
    """Persistence-layer fault or other unexpected failure."""

    pass
