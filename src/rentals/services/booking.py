"""
Booking lifecycle: book, list, update, extend, cancel and return.

Each operation validates its payload, reads the car and existing bookings,
computes the price, and persists through the repositories. Side effects
(invoice rendering, owner notification) go through injected collaborators.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, TypeVar
from uuid import uuid4

import pydantic

from rentals.clients import get_apigw_client, get_dynamo_client, get_lambda_client
from rentals.config import get_config
from rentals.db import BookingRepository, CarRepository, ShowroomRepository
from rentals.errors import (
    AuthenticationError,
    ConflictError,
    ErrorCode,
    InvoiceError,
    NotFoundError,
    RentalError,
    ValidationError,
)
from rentals.models import (
    BOOK_CAR_REQUIRED_FIELDS,
    Availability,
    BookCarRequest,
    Booking,
    Car,
    ExtendBookingRequest,
    UpdateBookingRequest,
)
from rentals.rental_time import format_12_hour, rental_price, rental_timezone, to_local_datetime
from rentals.services.invoice import InvoiceRenderer, LambdaInvoiceRenderer, invoice_snapshot
from rentals.services.notifier import Notifier, WebSocketNotifier, user_channel

logger = logging.getLogger(__name__)

RETURN_REQUEST_MESSAGE = "Car return request received"

_Request = TypeVar("_Request", bound=pydantic.BaseModel)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _error_details(error: pydantic.ValidationError) -> list[dict[str, str]]:
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]


def _parse(model: type[_Request], payload: dict[str, Any]) -> _Request:
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError("Invalid input data.", code=ErrorCode.INVALID_REQUEST, details=_error_details(e)) from e


class BookingService:
    def __init__(
        self,
        cars: CarRepository,
        showrooms: ShowroomRepository,
        bookings: BookingRepository,
        invoices: InvoiceRenderer,
        notifier: Notifier,
        rental_tz: timezone,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._cars = cars
        self._showrooms = showrooms
        self._bookings = bookings
        self._invoices = invoices
        self._notifier = notifier
        self._tz = rental_tz
        self._clock = clock

    def book_car(self, payload: dict[str, Any], user_id: str | None) -> Booking:
        if not user_id:
            raise AuthenticationError("Caller identity missing from request context")

        missing = [field for field in BOOK_CAR_REQUIRED_FIELDS if not payload.get(field)]
        if missing:
            raise ValidationError(
                "All fields are required.", code=ErrorCode.MISSING_FIELDS, details={"missing": missing}
            )

        request = _parse(BookCarRequest, payload)

        car = self._cars.get(request.car_id)
        if car is None:
            raise NotFoundError("Car not found.", code=ErrorCode.CAR_NOT_FOUND)
        if car.availability is not Availability.AVAILABLE:
            raise ConflictError("Car is not available for booking.", code=ErrorCode.CAR_UNAVAILABLE)

        start_date = request.rental_start_date.isoformat()
        end_date = request.rental_end_date.isoformat()
        if self._bookings.find_overlapping(car.car_id, start_date, end_date):
            raise ConflictError("The car is already booked for the selected dates.", code=ErrorCode.BOOKING_OVERLAP)

        start = to_local_datetime(request.rental_start_date, request.rental_start_time, self._tz)
        end = to_local_datetime(request.rental_end_date, request.rental_end_time, self._tz)

        now = self._clock()
        if start < now:
            raise ValidationError("Rental start date must be in the present or future.", code=ErrorCode.INVALID_DATES)
        if end < start:
            raise ValidationError("End date must be after the start date.", code=ErrorCode.INVALID_DATES)

        timestamp = now.isoformat()
        booking = Booking(
            booking_id=str(uuid4()),
            car_id=car.car_id,
            user_id=user_id,
            showroom_id=request.showroom_id,
            rental_start_date=start_date,
            rental_start_time=format_12_hour(request.rental_start_time),
            rental_end_date=end_date,
            rental_end_time=format_12_hour(request.rental_end_time),
            total_price=rental_price(start, end, car.rent_rate),
            created_at=timestamp,
            updated_at=timestamp,
        )
        self._bookings.create(booking, car)
        logger.info(
            "Car %s booked by user %s as %s (%.2f)", car.car_id, user_id, booking.booking_id, booking.total_price
        )

        self._render_invoice(booking)
        return booking

    def get_user_bookings(self, user_id: str | None) -> list[dict[str, Any]]:
        if not user_id:
            raise ValidationError("User ID is required", code=ErrorCode.INVALID_REQUEST)

        bookings = self._bookings.list_for_user(user_id)
        if not bookings:
            raise NotFoundError("No active bookings found", code=ErrorCode.NO_BOOKINGS)

        cars = self._cars.get_many([b.car_id for b in bookings])
        showrooms = self._showrooms.get_many([b.showroom_id for b in bookings])

        results = []
        for booking in bookings:
            car = cars.get(booking.car_id)
            showroom = showrooms.get(booking.showroom_id)
            results.append(
                {
                    **booking.model_dump(by_alias=True, mode="json"),
                    "carDetails": car.model_dump(by_alias=True, mode="json") if car else None,
                    "showroomDetails": showroom.model_dump(by_alias=True, mode="json") if showroom else None,
                }
            )
        return results

    def update_booking(self, booking_id: str, payload: dict[str, Any]) -> Booking:
        booking = self._require_booking(booking_id)
        # Snapshot bookingSeq before the overlap query; save() fails if anyone writes the car after this.
        car = self._require_car(booking.car_id)

        previous_start = self._start_of(booking)
        if self._clock() >= previous_start:
            raise ConflictError(
                "You can only update the booking before the rental start time.",
                code=ErrorCode.RENTAL_STARTED,
            )

        request = _parse(UpdateBookingRequest, payload)
        start_date = request.rental_start_date.isoformat() if request.rental_start_date else booking.rental_start_date
        end_date = request.rental_end_date.isoformat() if request.rental_end_date else booking.rental_end_date
        start = to_local_datetime(start_date, request.rental_start_time or booking.rental_start_time, self._tz)
        end = to_local_datetime(end_date, request.rental_end_time or booking.rental_end_time, self._tz)

        if end <= start:
            raise ValidationError(
                "Rental end time must be after the rental start time.",
                code=ErrorCode.INVALID_DATES,
            )
        if start <= previous_start:
            raise ValidationError(
                "New rental start time must be after the previous rental start time.",
                code=ErrorCode.INVALID_DATES,
            )

        if self._bookings.find_overlapping(booking.car_id, start_date, end_date, exclude_booking_id=booking_id):
            raise ConflictError("The car is already booked for the selected dates.", code=ErrorCode.BOOKING_OVERLAP)

        updated = booking.model_copy(
            update={
                "rental_start_date": start_date,
                "rental_start_time": format_12_hour(start.time()),
                "rental_end_date": end_date,
                "rental_end_time": format_12_hour(end.time()),
                "total_price": rental_price(start, end, car.rent_rate),
                "version": booking.version + 1,
                "updated_at": self._clock().isoformat(),
            }
        )
        self._bookings.save(updated, booking.version, car)
        logger.info("Booking %s updated (%.2f)", booking_id, updated.total_price)
        return updated

    def extend_booking(self, booking_id: str, payload: dict[str, Any]) -> Booking:
        booking = self._require_booking(booking_id)
        # Snapshot bookingSeq before the overlap query; save() fails if anyone writes the car after this.
        car = self._require_car(booking.car_id)

        start = self._start_of(booking)
        if self._clock() >= start:
            raise ConflictError(
                "You can only extend the booking before the rental start time.",
                code=ErrorCode.RENTAL_STARTED,
            )

        try:
            request = ExtendBookingRequest.model_validate(payload)
        except pydantic.ValidationError as e:
            fields = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
            message = (
                "Invalid rental end date format."
                if fields & {"rentalEndDate", "rental_end_date"}
                else "Invalid rental end time format."
            )
            raise ValidationError(message, code=ErrorCode.INVALID_REQUEST, details=_error_details(e)) from e

        end_date = request.rental_end_date.isoformat() if request.rental_end_date else booking.rental_end_date
        end = to_local_datetime(end_date, request.rental_end_time or booking.rental_end_time, self._tz)
        if end <= start:
            raise ValidationError(
                "Rental end time must be after the rental start time.",
                code=ErrorCode.INVALID_DATES,
            )

        if self._bookings.find_overlapping(
            booking.car_id, booking.rental_start_date, end_date, exclude_booking_id=booking_id
        ):
            raise ConflictError("The car is already booked for the selected dates.", code=ErrorCode.BOOKING_OVERLAP)

        total_price = rental_price(start, end, car.rent_rate)
        # Also rejects NaN.
        if not total_price > 0:
            raise ValidationError("Failed to calculate total price.", code=ErrorCode.PRICE_CALCULATION_FAILED)

        updated = booking.model_copy(
            update={
                "rental_end_date": end_date,
                "rental_end_time": format_12_hour(end.time()),
                "total_price": total_price,
                "version": booking.version + 1,
                "updated_at": self._clock().isoformat(),
            }
        )
        self._bookings.save(updated, booking.version, car)
        logger.info("Booking %s extended to %s (%.2f)", booking_id, end_date, total_price)

        self._render_invoice(updated)
        return updated

    def cancel_booking(self, booking_id: str, user_id: str | None) -> None:
        if not user_id:
            raise AuthenticationError("Caller identity missing from request context")

        booking = self._bookings.get(booking_id)
        if booking is None or booking.user_id != user_id:
            raise NotFoundError("Booking not found or unauthorized access.", code=ErrorCode.BOOKING_NOT_FOUND)

        try:
            car = self._cars.get(booking.car_id)
        except RentalError:
            logger.warning(
                "Car %s lookup failed; cancelling booking %s anyway", booking.car_id, booking_id, exc_info=True
            )
            car = None

        self._bookings.delete_for_user(booking, car)
        logger.info("Booking %s cancelled by user %s", booking_id, user_id)

    def return_car(self, booking_id: str) -> None:
        booking = self._require_booking(booking_id)

        car = self._require_car(booking.car_id)
        if not car.user_id:
            raise NotFoundError("Car owner not found.", code=ErrorCode.CAR_NOT_FOUND)

        self._notifier.emit(user_channel(car.user_id), {"message": RETURN_REQUEST_MESSAGE})
        logger.info("Return requested for booking %s, owner %s notified", booking_id, car.user_id)

    def _require_booking(self, booking_id: str) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found", code=ErrorCode.BOOKING_NOT_FOUND)
        return booking

    def _require_car(self, car_id: str) -> Car:
        car = self._cars.get(car_id)
        if car is None:
            raise NotFoundError("Car not found.", code=ErrorCode.CAR_NOT_FOUND)
        return car

    def _start_of(self, booking: Booking) -> datetime:
        return to_local_datetime(booking.rental_start_date, booking.rental_start_time, self._tz)

    def _render_invoice(self, booking: Booking) -> None:
        # The booking is already committed; a missing invoice is regenerated on extend.
        try:
            self._invoices.create_invoice(invoice_snapshot(booking))
        except InvoiceError:
            logger.exception("Invoice generation failed for booking %s", booking.booking_id)


@lru_cache(maxsize=1)
def get_booking_service() -> BookingService:
    config = get_config()
    dynamo_client = get_dynamo_client()
    cars = CarRepository(dynamo_client, config.cars_table)
    return BookingService(
        cars=cars,
        showrooms=ShowroomRepository(dynamo_client, config.showrooms_table),
        bookings=BookingRepository(dynamo_client, config.bookings_table, cars),
        invoices=LambdaInvoiceRenderer(get_lambda_client(), config.invoice_function_name),
        notifier=WebSocketNotifier(dynamo_client, get_apigw_client(), config.connections_table),
        rental_tz=rental_timezone(config.rental_utc_offset_hours),
    )
