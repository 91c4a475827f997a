"""REST handler: PUT /api/bookcar/{bookingId}."""

from typing import Any

from rentals.http import api_handler, json_response, parse_body, path_param
from rentals.services.booking import get_booking_service


@api_handler
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    booking = get_booking_service().update_booking(path_param(event, "bookingId"), parse_body(event))
    return json_response(
        200,
        {"message": "Booking updated successfully", "booking": booking.model_dump(by_alias=True, mode="json")},
    )
