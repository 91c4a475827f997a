"""REST handler: DELETE /api/bookcar/{bookingId}."""

from typing import Any

from rentals.http import api_handler, caller_id, json_response, path_param
from rentals.services.booking import get_booking_service


@api_handler
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    get_booking_service().cancel_booking(path_param(event, "bookingId"), caller_id(event))
    return json_response(200, {"message": "Booking canceled successfully."})
