"""REST handler: GET /api/bookcar/user — the caller's bookings with car and showroom details."""

from typing import Any

from rentals.http import api_handler, caller_id, json_response
from rentals.services.booking import get_booking_service


@api_handler
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    return json_response(200, get_booking_service().get_user_bookings(caller_id(event)))
