"""REST handler: POST /api/bookcar/{bookingId}/return — ask the showroom owner to accept a return."""

from typing import Any

from rentals.http import api_handler, json_response, path_param
from rentals.services.booking import get_booking_service


@api_handler
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    get_booking_service().return_car(path_param(event, "bookingId"))
    return json_response(200, {"message": "Return request sent to showroom owner for approval"})
