"""REST handler: POST /api/bookcar."""

from typing import Any

from rentals.http import api_handler, caller_id, json_response, parse_body, request_origin
from rentals.services.booking import get_booking_service
from rentals.services.invoice import build_invoice_url


@api_handler
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    booking = get_booking_service().book_car(parse_body(event), caller_id(event))
    scheme, host = request_origin(event)
    return json_response(
        201,
        {
            "message": "Car booked successfully",
            "booking": booking.model_dump(by_alias=True, mode="json"),
            "invoiceUrl": build_invoice_url(scheme, host, booking.booking_id),
        },
    )
