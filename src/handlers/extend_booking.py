"""REST handler: PUT /api/bookcar/{bookingId}/extend."""

from typing import Any

from rentals.http import api_handler, json_response, parse_body, path_param, request_origin
from rentals.services.booking import get_booking_service
from rentals.services.invoice import build_invoice_url


@api_handler
def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    booking = get_booking_service().extend_booking(path_param(event, "bookingId"), parse_body(event))
    scheme, host = request_origin(event)
    return json_response(
        200,
        {
            "message": "Booking extended successfully",
            "booking": booking.model_dump(by_alias=True, mode="json"),
            "invoiceUrl": build_invoice_url(scheme, host, booking.booking_id),
        },
    )
