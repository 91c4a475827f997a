"""Invoice rendering collaborator and invoice download URLs."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from rentals.errors import InvoiceError
from rentals.models import Booking

logger = logging.getLogger(__name__)

INVOICE_PATH = "/api/bookcar/invoices"


def invoice_snapshot(booking: Booking) -> dict[str, Any]:
    return {
        "_id": booking.booking_id,
        "carId": booking.car_id,
        "userId": booking.user_id,
        "rentalStartDate": booking.rental_start_date,
        "rentalEndDate": booking.rental_end_date,
        "rentalStartTime": booking.rental_start_time,
        "rentalEndTime": booking.rental_end_time,
        "totalPrice": booking.total_price,
    }


def build_invoice_url(scheme: str, host: str, booking_id: str) -> str:
    return f"{scheme}://{host}{INVOICE_PATH}/invoice_{booking_id}.pdf"


class InvoiceRenderer(ABC):
    @abstractmethod
    def create_invoice(self, snapshot: dict[str, Any]) -> str:
        """Render the invoice for a booking snapshot and return its file path."""


class LambdaInvoiceRenderer(InvoiceRenderer):
    """Calls the invoice rendering function synchronously."""

    def __init__(self, lambda_client: Any, function_name: str) -> None:
        self._client = lambda_client
        self._function_name = function_name

    def create_invoice(self, snapshot: dict[str, Any]) -> str:
        try:
            response = self._client.invoke(
                FunctionName=self._function_name,
                InvocationType="RequestResponse",
                Payload=json.dumps(snapshot).encode(),
            )
            body = json.loads(response["Payload"].read() or b"{}")
        except Exception as e:
            raise InvoiceError(f"Invoice function {self._function_name} could not be invoked: {e}") from e

        if response.get("FunctionError"):
            raise InvoiceError(f"Invoice function failed for booking {snapshot['_id']}: {body}")

        path = body.get("path") if isinstance(body, dict) else None
        if not path:
            raise InvoiceError(f"Invoice function returned no path for booking {snapshot['_id']}")

        logger.info("Rendered invoice for booking %s at %s", snapshot["_id"], path)
        return path
