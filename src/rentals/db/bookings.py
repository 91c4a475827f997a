"""Booking table access.

Every write that depends on a prior read (overlap check, availability check)
goes through TransactWriteItems together with a car-side condition, so two
requests racing on the same car cannot both commit.
"""

import logging
from typing import Any

from botocore.exceptions import ClientError

from rentals.db.cars import CarRepository
from rentals.db.dynamo import (
    cancellation_reasons,
    deserialize_item,
    dynamo_errors,
    error_code,
    serialize_item,
    translate_client_error,
)
from rentals.errors import ConflictError, ErrorCode
from rentals.models import Booking, Car

logger = logging.getLogger(__name__)

CAR_INDEX = "carId-index"
USER_INDEX = "userId-index"


class BookingRepository:
    def __init__(self, dynamo_client: Any, table_name: str, cars: CarRepository) -> None:
        self._client = dynamo_client
        self._table = table_name
        self._cars = cars

    def get(self, booking_id: str) -> Booking | None:
        with dynamo_errors(f"GetItem on {self._table}"):
            response = self._client.get_item(
                TableName=self._table,
                Key={"bookingId": {"S": booking_id}},
                ConsistentRead=True,
            )
        item = response.get("Item")
        return Booking.model_validate(deserialize_item(item)) if item else None

    def list_for_user(self, user_id: str) -> list[Booking]:
        bookings: list[Booking] = []
        last_key = None

        while True:
            query_kwargs: dict[str, Any] = {
                "TableName": self._table,
                "IndexName": USER_INDEX,
                "KeyConditionExpression": "userId = :uid",
                "ExpressionAttributeValues": {":uid": {"S": user_id}},
            }
            if last_key:
                query_kwargs["ExclusiveStartKey"] = last_key

            with dynamo_errors(f"Query on {self._table}/{USER_INDEX}"):
                response = self._client.query(**query_kwargs)

            bookings.extend(Booking.model_validate(deserialize_item(item)) for item in response.get("Items", []))

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break

        return bookings

    def find_overlapping(
        self,
        car_id: str,
        start_date: str,
        end_date: str,
        exclude_booking_id: str | None = None,
    ) -> Booking | None:
        """First booking on the car whose [start, end] dates intersect the given range.

        Reads the GSI, so it is eventually consistent; callers rely on the car-side
        condition in the following write to catch bookings it misses.
        """
        filter_expression = "rentalStartDate <= :end AND rentalEndDate >= :start"
        values: dict[str, Any] = {
            ":cid": {"S": car_id},
            ":start": {"S": start_date},
            ":end": {"S": end_date},
        }
        if exclude_booking_id:
            filter_expression += " AND bookingId <> :self"
            values[":self"] = {"S": exclude_booking_id}

        last_key = None
        while True:
            query_kwargs: dict[str, Any] = {
                "TableName": self._table,
                "IndexName": CAR_INDEX,
                "KeyConditionExpression": "carId = :cid",
                "FilterExpression": filter_expression,
                "ExpressionAttributeValues": values,
            }
            if last_key:
                query_kwargs["ExclusiveStartKey"] = last_key

            with dynamo_errors(f"Query on {self._table}/{CAR_INDEX}"):
                response = self._client.query(**query_kwargs)

            items = response.get("Items", [])
            if items:
                return Booking.model_validate(deserialize_item(items[0]))

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return None

    def create(self, booking: Booking, car: Car) -> None:
        """Insert the booking and mark the car Rented Out in one transaction."""
        try:
            self._client.transact_write_items(
                TransactItems=[
                    {
                        "Put": {
                            "TableName": self._table,
                            "Item": serialize_item(booking.model_dump(by_alias=True)),
                            "ConditionExpression": "attribute_not_exists(bookingId)",
                        }
                    },
                    self._cars.hold_item(car),
                ]
            )
        except ClientError as e:
            reasons = cancellation_reasons(e) if error_code(e) == "TransactionCanceledException" else []
            if reasons[:1] == ["ConditionalCheckFailed"]:
                raise ConflictError("Duplicate booking detected.", code=ErrorCode.DUPLICATE_BOOKING) from e
            if reasons[1:2] == ["ConditionalCheckFailed"]:
                logger.info("Car %s changed while booking %s was being created", car.car_id, booking.booking_id)
                raise ConflictError("Car is not available for booking.", code=ErrorCode.CAR_UNAVAILABLE) from e
            raise translate_client_error(f"TransactWriteItems on {self._table}", e) from e

    def save(self, booking: Booking, expected_version: int, car: Car) -> None:
        """Replace a booking whose stored version is still ``expected_version``."""
        item = serialize_item(booking.model_dump(by_alias=True))
        with dynamo_errors(f"TransactWriteItems on {self._table}"):
            self._client.transact_write_items(
                TransactItems=[
                    {
                        "Put": {
                            "TableName": self._table,
                            "Item": item,
                            "ConditionExpression": "version = :expected",
                            "ExpressionAttributeValues": {":expected": {"N": str(expected_version)}},
                        }
                    },
                    self._cars.touch_item(car),
                ]
            )

    def delete_for_user(self, booking: Booking, car: Car | None) -> None:
        """Hard-delete the caller's booking, releasing the car when it still exists."""
        transact_items: list[dict[str, Any]] = [
            {
                "Delete": {
                    "TableName": self._table,
                    "Key": {"bookingId": {"S": booking.booking_id}},
                    "ConditionExpression": "userId = :uid",
                    "ExpressionAttributeValues": {":uid": {"S": booking.user_id}},
                }
            }
        ]
        if car is not None:
            transact_items.append(self._cars.release_item(car))

        try:
            self._client.transact_write_items(TransactItems=transact_items)
        except ClientError as e:
            reasons = cancellation_reasons(e) if error_code(e) == "TransactionCanceledException" else []
            if reasons[:2] != ["None", "ConditionalCheckFailed"]:
                raise translate_client_error(f"TransactWriteItems on {self._table}", e) from e
            # Car item was deleted after it was read; the booking still goes.
            logger.warning("Car %s vanished while cancelling booking %s", booking.car_id, booking.booking_id)
            with dynamo_errors(f"TransactWriteItems on {self._table}"):
                self._client.transact_write_items(TransactItems=transact_items[:1])
