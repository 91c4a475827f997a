"""Car table access and the car-side halves of booking transactions."""

from typing import Any

from rentals.db.dynamo import batch_get, deserialize_item, dynamo_errors
from rentals.models import Availability, Car


def _seq_condition(car: Car) -> tuple[str, dict[str, Any]]:
    # Cars written before bookingSeq existed have no attribute; treat that as 0.
    if car.booking_seq == 0:
        return "(attribute_not_exists(bookingSeq) OR bookingSeq = :seq)", {":seq": {"N": "0"}}
    return "bookingSeq = :seq", {":seq": {"N": str(car.booking_seq)}}


class CarRepository:
    def __init__(self, dynamo_client: Any, table_name: str) -> None:
        self._client = dynamo_client
        self._table = table_name

    def get(self, car_id: str) -> Car | None:
        with dynamo_errors(f"GetItem on {self._table}"):
            response = self._client.get_item(
                TableName=self._table,
                Key={"carId": {"S": car_id}},
                ConsistentRead=True,
            )
        item = response.get("Item")
        return Car.model_validate(deserialize_item(item)) if item else None

    def get_many(self, car_ids: list[str]) -> dict[str, Car]:
        cars = (Car.model_validate(item) for item in batch_get(self._client, self._table, "carId", car_ids))
        return {car.car_id: car for car in cars}

    def hold_item(self, car: Car) -> dict[str, Any]:
        """Transaction item flipping an Available car to Rented Out."""
        condition, values = _seq_condition(car)
        return {
            "Update": {
                "TableName": self._table,
                "Key": {"carId": {"S": car.car_id}},
                "UpdateExpression": "SET availability = :rented, bookingSeq = :next",
                "ConditionExpression": f"availability = :available AND {condition}",
                "ExpressionAttributeValues": {
                    ":rented": {"S": Availability.RENTED_OUT.value},
                    ":available": {"S": Availability.AVAILABLE.value},
                    ":next": {"N": str(car.booking_seq + 1)},
                    **values,
                },
            }
        }

    def touch_item(self, car: Car) -> dict[str, Any]:
        """Transaction item bumping bookingSeq; fails if another writer got there first."""
        condition, values = _seq_condition(car)
        return {
            "Update": {
                "TableName": self._table,
                "Key": {"carId": {"S": car.car_id}},
                "UpdateExpression": "SET bookingSeq = :next",
                "ConditionExpression": condition,
                "ExpressionAttributeValues": {":next": {"N": str(car.booking_seq + 1)}, **values},
            }
        }

    def release_item(self, car: Car) -> dict[str, Any]:
        """Transaction item marking a car Available again."""
        return {
            "Update": {
                "TableName": self._table,
                "Key": {"carId": {"S": car.car_id}},
                "UpdateExpression": "SET availability = :available ADD bookingSeq :one",
                "ConditionExpression": "attribute_exists(carId)",
                "ExpressionAttributeValues": {
                    ":available": {"S": Availability.AVAILABLE.value},
                    ":one": {"N": "1"},
                },
            }
        }
