"""Booking lifecycle against DynamoDB Local with the real repositories."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from rentals.config import get_config
from rentals.db import BookingRepository, CarRepository, ShowroomRepository
from rentals.db.dynamo import serialize_item
from rentals.errors import ConflictError, ErrorCode, NotFoundError
from rentals.models import Availability
from rentals.rental_time import rental_timezone
from rentals.services.booking import BookingService
from rentals.services.invoice import InvoiceRenderer
from rentals.services.notifier import Notifier

NOW = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)

BOOK_PAYLOAD = {
    "carId": "car-int-1",
    "showroomId": "show-int-1",
    "rentalStartDate": "2025-06-01",
    "rentalStartTime": "10:00",
    "rentalEndDate": "2025-06-03",
    "rentalEndTime": "10:00",
}


@pytest.fixture
def repos(dynamodb_client):
    config = get_config()
    cars = CarRepository(dynamodb_client, config.cars_table)
    return {
        "cars": cars,
        "showrooms": ShowroomRepository(dynamodb_client, config.showrooms_table),
        "bookings": BookingRepository(dynamodb_client, config.bookings_table, cars),
    }


@pytest.fixture
def service(repos):
    return BookingService(
        invoices=MagicMock(spec=InvoiceRenderer),
        notifier=MagicMock(spec=Notifier),
        rental_tz=rental_timezone(5),
        clock=lambda: NOW,
        **repos,
    )


@pytest.fixture
def seeded(dynamodb_client):
    config = get_config()
    dynamodb_client.put_item(
        TableName=config.cars_table,
        Item=serialize_item(
            {"carId": "car-int-1", "rentRate": 100, "availability": "Available", "userId": "owner-1", "make": "Toyota"}
        ),
    )
    dynamodb_client.put_item(
        TableName=config.showrooms_table,
        Item=serialize_item({"showroomId": "show-int-1", "name": "Downtown", "password": "hash"}),
    )


def _set_available(dynamodb_client):
    dynamodb_client.update_item(
        TableName=get_config().cars_table,
        Key={"carId": {"S": "car-int-1"}},
        UpdateExpression="SET availability = :a",
        ExpressionAttributeValues={":a": {"S": "Available"}},
    )


@pytest.mark.integration
def test_book_list_and_cancel(service, repos, seeded):
    booking = service.book_car(BOOK_PAYLOAD, "user-1")

    assert booking.total_price == 300
    assert booking.rental_start_time == "10:00 AM"
    assert repos["cars"].get("car-int-1").availability is Availability.RENTED_OUT

    listed = service.get_user_bookings("user-1")
    assert [b["bookingId"] for b in listed] == [booking.booking_id]
    assert listed[0]["carDetails"]["make"] == "Toyota"
    assert "password" not in listed[0]["showroomDetails"]

    with pytest.raises(ConflictError):
        service.book_car(BOOK_PAYLOAD, "user-2")

    service.cancel_booking(booking.booking_id, "user-1")

    assert repos["bookings"].get(booking.booking_id) is None
    assert repos["cars"].get("car-int-1").availability is Availability.AVAILABLE


@pytest.mark.integration
def test_overlap_detected_on_available_car(service, seeded, dynamodb_client):
    service.book_car(BOOK_PAYLOAD, "user-1")
    _set_available(dynamodb_client)

    overlapping = {**BOOK_PAYLOAD, "rentalStartDate": "2025-06-03", "rentalEndDate": "2025-06-05"}
    with pytest.raises(ConflictError) as exc:
        service.book_car(overlapping, "user-2")

    assert exc.value.code == ErrorCode.BOOKING_OVERLAP


@pytest.mark.integration
def test_stale_car_read_loses_race(service, repos, seeded):
    stale_car = repos["cars"].get("car-int-1")
    first = service.book_car(BOOK_PAYLOAD, "user-1")

    second = first.model_copy(update={"booking_id": "bk-racer", "user_id": "user-2"})
    with pytest.raises(ConflictError) as exc:
        repos["bookings"].create(second, stale_car)

    assert exc.value.code == ErrorCode.CAR_UNAVAILABLE
    assert repos["bookings"].get("bk-racer") is None


@pytest.mark.integration
def test_update_and_extend_reprice(service, repos, seeded):
    booking = service.book_car(BOOK_PAYLOAD, "user-1")

    updated = service.update_booking(booking.booking_id, {"rentalStartDate": "2025-06-02"})
    assert updated.total_price == 200
    assert updated.version == 2

    extended = service.extend_booking(booking.booking_id, {"rentalEndDate": "2025-06-06"})
    assert extended.total_price == 500
    assert repos["bookings"].get(booking.booking_id).version == 3


@pytest.mark.integration
def test_stale_version_rejected(service, repos, seeded):
    booking = service.book_car(BOOK_PAYLOAD, "user-1")
    service.extend_booking(booking.booking_id, {"rentalEndDate": "2025-06-04"})

    car = repos["cars"].get("car-int-1")
    with pytest.raises(ConflictError) as exc:
        repos["bookings"].save(booking.model_copy(update={"version": 2}), booking.version, car)

    assert exc.value.code == ErrorCode.CONCURRENT_MODIFICATION


@pytest.mark.integration
def test_cancel_other_users_booking_not_found(service, seeded):
    booking = service.book_car(BOOK_PAYLOAD, "user-1")

    with pytest.raises(NotFoundError) as exc:
        service.cancel_booking(booking.booking_id, "user-2")

    assert exc.value.code == ErrorCode.BOOKING_NOT_FOUND


def _put_booking(dynamodb_client, booking):
    dynamodb_client.put_item(
        TableName=get_config().bookings_table,
        Item=serialize_item(booking.model_dump(by_alias=True)),
    )


@pytest.mark.integration
def test_update_loses_to_concurrent_update_after_overlap_query(service, repos, seeded, dynamodb_client, monkeypatch):
    first = service.book_car(BOOK_PAYLOAD, "user-1")
    second = first.model_copy(
        update={
            "booking_id": "bk-b",
            "user_id": "user-2",
            "rental_start_date": "2025-06-10",
            "rental_end_date": "2025-06-12",
        }
    )
    _put_booking(dynamodb_client, second)

    find_overlapping = repos["bookings"].find_overlapping
    raced = []

    def overlap_then_competing_update(*args, **kwargs):
        found = find_overlapping(*args, **kwargs)
        if not raced:
            raced.append(True)
            service.update_booking("bk-b", {"rentalStartDate": "2025-06-20", "rentalEndDate": "2025-06-22"})
        return found

    monkeypatch.setattr(repos["bookings"], "find_overlapping", overlap_then_competing_update)

    with pytest.raises(ConflictError) as exc:
        service.update_booking(first.booking_id, {"rentalStartDate": "2025-06-21", "rentalEndDate": "2025-06-23"})

    assert exc.value.code == ErrorCode.CONCURRENT_MODIFICATION
    assert repos["bookings"].get(first.booking_id).rental_start_date == "2025-06-01"
    assert repos["bookings"].get("bk-b").rental_start_date == "2025-06-20"


@pytest.mark.integration
def test_cancel_when_car_deleted_mid_request(service, repos, seeded, dynamodb_client, monkeypatch):
    booking = service.book_car(BOOK_PAYLOAD, "user-1")

    delete_for_user = repos["bookings"].delete_for_user

    def car_removed_first(*args, **kwargs):
        dynamodb_client.delete_item(TableName=get_config().cars_table, Key={"carId": {"S": "car-int-1"}})
        return delete_for_user(*args, **kwargs)

    monkeypatch.setattr(repos["bookings"], "delete_for_user", car_removed_first)

    service.cancel_booking(booking.booking_id, "user-1")

    assert repos["bookings"].get(booking.booking_id) is None
    assert repos["cars"].get("car-int-1") is None
