from datetime import date, datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

BOOK_CAR_REQUIRED_FIELDS = (
    "carId",
    "showroomId",
    "rentalStartDate",
    "rentalStartTime",
    "rentalEndDate",
    "rentalEndTime",
)


def _check_clock(value: str) -> str:
    datetime.strptime(value, "%H:%M")
    return value


# 24-hour "HH:MM" as sent by clients.
ClockTime = Annotated[str, Field(pattern=r"^\d{2}:\d{2}$"), AfterValidator(_check_clock)]


def _blank_to_none(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: (None if v == "" else v) for k, v in data.items()}
    return data


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Booking(_CamelModel):
    booking_id: str
    car_id: str
    user_id: str
    showroom_id: str
    rental_start_date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    rental_start_time: str
    rental_end_date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    rental_end_time: str
    total_price: float = Field(..., ge=0)
    version: int = Field(default=1, ge=1)
    created_at: str | None = None
    updated_at: str | None = None


class BookCarRequest(_CamelModel):
    car_id: str = Field(..., min_length=1)
    showroom_id: str = Field(..., min_length=1)
    rental_start_date: date
    rental_start_time: ClockTime
    rental_end_date: date
    rental_end_time: ClockTime


class UpdateBookingRequest(_CamelModel):
    rental_start_date: date | None = None
    rental_end_date: date | None = None
    rental_start_time: ClockTime | None = None
    rental_end_time: ClockTime | None = None

    @model_validator(mode="before")
    @classmethod
    def blanks_are_unset(cls, data: Any) -> Any:
        return _blank_to_none(data)


class ExtendBookingRequest(_CamelModel):
    rental_end_date: date | None = None
    rental_end_time: ClockTime | None = None

    @model_validator(mode="before")
    @classmethod
    def blanks_are_unset(cls, data: Any) -> Any:
        return _blank_to_none(data)
