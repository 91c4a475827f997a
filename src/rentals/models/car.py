from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Availability(str, Enum):
    AVAILABLE = "Available"
    RENTED_OUT = "Rented Out"


class Car(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    car_id: str
    availability: Availability = Availability.AVAILABLE
    rent_rate: float = Field(..., ge=0)
    showroom_id: str | None = None
    user_id: str | None = None
    make: str | None = None
    model: str | None = None
    booking_seq: int = Field(default=0, ge=0)
