from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

# Stored on the showroom item but never loaded or returned.
HIDDEN_FIELDS = ("password",)


class Showroom(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    showroom_id: str
    name: str | None = None
    email: str | None = None
    address: str | None = None
    user_id: str | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_credentials(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if k not in HIDDEN_FIELDS}
        return data
