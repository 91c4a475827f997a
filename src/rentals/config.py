from os import environ

from pydantic import BaseModel, ConfigDict, Field


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    aws_region: str
    dynamodb_endpoint: str | None = None
    cars_table: str
    bookings_table: str
    showrooms_table: str
    connections_table: str
    invoice_function_name: str
    websocket_endpoint: str = ""
    rental_utc_offset_hours: float = Field(default=5.0, ge=-12, le=14)
    environment: str


_cached_config: Config | None = None


def _reset_config() -> None:
    """Reset cached config — for testing only."""
    global _cached_config
    _cached_config = None


def get_config() -> Config:
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    _cached_config = Config(
        aws_region=environ.get("AWS_REGION", "us-east-1"),
        dynamodb_endpoint=environ.get("DYNAMODB_ENDPOINT"),
        cars_table=environ.get("CARS_TABLE", "Cars"),
        bookings_table=environ.get("BOOKINGS_TABLE", "Bookings"),
        showrooms_table=environ.get("SHOWROOMS_TABLE", "Showrooms"),
        connections_table=environ.get("CONNECTIONS_TABLE", "Connections"),
        invoice_function_name=environ.get("INVOICE_FUNCTION_NAME", "RenderInvoice"),
        websocket_endpoint=environ.get("WEBSOCKET_ENDPOINT", ""),
        rental_utc_offset_hours=float(environ.get("RENTAL_UTC_OFFSET_HOURS", "5")),
        environment=environ.get("ENVIRONMENT", "local"),
    )
    return _cached_config
