"""DynamoDB item (de)serialization and error translation shared by the repositories."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from typing import Any

from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import ClientError

from rentals.errors import USER_MESSAGES, ConflictError, ErrorCode, RentalError, ServerError

logger = logging.getLogger(__name__)

# BatchGetItem accepts at most 100 keys per request.
_BATCH_GET_LIMIT = 100

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _to_dynamo(value: Any) -> Any:
    # TypeSerializer rejects floats.
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_dynamo(v) for v in value]
    return value


def _from_dynamo(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_dynamo(v) for v in value]
    return value


def serialize_value(value: Any) -> dict[str, Any]:
    return _serializer.serialize(_to_dynamo(value))


def serialize_item(data: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Serialize a plain dict to a DynamoDB attribute map, dropping None values."""
    return {k: serialize_value(v) for k, v in data.items() if v is not None}


def deserialize_item(item: dict[str, dict[str, Any]]) -> dict[str, Any]:
    return {k: _from_dynamo(_deserializer.deserialize(v)) for k, v in item.items()}


def cancellation_reasons(error: ClientError) -> list[str]:
    """Per-item cancellation codes of a TransactionCanceledException, in request order."""
    return [reason.get("Code", "None") for reason in error.response.get("CancellationReasons", [])]


def error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def translate_client_error(action: str, error: ClientError) -> RentalError:
    if error_code(error) in ("ConditionalCheckFailedException", "TransactionCanceledException"):
        logger.info("%s failed a write condition: %s", action, error)
        return ConflictError(
            USER_MESSAGES[ErrorCode.CONCURRENT_MODIFICATION],
            code=ErrorCode.CONCURRENT_MODIFICATION,
        )
    return ServerError(f"{action} failed: {error}", code=ErrorCode.DATABASE_ERROR)


@contextmanager
def dynamo_errors(action: str) -> Iterator[None]:
    """Translate botocore failures into rentals errors.

    Repositories catch the conditional failures they can explain before this
    runs; anything left over is reported generically.
    """
    try:
        yield
    except ClientError as e:
        raise translate_client_error(action, e) from e


def batch_get(dynamo_client: Any, table_name: str, key_name: str, ids: list[str]) -> list[dict[str, Any]]:
    """Fetch items by primary key, retrying unprocessed keys."""
    unique_ids = list(dict.fromkeys(ids))
    items: list[dict[str, Any]] = []

    for offset in range(0, len(unique_ids), _BATCH_GET_LIMIT):
        chunk = unique_ids[offset : offset + _BATCH_GET_LIMIT]
        request: dict[str, Any] = {table_name: {"Keys": [{key_name: {"S": item_id}} for item_id in chunk]}}

        while request:
            with dynamo_errors(f"BatchGetItem on {table_name}"):
                response = dynamo_client.batch_get_item(RequestItems=request)
            items.extend(deserialize_item(item) for item in response.get("Responses", {}).get(table_name, []))
            request = response.get("UnprocessedKeys") or {}

    return items
