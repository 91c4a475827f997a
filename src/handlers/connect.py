"""WebSocket $connect handler."""

from typing import Any

from rentals.clients import get_dynamo_client
from rentals.config import get_config
from rentals.services.connection import store_connection


def handler(event: dict[str, Any], context: object) -> dict[str, int]:
    connection_id = event["requestContext"]["connectionId"]
    user_id = event["requestContext"]["authorizer"]["userId"]

    config = get_config()
    store_connection(connection_id, user_id, get_dynamo_client(), config.connections_table)

    return {"statusCode": 200}
