"""Real-time notifications to users over API Gateway WebSocket connections."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

from rentals.services.connection import delete_connection, list_user_connections

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "notification"


def user_channel(user_id: str) -> str:
    return f"{CHANNEL_PREFIX}{user_id}"


class Notifier(ABC):
    @abstractmethod
    def emit(self, channel: str, payload: dict[str, Any]) -> None:
        """Publish ``payload`` on ``channel``. Must not raise on delivery failure."""


class WebSocketNotifier(Notifier):
    """Delivers per-user channel messages to every open connection of that user."""

    def __init__(self, dynamo_client: Any, apigw_client: Any, connections_table: str) -> None:
        self._dynamo = dynamo_client
        self._apigw = apigw_client
        self._table = connections_table

    def emit(self, channel: str, payload: dict[str, Any]) -> None:
        if not channel.startswith(CHANNEL_PREFIX):
            logger.warning("Dropping message for unknown channel %s", channel)
            return
        user_id = channel[len(CHANNEL_PREFIX) :]

        try:
            connection_ids = list_user_connections(user_id, self._dynamo, self._table)
        except Exception:
            logger.exception("Could not look up connections for user %s", user_id)
            return

        data = json.dumps({"channel": channel, "payload": payload}).encode()
        delivered = 0
        for connection_id in connection_ids:
            try:
                self._apigw.post_to_connection(ConnectionId=connection_id, Data=data)
                delivered += 1
            except self._apigw.exceptions.GoneException:
                self._forget(connection_id)
            except Exception:
                logger.exception("Error posting to connection %s", connection_id)

        logger.info("Emitted on %s to %d of %d connections", channel, delivered, len(connection_ids))

    def _forget(self, connection_id: str) -> None:
        try:
            delete_connection(connection_id, self._dynamo, self._table)
            logger.info("Cleaned stale connection %s", connection_id)
        except Exception:
            logger.exception("Failed to delete stale connection %s", connection_id)
