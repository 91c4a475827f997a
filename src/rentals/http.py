"""
API Gateway REST proxy helpers shared by the booking Lambda handlers.

Handlers are wrapped with ``api_handler`` so every failure leaves the Lambda
as a JSON response with a status code, never as an unhandled exception.
"""

import base64
import json
import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from rentals.errors import USER_MESSAGES, ErrorCode, RentalError, ValidationError

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any], Any], dict[str, Any]]


def json_response(status_code: int, body: Any) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=str),
    }


def parse_body(event: dict[str, Any]) -> dict[str, Any]:
    raw = event.get("body")
    if not raw:
        return {}
    if event.get("isBase64Encoded"):
        raw = base64.b64decode(raw).decode()
    try:
        body = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Request body is not valid JSON: {e}", code=ErrorCode.INVALID_REQUEST) from e
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object.", code=ErrorCode.INVALID_REQUEST)
    return body


def path_param(event: dict[str, Any], name: str) -> str:
    value = (event.get("pathParameters") or {}).get(name)
    if not value:
        raise ValidationError(f"Missing path parameter: {name}", code=ErrorCode.INVALID_REQUEST)
    return value


def caller_id(event: dict[str, Any]) -> str | None:
    """User id placed in the request context by the upstream authorizer."""
    authorizer = (event.get("requestContext") or {}).get("authorizer") or {}
    return authorizer.get("userId") or (authorizer.get("claims") or {}).get("sub")


def request_origin(event: dict[str, Any]) -> tuple[str, str]:
    """Scheme and host the client used, for building absolute URLs."""
    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}
    scheme = headers.get("x-forwarded-proto", "https")
    host = headers.get("host") or (event.get("requestContext") or {}).get("domainName", "")
    return scheme, host


def api_handler(func: Handler) -> Handler:
    @wraps(func)
    def wrapper(event: dict[str, Any], context: Any) -> dict[str, Any]:
        try:
            return func(event, context)
        except RentalError as e:
            if e.status_code >= 500:
                logger.error("%s failed [%s]: %s", func.__module__, e.code.value, e.message)
                return json_response(e.status_code, {"message": e.user_message, "code": e.code.value})
            logger.info("%s rejected [%s]: %s", func.__module__, e.code.value, e.message)
            body: dict[str, Any] = {"message": e.message, "code": e.code.value}
            if e.details is not None:
                body["details"] = e.details
            return json_response(e.status_code, body)
        except Exception:
            logger.exception("Unhandled error in %s", func.__module__)
            return json_response(
                500,
                {"message": USER_MESSAGES[ErrorCode.INTERNAL_ERROR], "code": ErrorCode.INTERNAL_ERROR.value},
            )

    return wrapper
