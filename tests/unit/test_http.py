"""Unit tests for API Gateway request/response helpers."""

import base64
import json

import pytest
from botocore.exceptions import ClientError

from rentals.db.dynamo import dynamo_errors
from rentals.errors import USER_MESSAGES, ConflictError, ErrorCode, ServerError, ValidationError
from rentals.http import api_handler, caller_id, parse_body, path_param, request_origin


def test_parse_body_json():
    assert parse_body({"body": '{"carId": "car-1"}'}) == {"carId": "car-1"}


def test_parse_body_base64():
    raw = base64.b64encode(b'{"carId": "car-1"}').decode()
    assert parse_body({"body": raw, "isBase64Encoded": True}) == {"carId": "car-1"}


def test_parse_body_empty():
    assert parse_body({"body": None}) == {}


@pytest.mark.parametrize("body", ["{not json", "[1, 2]"])
def test_parse_body_rejects_non_objects(body):
    with pytest.raises(ValidationError) as exc:
        parse_body({"body": body})
    assert exc.value.code == ErrorCode.INVALID_REQUEST


def test_path_param_missing():
    with pytest.raises(ValidationError):
        path_param({"pathParameters": None}, "bookingId")


def test_caller_id_from_authorizer():
    assert caller_id({"requestContext": {"authorizer": {"userId": "user-1"}}}) == "user-1"
    assert caller_id({"requestContext": {"authorizer": {"claims": {"sub": "user-2"}}}}) == "user-2"
    assert caller_id({}) is None


def test_request_origin():
    event = {"headers": {"Host": "api.example.com", "X-Forwarded-Proto": "http"}}
    assert request_origin(event) == ("http", "api.example.com")
    assert request_origin({"requestContext": {"domainName": "abc.execute-api"}}) == ("https", "abc.execute-api")


def test_api_handler_passes_through():
    @api_handler
    def handler(event, context):
        return {"statusCode": 200}

    assert handler({}, None) == {"statusCode": 200}


def test_api_handler_client_error_shows_message():
    @api_handler
    def handler(event, context):
        raise ConflictError("Car is not available for booking.", code=ErrorCode.CAR_UNAVAILABLE)

    result = handler({}, None)

    assert result["statusCode"] == 409
    assert json.loads(result["body"]) == {"message": "Car is not available for booking.", "code": "CAR_UNAVAILABLE"}


def test_api_handler_includes_validation_details():
    @api_handler
    def handler(event, context):
        raise ValidationError("Invalid input data.", code=ErrorCode.INVALID_REQUEST, details=[{"loc": ["carId"]}])

    body = json.loads(handler({}, None)["body"])
    assert body["details"] == [{"loc": ["carId"]}]


def test_api_handler_server_error_hides_internals():
    @api_handler
    def handler(event, context):
        raise ServerError("GetItem on Cars failed: secret", code=ErrorCode.DATABASE_ERROR)

    result = handler({}, None)

    assert result["statusCode"] == 500
    body = json.loads(result["body"])
    assert "secret" not in body["message"]
    assert body["code"] == "DATABASE_ERROR"


def test_api_handler_unexpected_exception():
    @api_handler
    def handler(event, context):
        raise KeyError("boom")

    result = handler({}, None)

    assert result["statusCode"] == 500
    assert json.loads(result["body"])["code"] == "INTERNAL_ERROR"


def test_api_handler_write_conflict_hides_dynamo_details():
    @api_handler
    def handler(event, context):
        with dynamo_errors("TransactWriteItems on Bookings"):
            raise ClientError(
                {"Error": {"Code": "TransactionCanceledException", "Message": "Transaction cancelled"}},
                "TransactWriteItems",
            )

    result = handler({}, None)

    assert result["statusCode"] == 409
    body = json.loads(result["body"])
    assert body == {
        "message": USER_MESSAGES[ErrorCode.CONCURRENT_MODIFICATION],
        "code": "CONCURRENT_MODIFICATION",
    }
