"""Shared test fixtures for the rentals service."""

import os
import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load .env file for test configuration
load_dotenv()

# Unset AWS_PROFILE for local testing (DynamoDB Local doesn't need it)
if "AWS_PROFILE" in os.environ:
    del os.environ["AWS_PROFILE"]

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

TABLE_KEYS = {
    "cars_table": "carId",
    "showrooms_table": "showroomId",
    "bookings_table": "bookingId",
    "connections_table": "connectionId",
}


# DynamoDB fixtures
@pytest.fixture
def dynamodb_client():
    """Provide a DynamoDB client for integration tests.

    Tables must already exist (scripts/create_local_tables.py). Every item
    written during the test is removed afterwards.
    """
    import boto3
    from rentals.config import get_config

    config = get_config()

    client = boto3.client(
        "dynamodb",
        endpoint_url=config.dynamodb_endpoint,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )

    yield client

    # Cleanup: scan and delete all items created during test
    for attr, key in TABLE_KEYS.items():
        table_name = getattr(config, attr)
        response = client.scan(TableName=table_name, ProjectionExpression=key)
        for item in response.get("Items", []):
            client.delete_item(TableName=table_name, Key={key: item[key]})
