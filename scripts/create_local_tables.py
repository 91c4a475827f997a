#!/usr/bin/env python3
"""Create DynamoDB tables for local development.

This script creates the four DynamoDB tables needed for local development and testing, configured
against DynamoDB Local. Table names come from the same environment variables the Lambdas read.

Usage:
    python scripts/create_local_tables.py
"""

import sys
from pathlib import Path

import boto3
from botocore.exceptions import ClientError
from dotenv import load_dotenv

# Add src to path for config import
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from rentals.config import get_config


def _string_attrs(*names):
    return [{"AttributeName": name, "AttributeType": "S"} for name in names]


def _gsi(name, partition_key):
    return {
        "IndexName": name,
        "KeySchema": [{"AttributeName": partition_key, "KeyType": "HASH"}],
        "Projection": {"ProjectionType": "ALL"},
    }


def create_table(dynamodb, table_name, key, indexes=()):
    """Create a table keyed on ``key`` with one GSI per (index name, attribute) pair."""
    kwargs = {
        "TableName": table_name,
        "KeySchema": [{"AttributeName": key, "KeyType": "HASH"}],
        "AttributeDefinitions": _string_attrs(key, *(attr for _, attr in indexes)),
        "BillingMode": "PAY_PER_REQUEST",
    }
    if indexes:
        kwargs["GlobalSecondaryIndexes"] = [_gsi(name, attr) for name, attr in indexes]

    try:
        dynamodb.create_table(**kwargs)
        print(f"✓ Created {table_name} table")
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            print(f"✓ {table_name} table already exists")
        else:
            raise


def main():
    """Create all DynamoDB tables."""
    load_dotenv()
    config = get_config()

    endpoint_url = config.dynamodb_endpoint or "http://localhost:8000"

    print(f"Creating DynamoDB tables at {endpoint_url}...")
    print()

    # For DynamoDB Local, use dummy credentials
    dynamodb = boto3.client(
        "dynamodb",
        endpoint_url=endpoint_url,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )

    create_table(dynamodb, config.cars_table, "carId")
    create_table(dynamodb, config.showrooms_table, "showroomId")
    create_table(
        dynamodb,
        config.bookings_table,
        "bookingId",
        indexes=[("carId-index", "carId"), ("userId-index", "userId")],
    )
    create_table(dynamodb, config.connections_table, "connectionId", indexes=[("userId-index", "userId")])

    print()
    print("✅ All DynamoDB tables ready")


if __name__ == "__main__":
    main()
