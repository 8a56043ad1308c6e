"""Integration test fixtures: LocalStack DynamoDB and S3."""

from __future__ import annotations

import os
import uuid

import boto3
import pytest

from loanflow.persistence.dynamodb_tables import create_tables

# Default LocalStack endpoint
LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")
REGION = "us-east-1"
TABLE_SUFFIX = "-inttest"


def _localstack_available() -> bool:
    """Check if LocalStack is reachable."""
    try:
        client = boto3.client("dynamodb", region_name=REGION, endpoint_url=LOCALSTACK_URL)
        client.list_tables()
        return True
    except Exception:
        return False


@pytest.fixture(scope="session")
def localstack_url() -> str:
    if not _localstack_available():
        pytest.skip("LocalStack not available")
    return LOCALSTACK_URL


@pytest.fixture(scope="session")
def loan_tables(localstack_url) -> str:
    """Create the LoanFlow tables once per run; returns the table suffix."""
    ddb = boto3.resource("dynamodb", region_name=REGION, endpoint_url=localstack_url)
    create_tables(ddb, suffix=TABLE_SUFFIX)
    return TABLE_SUFFIX


@pytest.fixture(scope="session")
def upload_bucket(localstack_url) -> str:
    bucket = f"loanflow-inttest-{uuid.uuid4().hex[:8]}"
    boto3.client("s3", region_name=REGION, endpoint_url=localstack_url).create_bucket(Bucket=bucket)
    return bucket
