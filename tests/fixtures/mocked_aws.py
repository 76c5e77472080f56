"""Moto-backed stand-ins for S3 and DynamoDB."""

import boto3
import pytest
from moto import mock_aws

from file_manager.database.dynamodb import create_metadata_table
from tests.consts import TEST_BUCKET_NAME, TEST_REGION, TEST_TABLE_NAME


@pytest.fixture
def point_away_from_aws(monkeypatch):
    """Make sure nothing in a test can reach a real AWS account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture
def mocked_aws(point_away_from_aws):
    """Yield inside mock_aws with the test bucket and metadata table created."""
    with mock_aws():
        s3_client = boto3.client("s3", region_name=TEST_REGION)
        s3_client.create_bucket(Bucket=TEST_BUCKET_NAME)

        dynamodb = boto3.resource("dynamodb", region_name=TEST_REGION)
        create_metadata_table(dynamodb, TEST_TABLE_NAME)

        yield
