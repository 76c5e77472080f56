"""Settings, services and an HTTP client wired against the mocked AWS account."""

import boto3
import pytest
from fastapi.testclient import TestClient

from file_manager.aws_clients import AWSClientManager
from file_manager.db_layer import FileMetadataService, ProjectService
from file_manager.main import create_app
from file_manager.services import FileTransferService
from file_manager.settings import Settings
from tests.consts import TEST_BUCKET_NAME, TEST_REGION, TEST_TABLE_NAME, TEST_USER_ID


@pytest.fixture
def settings(point_away_from_aws) -> Settings:
    return Settings(
        _env_file=None,
        deployment_mode="local-dev",
        aws_region=TEST_REGION,
        aws_endpoint_url=None,
        s3_bucket_name=TEST_BUCKET_NAME,
        dynamodb_table_name=TEST_TABLE_NAME,
    )


@pytest.fixture
def aws(mocked_aws, settings) -> AWSClientManager:
    return AWSClientManager(settings)


@pytest.fixture
def s3_client(mocked_aws):
    return boto3.client("s3", region_name=TEST_REGION)


@pytest.fixture
def metadata_table(mocked_aws):
    return boto3.resource("dynamodb", region_name=TEST_REGION).Table(TEST_TABLE_NAME)


@pytest.fixture
def project_service(metadata_table) -> ProjectService:
    return ProjectService(metadata_table)


@pytest.fixture
def file_service(metadata_table) -> FileMetadataService:
    return FileMetadataService(metadata_table)


@pytest.fixture
def transfer_service(aws, settings) -> FileTransferService:
    return FileTransferService(aws.get_s3_client(), settings.s3_bucket_name, settings.presigned_url_expiry)


@pytest.fixture
def client(mocked_aws, settings) -> TestClient:
    app = create_app(settings=settings)
    with TestClient(app, headers={"X-User-Id": TEST_USER_ID}) as client:
        yield client
