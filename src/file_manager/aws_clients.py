"""boto3 clients for the object store and the metadata table."""
import os
import logging
from typing import Any, Dict, TYPE_CHECKING

import boto3
from botocore.config import Config

from file_manager.settings import Settings

if TYPE_CHECKING:
    from mypy_boto3_dynamodb import DynamoDBServiceResource
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)


class AWSClientManager:
    """Builds and caches boto3 clients for one application instance.

    One manager is created per app in ``create_app`` and its clients are shared
    by every request; boto3 clients are safe to use from concurrent threads.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.region = settings.aws_region
        self.endpoint_url = settings.aws_endpoint_url
        self.mode = settings.deployment_mode
        self._clients: Dict[str, Any] = {}
        self._resources: Dict[str, Any] = {}

        logger.info(f"AWS clients: mode={self.mode} region={self.region} endpoint={self.endpoint_url or 'default'}")

    def _session(self) -> boto3.Session:
        # Named profiles (SSO logins) only make sense against real AWS
        aws_profile = os.environ.get('AWS_PROFILE')
        if aws_profile and self.mode == 'aws-prod':
            return boto3.Session(profile_name=aws_profile, region_name=self.region)
        return boto3.Session(region_name=self.region)

    def _connection_kwargs(self, service_name: str) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {'region_name': self.region}

        if self.settings.aws_access_key_id and self.settings.aws_secret_access_key:
            kwargs['aws_access_key_id'] = self.settings.aws_access_key_id
            kwargs['aws_secret_access_key'] = self.settings.aws_secret_access_key

        if self.endpoint_url:
            kwargs['endpoint_url'] = self.endpoint_url

        if service_name == 's3':
            # SigV4 puts the expiry on presigned URLs as X-Amz-Expires;
            # emulators behind a custom endpoint need path-style addressing
            s3_options = {'addressing_style': 'path'} if self.endpoint_url else {}
            kwargs['config'] = Config(signature_version='s3v4', s3=s3_options)

        return kwargs

    def get_client(self, service_name: str) -> Any:
        """Get or create a low-level client."""
        if service_name not in self._clients:
            try:
                self._clients[service_name] = self._session().client(
                    service_name, **self._connection_kwargs(service_name)
                )
            except Exception as e:
                logger.error(f"Error creating {service_name} client: {str(e)}")
                raise
            logger.debug(f"Created {service_name} client")
        return self._clients[service_name]

    def get_resource(self, service_name: str) -> Any:
        """Get or create a service resource (DynamoDB tables are used through one)."""
        if service_name not in self._resources:
            try:
                self._resources[service_name] = self._session().resource(
                    service_name, **self._connection_kwargs(service_name)
                )
            except Exception as e:
                logger.error(f"Error creating {service_name} resource: {str(e)}")
                raise
            logger.debug(f"Created {service_name} resource")
        return self._resources[service_name]

    def get_s3_client(self) -> "S3Client":
        return self.get_client('s3')

    def get_dynamodb_resource(self) -> "DynamoDBServiceResource":
        return self.get_resource('dynamodb')
