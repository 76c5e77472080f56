# src/file_manager/settings.py
from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_DEPLOYMENT_MODES = ["local-dev", "aws-mock", "aws-prod"]

LEGACY_DEPLOYMENT_MODES = {
    "development": "local-dev",
    "production": "aws-prod",
}


class Settings(BaseSettings):
    """
    Runtime configuration of the File Management API.

    Values come from, in order of precedence: keyword arguments, environment
    variables, the first .env file found, and the defaults below.

    Usage:
        from file_manager.settings import get_settings
        expiry = get_settings().presigned_url_expiry
    """

    # Application
    app_name: str = Field(
        default="file-management-service",
        description="Name reported by the CLI and in logs"
    )

    deployment_mode: str = Field(
        default="local-dev",
        description="local-dev and aws-mock talk to emulators; aws-prod talks to real AWS"
    )

    # AWS
    aws_region: str = Field(
        default="us-east-1",
        validation_alias=AliasChoices("aws_region", "AWS_DEFAULT_REGION", "AWS_REGION"),
    )

    aws_access_key_id: Optional[str] = Field(default=None, validate_default=True)

    aws_secret_access_key: Optional[str] = Field(default=None, validate_default=True)

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        description="Custom endpoint for LocalStack, moto server or MinIO"
    )

    # Object storage
    s3_bucket_name: str = Field(
        default="file-management-bucket",
        description="S3 bucket holding uploaded file bytes"
    )

    presigned_url_expiry: int = Field(
        default=3600,
        gt=0,
        description="Lifetime of presigned upload/download URLs in seconds"
    )

    max_file_size: int = Field(
        default=104857600,
        gt=0,
        description="Largest accepted upload in bytes (100MB)"
    )

    # Metadata table
    dynamodb_table_name: str = Field(
        default="FileMetadata",
        description="Single table holding project and file metadata"
    )

    # HTTP
    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        description="Comma separated list of allowed CORS origins"
    )

    require_auth: bool = Field(
        default=False,
        description="Reject requests without an X-User-Id header instead of acting as the demo user"
    )

    log_level: str = Field(default="INFO")

    @field_validator("deployment_mode", mode="before")
    @classmethod
    def map_legacy_deployment_mode(cls, v):
        return LEGACY_DEPLOYMENT_MODES.get(v, v) if v else v

    @field_validator("deployment_mode")
    @classmethod
    def check_deployment_mode(cls, v):
        if v not in VALID_DEPLOYMENT_MODES:
            raise ValueError(f"Invalid deployment_mode: {v}. Must be one of {VALID_DEPLOYMENT_MODES}")
        return v

    @field_validator("aws_access_key_id", "aws_secret_access_key")
    @classmethod
    def default_to_mock_credentials(cls, v, info):
        """Emulators accept any credentials; real AWS falls back to the boto3 credential chain."""
        if v is None and info.data.get("deployment_mode") in ("local-dev", "aws-mock"):
            return "mock"
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper()

    @property
    def is_production(self) -> bool:
        return self.deployment_mode == "aws-prod"

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=(".env", ".env.local-dev", ".env.aws-mock", ".env.aws-prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Settings for this process, read once."""
    return Settings()
