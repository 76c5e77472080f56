"""
File transfer service.

Derives storage keys and mints presigned URLs so that file bytes move between
the client and S3 directly; the API itself never proxies content.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from file_manager.s3.delete_objects import delete_s3_object
from file_manager.s3.presigned_urls import (
    generate_presigned_download_url,
    generate_presigned_upload_url,
)
from file_manager.s3.read_objects import fetch_s3_object_metadata, object_exists_in_s3
from file_manager.utils.files import sanitize_key_component

logger = logging.getLogger(__name__)


@dataclass
class UploadUrl:
    upload_url: str
    s3_key: str
    expires_in: int


@dataclass
class DownloadUrl:
    download_url: str
    expires_in: int


def derive_storage_key(project_id: str, file_id: str, file_name: str) -> str:
    """Object key for a file: ``{project_id}/{file_id}/{sanitized file name}``."""
    return f"{project_id}/{file_id}/{sanitize_key_component(file_name)}"


class FileTransferService:
    """Presigned URL issuance and object probes against one bucket"""

    def __init__(self, s3_client, bucket_name: str, expires_in: int = 3600):
        self.s3_client = s3_client
        self.bucket_name = bucket_name
        self.expires_in = expires_in

    def derive_key(self, project_id: str, file_id: str, file_name: str) -> str:
        return derive_storage_key(project_id, file_id, file_name)

    def issue_upload_url(
        self,
        project_id: str,
        file_id: str,
        file_name: str,
        content_type: str,
        file_size: Optional[int] = None,
    ) -> UploadUrl:
        """Presigned PUT for a new file.

        The project id, file id and original name travel as object metadata so
        an object found in the bucket can be traced back to its row.
        """
        s3_key = self.derive_key(project_id, file_id, file_name)
        upload_url = generate_presigned_upload_url(
            bucket_name=self.bucket_name,
            object_key=s3_key,
            content_type=content_type,
            expires_in=self.expires_in,
            content_length=file_size,
            metadata={
                "project-id": project_id,
                "file-id": file_id,
                "original-file-name": file_name,
            },
            s3_client=self.s3_client,
        )
        logger.info(f"Issued upload URL for s3://{self.bucket_name}/{s3_key}")
        return UploadUrl(upload_url=upload_url, s3_key=s3_key, expires_in=self.expires_in)

    def issue_download_url(self, s3_key: str, original_file_name: Optional[str] = None) -> DownloadUrl:
        download_url = generate_presigned_download_url(
            bucket_name=self.bucket_name,
            object_key=s3_key,
            expires_in=self.expires_in,
            download_file_name=original_file_name,
            s3_client=self.s3_client,
        )
        logger.debug(f"Issued download URL for s3://{self.bucket_name}/{s3_key}")
        return DownloadUrl(download_url=download_url, expires_in=self.expires_in)

    def exists(self, s3_key: str) -> bool:
        return object_exists_in_s3(self.bucket_name, s3_key, s3_client=self.s3_client)

    def get_object_metadata(self, s3_key: str) -> Optional[Dict[str, Any]]:
        return fetch_s3_object_metadata(self.bucket_name, s3_key, s3_client=self.s3_client)

    def delete(self, s3_key: str) -> None:
        delete_s3_object(self.bucket_name, s3_key, s3_client=self.s3_client)
        logger.info(f"Deleted s3://{self.bucket_name}/{s3_key}")
