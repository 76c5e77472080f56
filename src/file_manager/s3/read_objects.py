"""Functions for reading objects from an S3 bucket--the "R" in CRUD."""

from typing import TYPE_CHECKING, Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

MISSING_OBJECT_ERROR_CODES = ("404", "NoSuchKey", "NotFound")


def is_missing_object_error(err: ClientError) -> bool:
    return err.response.get("Error", {}).get("Code") in MISSING_OBJECT_ERROR_CODES


def object_exists_in_s3(bucket_name: str, object_key: str, s3_client: Optional["S3Client"] = None) -> bool:
    """
    Check if an object exists in the S3 bucket using head_object.

    :param bucket_name: Name of the S3 bucket.
    :param object_key: Key of the object to check.
    :param s3_client: Optional S3 client to use. If not provided, a new client will be created.

    :return: True if the object exists, False otherwise.
    :raises ClientError: for any failure other than a missing object.
    """
    s3_client = s3_client or boto3.client("s3")
    try:
        s3_client.head_object(Bucket=bucket_name, Key=object_key)
        return True
    except ClientError as err:
        if is_missing_object_error(err):
            return False
        raise


def fetch_s3_object_metadata(
    bucket_name: str,
    object_key: str,
    s3_client: Optional["S3Client"] = None,
) -> Optional[Dict[str, Any]]:
    """
    Fetch the content type, length and modification time of an object.

    :return: The metadata, or None if the object does not exist.
    """
    s3_client = s3_client or boto3.client("s3")
    try:
        response = s3_client.head_object(Bucket=bucket_name, Key=object_key)
    except ClientError as err:
        if is_missing_object_error(err):
            return None
        raise

    return {
        "content_type": response.get("ContentType"),
        "content_length": response.get("ContentLength"),
        "last_modified": response.get("LastModified"),
    }
