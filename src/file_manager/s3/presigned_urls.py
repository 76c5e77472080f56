"""Functions for minting presigned URLs so clients move bytes directly against S3."""

from typing import TYPE_CHECKING, Optional

import boto3

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client


def generate_presigned_upload_url(
    bucket_name: str,
    object_key: str,
    content_type: str,
    expires_in: int,
    content_length: Optional[int] = None,
    metadata: Optional[dict] = None,
    s3_client: Optional["S3Client"] = None,
) -> str:
    """
    Generate a presigned PUT URL for an object.

    The client must send the same Content-Type (and x-amz-meta-* headers, when
    metadata is given) that were signed here.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: Key the uploaded object will be stored under.
    :param content_type: The MIME type the client will upload, e.g. "application/pdf".
    :param expires_in: Lifetime of the URL in seconds.
    :param content_length: Optional exact size in bytes the upload must have.
    :param metadata: Optional user metadata stored with the object.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.
    """
    s3_client = s3_client or boto3.client("s3")
    params = {
        "Bucket": bucket_name,
        "Key": object_key,
        "ContentType": content_type,
    }
    if content_length:
        params["ContentLength"] = content_length
    if metadata:
        params["Metadata"] = metadata

    return s3_client.generate_presigned_url(
        ClientMethod="put_object",
        Params=params,
        ExpiresIn=expires_in,
    )


def generate_presigned_download_url(
    bucket_name: str,
    object_key: str,
    expires_in: int,
    download_file_name: Optional[str] = None,
    s3_client: Optional["S3Client"] = None,
) -> str:
    """
    Generate a presigned GET URL for an object.

    :param download_file_name: When given, S3 answers with
        ``Content-Disposition: attachment; filename="..."`` so browsers save the
        file under this name rather than the object key.
    """
    s3_client = s3_client or boto3.client("s3")
    params = {"Bucket": bucket_name, "Key": object_key}
    if download_file_name:
        params["ResponseContentDisposition"] = f'attachment; filename="{download_file_name}"'

    return s3_client.generate_presigned_url(
        ClientMethod="get_object",
        Params=params,
        ExpiresIn=expires_in,
    )
