from unittest.mock import patch

import pytest
from botocore.exceptions import ClientError

from file_manager.s3.read_objects import fetch_s3_object_metadata, object_exists_in_s3
from tests.consts import TEST_BUCKET_NAME


def test_object_exists_in_s3(s3_client):
    assert not object_exists_in_s3(TEST_BUCKET_NAME, "missing.txt", s3_client=s3_client)

    s3_client.put_object(Bucket=TEST_BUCKET_NAME, Key="present.txt", Body=b"hello")

    assert object_exists_in_s3(TEST_BUCKET_NAME, "present.txt", s3_client=s3_client)


def test_errors_other_than_missing_propagate(s3_client):
    forbidden = ClientError({"Error": {"Code": "403", "Message": "Forbidden"}}, "HeadObject")

    with patch.object(s3_client, "head_object", side_effect=forbidden):
        with pytest.raises(ClientError):
            object_exists_in_s3(TEST_BUCKET_NAME, "any.txt", s3_client=s3_client)


def test_fetch_s3_object_metadata(s3_client):
    s3_client.put_object(Bucket=TEST_BUCKET_NAME, Key="notes.txt", Body=b"hello", ContentType="text/plain")

    metadata = fetch_s3_object_metadata(TEST_BUCKET_NAME, "notes.txt", s3_client=s3_client)

    assert metadata["content_type"] == "text/plain"
    assert metadata["content_length"] == 5
    assert fetch_s3_object_metadata(TEST_BUCKET_NAME, "missing.txt", s3_client=s3_client) is None
