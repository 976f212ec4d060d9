"""
Unit tests for the S3 storage provider, against a mocked boto3 client.
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from photon.core.exceptions import StorageError
from photon.services.storage_interface import UploadedContent, discard_file, DeleteOutcome
from photon.services.storage_providers.s3_service import S3Service


def client_error(code, operation="PutObject"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


@pytest.fixture
def s3_client():
    return MagicMock()


@pytest.fixture
def s3(s3_client):
    return S3Service(bucket_name="photon-bucket", folder="images/", client=s3_client)


def test_store_puts_object_under_folder(s3, s3_client):
    content = UploadedContent.from_bytes(b"png", "dog.png", "image/png")

    key = s3.store(content)

    assert key.startswith("images/")
    assert key.endswith("_dog.png")
    kwargs = s3_client.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "photon-bucket"
    assert kwargs["Key"] == key
    assert kwargs["ContentType"] == "image/png"
    assert kwargs["ContentLength"] == 3


def test_store_rejected_by_backend_raises_storage_error(s3, s3_client):
    s3_client.put_object.side_effect = client_error("EntityTooLarge")

    with pytest.raises(StorageError) as exc:
        s3.store(UploadedContent.from_bytes(b"x", "big.jpg"))

    assert exc.value.status_code == 502


def test_store_connection_failure_raises_storage_error(s3, s3_client):
    s3_client.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3")

    with pytest.raises(StorageError):
        s3.store(UploadedContent.from_bytes(b"x", "a.jpg"))


def test_delete_calls_delete_object(s3, s3_client):
    s3.delete("images/abc_dog.png")

    s3_client.delete_object.assert_called_once_with(Bucket="photon-bucket", Key="images/abc_dog.png")


def test_delete_empty_reference_skips_backend(s3, s3_client):
    s3.delete("")
    s3.delete(None)

    s3_client.delete_object.assert_not_called()


def test_delete_missing_object_is_not_an_error(s3, s3_client):
    s3_client.delete_object.side_effect = client_error("NoSuchKey", "DeleteObject")

    s3.delete("images/gone.png")


def test_delete_access_denied_raises(s3, s3_client):
    s3_client.delete_object.side_effect = client_error("AccessDenied", "DeleteObject")

    with pytest.raises(StorageError):
        s3.delete("images/locked.png")


def test_discard_file_absorbs_delete_failure(s3, s3_client):
    s3_client.delete_object.side_effect = client_error("AccessDenied", "DeleteObject")

    result = discard_file(s3, "images/locked.png")

    assert result.outcome == DeleteOutcome.FAILED
    assert "AccessDenied" in result.error


def test_url_for_public_bucket(s3):
    assert s3.url_for("images/a.png") == "https://photon-bucket.s3.amazonaws.com/images/a.png"


def test_url_for_custom_endpoint(s3_client):
    s3 = S3Service(bucket_name="b", endpoint_url="http://minio:9000/", client=s3_client)

    assert s3.url_for("images/a.png") == "http://minio:9000/b/images/a.png"


def test_url_for_presigned(s3_client):
    s3_client.generate_presigned_url.return_value = "https://signed"
    s3 = S3Service(bucket_name="b", url_expires_in=600, client=s3_client)

    assert s3.url_for("images/a.png") == "https://signed"
    s3_client.generate_presigned_url.assert_called_once_with(
        'get_object', Params={'Bucket': 'b', 'Key': 'images/a.png'}, ExpiresIn=600
    )


def test_list_files_pages(s3, s3_client):
    modified = datetime(2026, 1, 1, tzinfo=timezone.utc)
    paginator = MagicMock()
    paginator.paginate.return_value = [
        {"Contents": [{"Key": "images/a.png", "Size": 10, "LastModified": modified}]},
        {},
    ]
    s3_client.get_paginator.return_value = paginator

    files = s3.list_files()

    assert [f["file_id"] for f in files] == ["images/a.png"]
    paginator.paginate.assert_called_once_with(Bucket="photon-bucket", Prefix="images/")
