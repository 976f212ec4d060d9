"""
Tests for storage provider selection and the service factories.
"""
from unittest.mock import patch

import pytest

from photon.core.config import Settings
from photon.core.exceptions import ConfigurationError, NotFoundError, PhotonException
from photon.dependencies import get_image_service, get_pair_service, get_share_service
from photon.services import storage_factory
from photon.services.storage_factory import build_storage_service
from photon.services.storage_providers.local_service import LocalStorageService
from photon.services.storage_providers.s3_service import S3Service


def make_settings(**overrides):
    return Settings(DATABASE_URL="sqlite+aiosqlite:///:memory:", **overrides)


def test_local_provider(tmp_path):
    storage = build_storage_service(make_settings(STORAGE_PROVIDER="local", LOCAL_UPLOAD_DIR=str(tmp_path)))

    assert isinstance(storage, LocalStorageService)
    assert storage.url_for("a.jpg") == "/uploads/a.jpg"


def test_s3_provider_only_builds_s3():
    with patch("photon.services.storage_providers.s3_service.boto3") as boto3:
        storage = build_storage_service(make_settings(
            STORAGE_PROVIDER="S3",
            S3_BUCKET_NAME="photon",
            S3_FOLDER="prod/",
            S3_REGION_NAME="eu-west-1",
        ))

    assert isinstance(storage, S3Service)
    assert storage.folder == "prod/"
    kwargs = boto3.session.Session.return_value.client.call_args.kwargs
    assert kwargs["region_name"] == "eu-west-1"
    # No static keys configured: fall back to the default credential chain
    assert kwargs["aws_access_key_id"] is None


def test_s3_provider_requires_bucket():
    with pytest.raises(ConfigurationError):
        build_storage_service(make_settings(STORAGE_PROVIDER="s3", S3_BUCKET_NAME=""))


def test_unknown_provider():
    with pytest.raises(ConfigurationError) as exc:
        build_storage_service(make_settings(STORAGE_PROVIDER="ftp"))

    assert exc.value.details["supported"] == ["local", "s3"]


def test_get_storage_service_is_cached(monkeypatch, tmp_path):
    monkeypatch.setattr(storage_factory, "_storage_instance", None)
    monkeypatch.setattr(
        storage_factory, "default_settings",
        make_settings(STORAGE_PROVIDER="local", LOCAL_UPLOAD_DIR=str(tmp_path)),
    )

    assert storage_factory.get_storage_service() is storage_factory.get_storage_service()


async def test_service_factories_share_storage(test_db, local_storage):
    images = get_image_service(test_db, local_storage)

    assert images.storage is local_storage
    assert get_pair_service(test_db).db is test_db
    assert get_share_service(test_db).db is test_db


def test_error_details_distinguish_failures():
    error = NotFoundError("Image", 7)

    assert isinstance(error, PhotonException)
    assert error.status_code == 404
    assert error.details == {"resource": "Image", "id": 7}
    assert "Image not found: 7" in str(error)
