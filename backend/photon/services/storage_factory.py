import logging
from typing import Optional

from photon.core.config import Settings, settings as default_settings
from photon.core.exceptions import ConfigurationError
from photon.services.storage_interface import StorageInterface
from photon.services.storage_providers.local_service import LocalStorageService
from photon.services.storage_providers.s3_service import S3Service

logger = logging.getLogger(__name__)

_storage_instance: Optional[StorageInterface] = None


def build_storage_service(settings: Settings) -> StorageInterface:
    """
    Construct the one storage provider selected by settings.
    The other provider is never constructed.
    """
    provider = settings.STORAGE_PROVIDER.lower()
    logger.info(f"Initializing Storage Provider: {provider}")

    if provider == "local":
        return LocalStorageService(
            upload_dir=settings.LOCAL_UPLOAD_DIR,
            url_prefix=settings.LOCAL_URL_PREFIX,
        )
    if provider == "s3":
        if not settings.S3_BUCKET_NAME:
            raise ConfigurationError("S3_BUCKET_NAME is required when STORAGE_PROVIDER=s3")
        return S3Service(
            bucket_name=settings.S3_BUCKET_NAME,
            folder=settings.S3_FOLDER,
            region_name=settings.S3_REGION_NAME,
            endpoint_url=settings.S3_ENDPOINT_URL,
            access_key=settings.S3_ACCESS_KEY_ID,
            secret_key=settings.S3_SECRET_ACCESS_KEY,
            url_expires_in=settings.S3_URL_EXPIRES_IN,
        )
    raise ConfigurationError(
        f"Unknown storage provider '{settings.STORAGE_PROVIDER}'",
        details={"supported": ["local", "s3"]},
    )


def get_storage_service() -> StorageInterface:
    """Process-wide storage provider, built once from the application settings."""
    global _storage_instance

    if _storage_instance is None:
        _storage_instance = build_storage_service(default_settings)
    return _storage_instance
