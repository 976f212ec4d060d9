"""
Core configuration for Photon.
Loads settings from environment variables.
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    APP_NAME: str = "Photon"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./photon.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DB_SCHEMA: Optional[str] = None

    # Storage Provider
    STORAGE_PROVIDER: str = "local"  # "local" or "s3"

    # Local filesystem
    LOCAL_UPLOAD_DIR: str = "uploads"
    LOCAL_URL_PREFIX: str = "/uploads"

    # S3 Compatible (AWS, R2, MinIO)
    S3_BUCKET_NAME: str = ""
    S3_FOLDER: str = "images/"
    S3_REGION_NAME: str = "us-east-1"
    S3_ENDPOINT_URL: str = ""
    S3_ACCESS_KEY_ID: str = ""
    S3_SECRET_ACCESS_KEY: str = ""
    S3_URL_EXPIRES_IN: int = 0  # 0 = public bucket URLs, otherwise presigned GET

    @property
    def schema_prefix(self) -> str:
        """Prefix for schema-qualified foreign keys ("" when using the default schema)."""
        return f"{self.DB_SCHEMA}." if self.DB_SCHEMA else ""

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
