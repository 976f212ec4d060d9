"""
Pytest configuration and fixtures.
"""
import os

# Settings are read at import time; keep tests off any real database/bucket
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STORAGE_PROVIDER", "local")

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from photon.core.database import Base
from photon.models import User
from photon.services.storage_providers.local_service import LocalStorageService
from photon.services.image_service import ImageService
from photon.services.pair_service import PairService
from photon.services.share_service import ShareService


# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def test_db():
    """Create test database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def users(test_db):
    """Three users: ids 1, 2, 3."""
    created = [
        User(email="alice@example.com", full_name="Alice"),
        User(email="bob@example.com", full_name="Bob"),
        User(email="carol@example.com", full_name="Carol"),
    ]
    test_db.add_all(created)
    await test_db.commit()
    return created


@pytest.fixture
def upload_dir(tmp_path):
    # Deliberately not created: the local provider must create it on first store
    return tmp_path / "uploads"


@pytest.fixture
def local_storage(upload_dir):
    return LocalStorageService(upload_dir=str(upload_dir), url_prefix="/uploads")


@pytest.fixture
def image_service(test_db, local_storage):
    return ImageService(test_db, local_storage)


@pytest.fixture
def pair_service(test_db):
    return PairService(test_db)


@pytest.fixture
def share_service(test_db):
    return ShareService(test_db)
