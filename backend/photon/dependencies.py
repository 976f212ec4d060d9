"""
Service factories.

The storage provider is built once per process from settings and passed in;
services never look at STORAGE_PROVIDER themselves.

Usage:
    async for db in get_db():
        images = get_image_service(db)
        ...
"""
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from photon.services.image_service import ImageService
from photon.services.pair_service import PairService
from photon.services.share_service import ShareService
from photon.services.storage_factory import get_storage_service
from photon.services.storage_interface import StorageInterface


def get_image_service(db: AsyncSession, storage: Optional[StorageInterface] = None) -> ImageService:
    return ImageService(db, storage or get_storage_service())


def get_pair_service(db: AsyncSession) -> PairService:
    return PairService(db)


def get_share_service(db: AsyncSession) -> ShareService:
    return ShareService(db)
