"""
Image lifecycle: upload, content replacement, flags, deletion and views.

Bytes go through the injected storage provider; this service only ever
touches the `images` table and the provider's reference strings.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Union

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from photon.core.exceptions import NotFoundError, ForbiddenError
from photon.models.image import Image
from photon.models.share import Share
from photon.models.user import User
from photon.schemas.image import ImageRead
from photon.services.storage_interface import (
    StorageInterface, UploadedContent, DeleteResult, discard_file, spool_content,
)

logger = logging.getLogger(__name__)


class ImageService:

    def __init__(self, db: AsyncSession, storage: StorageInterface):
        self.db = db
        self.storage = storage

    # --- Views ---

    async def _list(self, user_id: int, *conditions) -> List[Image]:
        result = await self.db.execute(
            select(Image)
            .where(Image.user_id == user_id, *conditions)
            .order_by(Image.created_at.desc(), Image.id.desc())
        )
        return list(result.scalars().all())

    async def get_active_images(self, user_id: int) -> List[Image]:
        return await self._list(user_id, Image.in_trash.is_(False), Image.archived.is_(False))

    async def get_favourite_images(self, user_id: int) -> List[Image]:
        return await self._list(
            user_id,
            Image.favourite.is_(True),
            Image.in_trash.is_(False),
            Image.archived.is_(False),
        )

    async def get_archived_images(self, user_id: int) -> List[Image]:
        return await self._list(user_id, Image.archived.is_(True), Image.in_trash.is_(False))

    async def get_trashed_images(self, user_id: int) -> List[Image]:
        # Trash wins over every other flag
        return await self._list(user_id, Image.in_trash.is_(True))

    # --- Lookups ---

    async def get_image(self, image_id: int) -> Image:
        image = await self.db.get(Image, image_id)
        if image is None:
            raise NotFoundError("Image", image_id)
        return image

    async def _get_owned(self, image_id: int, owner_id: Optional[int]) -> Image:
        image = await self.get_image(image_id)
        if owner_id is not None and image.user_id != owner_id:
            raise ForbiddenError(
                "Only the owner can modify this image",
                details={"image_id": image_id, "user_id": owner_id},
            )
        return image

    async def _save(self, image: Image) -> Image:
        await self.db.commit()
        # Reload server-generated columns (created_at/updated_at)
        await self.db.refresh(image)
        return image

    # --- Mutations ---

    @asynccontextmanager
    async def _sized(self, content: UploadedContent) -> AsyncIterator[UploadedContent]:
        """Yield content whose size is known, buffering streams that cannot be measured."""
        if content.byte_size() is not None:
            yield content
            return
        spooled = await asyncio.to_thread(spool_content, content)
        try:
            yield spooled
        finally:
            spooled.stream.close()

    async def add_image(self, content: UploadedContent, name: Optional[str], user_id: int) -> Image:
        """
        Store the bytes, then persist metadata for them.

        A storage failure aborts before any row is written. If the row fails
        to persist after a successful store, the stored bytes are left behind
        (no compensating delete); scripts/cleanup_orphans.py reclaims them.
        """
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)

        async with self._sized(content) as sized:
            size = sized.byte_size()
            reference = await asyncio.to_thread(self.storage.store, sized)

        image = Image(
            user_id=user.id,
            name=name or content.filename or reference,
            storage_key=reference,
            mime_type=content.content_type or "application/octet-stream",
            size_bytes=size,
            in_trash=False,
            favourite=False,
            archived=False,
        )
        self.db.add(image)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to save image metadata, stored file {reference} is orphaned: {e}")
            raise

        await self.db.refresh(image)
        logger.info(f"User {user_id} uploaded image {image.id} ({reference}, {size} bytes)")
        return image

    async def replace_content(
        self,
        image_id: int,
        content: Optional[UploadedContent],
        owner_id: Optional[int] = None,
    ) -> Image:
        """
        Swap an image's stored bytes.

        The old file is deleted before the new one is stored. A failed delete is
        logged and the swap continues; a failed store propagates, leaving the
        row pointing at the (possibly already deleted) old reference.
        """
        image = await self._get_owned(image_id, owner_id)
        if content is None:
            return image

        async with self._sized(content) as sized:
            size = sized.byte_size()
            if size == 0:
                return image

            old_reference = image.storage_key
            cleanup = await asyncio.to_thread(discard_file, self.storage, old_reference)
            if not cleanup.ok:
                logger.warning(f"Old file {old_reference} of image {image_id} left in storage")

            try:
                new_reference = await asyncio.to_thread(self.storage.store, sized)
            except Exception:
                logger.error(f"Upload failed while replacing image {image_id}; old file {old_reference} already removed")
                raise

        image.storage_key = new_reference
        image.size_bytes = size
        image.mime_type = content.content_type or image.mime_type
        await self._save(image)

        logger.info(f"Replaced content of image {image_id}: {old_reference} -> {new_reference}")
        return image

    async def rename_image(self, image_id: int, name: Optional[str], owner_id: Optional[int] = None) -> Image:
        image = await self._get_owned(image_id, owner_id)
        if not name:
            return image
        image.name = name
        return await self._save(image)

    async def update_image(
        self,
        image_id: int,
        name: Optional[str] = None,
        content: Optional[UploadedContent] = None,
        owner_id: Optional[int] = None,
    ) -> Image:
        """Rename and/or replace content in one call."""
        image = await self.rename_image(image_id, name, owner_id)
        if content is not None:
            image = await self.replace_content(image.id, content, owner_id)
        return image

    async def _toggle(self, image_id: int, flag: str, owner_id: Optional[int]) -> bool:
        image = await self._get_owned(image_id, owner_id)
        setattr(image, flag, not getattr(image, flag))
        await self._save(image)
        return getattr(image, flag)

    async def toggle_trash(self, image_id: int, owner_id: Optional[int] = None) -> bool:
        return await self._toggle(image_id, "in_trash", owner_id)

    async def toggle_favourite(self, image_id: int, owner_id: Optional[int] = None) -> bool:
        return await self._toggle(image_id, "favourite", owner_id)

    async def toggle_archive(self, image_id: int, owner_id: Optional[int] = None) -> bool:
        return await self._toggle(image_id, "archived", owner_id)

    async def delete_image(self, image_id: int, owner_id: Optional[int] = None) -> DeleteResult:
        """
        Remove an image. Deleting the stored bytes is best-effort; the row
        (and any shares of it) is deleted regardless of the storage outcome.
        """
        image = await self._get_owned(image_id, owner_id)
        reference = image.storage_key

        result = await asyncio.to_thread(discard_file, self.storage, reference)

        await self.db.execute(delete(Share).where(Share.image_id == image.id))
        await self.db.delete(image)
        await self.db.commit()

        logger.info(f"Deleted image {image_id} (storage cleanup: {result.outcome.value})")
        return result

    # --- URLs ---

    def get_image_url(self, image: Union[Image, str]) -> str:
        reference = image.storage_key if isinstance(image, Image) else image
        return self.storage.url_for(reference)

    def to_read(self, image: Image) -> ImageRead:
        read = ImageRead.model_validate(image)
        read.url = self.get_image_url(image)
        return read
