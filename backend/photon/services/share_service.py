"""
Direct image sharing: an owner grants one viewer access to one image.

Grants are independent of friendship. The (image, owner, viewer) triple is
unique in the `shares` table, which is what stops concurrent duplicate grants.
"""
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from photon.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from photon.models.image import Image
from photon.models.share import Share
from photon.models.user import User
from photon.schemas.sharing import SharedImage, UserContact

logger = logging.getLogger(__name__)


class ShareService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find_share(self, owner_id: int, viewer_id: int, image_id: int) -> Optional[Share]:
        result = await self.db.execute(
            select(Share).where(
                Share.image_id == image_id,
                Share.owner_id == owner_id,
                Share.viewer_id == viewer_id,
            )
        )
        return result.scalar_one_or_none()

    async def _contact(self, user_id: int) -> UserContact:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return UserContact(user_id=user.id, email=user.email, full_name=user.full_name)

    async def share_image(self, owner_id: int, viewer_id: int, image_id: int) -> UserContact:
        """Grant viewer access to the owner's image. Returns the viewer's contact for confirmation."""
        image = await self.db.get(Image, image_id)
        if image is None:
            raise NotFoundError("Image", image_id)
        if image.user_id != owner_id:
            raise ForbiddenError(
                "You can only share your own images",
                details={"image_id": image_id, "user_id": owner_id},
            )
        if owner_id == viewer_id:
            raise ConflictError("Cannot share an image with yourself", details={"image_id": image_id})

        viewer = await self._contact(viewer_id)

        if await self._find_share(owner_id, viewer_id, image_id) is not None:
            raise ConflictError(
                "Image is already shared with this user",
                details={"image_id": image_id, "viewer_id": viewer_id},
            )

        self.db.add(Share(image_id=image_id, owner_id=owner_id, viewer_id=viewer_id))
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError(
                "Image is already shared with this user",
                details={"image_id": image_id, "viewer_id": viewer_id},
            ) from e

        logger.info(f"User {owner_id} shared image {image_id} with user {viewer_id}")
        return viewer

    async def unshare_image(self, owner_id: int, viewer_id: int, image_id: int) -> UserContact:
        """Owner revokes a grant. Returns the viewer's contact."""
        share = await self._find_share(owner_id, viewer_id, image_id)
        if share is None:
            raise NotFoundError("Share", f"image={image_id} owner={owner_id} viewer={viewer_id}")

        viewer = await self._contact(viewer_id)
        await self.db.delete(share)
        await self.db.commit()

        logger.info(f"User {owner_id} unshared image {image_id} from user {viewer_id}")
        return viewer

    async def remove_shared_image(self, viewer_id: int, owner_id: int, image_id: int) -> None:
        """Viewer drops an image someone shared with them."""
        share = await self._find_share(owner_id, viewer_id, image_id)
        if share is None:
            raise NotFoundError("Share", f"image={image_id} owner={owner_id} viewer={viewer_id}")

        await self.db.delete(share)
        await self.db.commit()
        logger.info(f"User {viewer_id} removed shared image {image_id} from user {owner_id}")

    async def check_if_image_shared(self, owner_id: int, viewer_id: int, image_id: int) -> Optional[int]:
        """Share id if the grant exists, else None."""
        share = await self._find_share(owner_id, viewer_id, image_id)
        return share.id if share is not None else None

    async def list_shared_with_me(self, viewer_id: int) -> List[SharedImage]:
        result = await self.db.execute(
            select(
                Image.id,
                Image.storage_key,
                Image.name,
                Image.created_at,
                User.id,
                User.email,
            )
            .select_from(Share)
            .join(Image, Share.image_id == Image.id)
            .join(User, Share.owner_id == User.id)
            .where(Share.viewer_id == viewer_id)
            .order_by(Share.id)
        )
        return [
            SharedImage(
                image_id=image_id,
                image=storage_key,
                name=name,
                created_at=created_at,
                owner_id=owner_id,
                owner_email=owner_email,
            )
            for image_id, storage_key, name, created_at, owner_id, owner_email in result.all()
        ]
