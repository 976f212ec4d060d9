"""
Image model: metadata for an uploaded asset whose bytes live in a storage backend.
"""
from sqlalchemy import Column, Integer, String, BigInteger, Boolean, TIMESTAMP, CheckConstraint, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from photon.core.database import Base
from photon.core.config import settings


class Image(Base):
    """Image metadata with trash/favourite/archive flags."""

    __tablename__ = "images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey(f"{settings.schema_prefix}users.id", ondelete="CASCADE"), nullable=False)

    # File metadata
    name = Column(String(500), nullable=False)
    mime_type = Column(String(100), nullable=False, default="application/octet-stream")
    size_bytes = Column(BigInteger, nullable=False, default=0)

    # Opaque reference returned by the storage backend
    # (filename for local storage, folder-prefixed key for S3)
    storage_key = Column(String(1024), nullable=False)

    # User-editable flags
    in_trash = Column(Boolean, nullable=False, default=False)
    favourite = Column(Boolean, nullable=False, default=False)
    archived = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="images")

    __table_args__ = (
        CheckConstraint("storage_key <> ''", name='storage_key_not_empty'),
        Index('idx_images_user_created', 'user_id', 'created_at'),
        Index('idx_images_user_trash', 'user_id', 'in_trash'),
        {'schema': settings.DB_SCHEMA}
    )

    def __repr__(self):
        return f"<Image {self.id} {self.name}>"
