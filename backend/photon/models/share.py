"""
Share model: a standing grant letting one viewer see one of the owner's images.
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from photon.core.database import Base
from photon.core.config import settings


class Share(Base):
    __tablename__ = "shares"
    __table_args__ = (
        UniqueConstraint('image_id', 'owner_id', 'viewer_id', name='uq_share_image_owner_viewer'),
        Index('idx_shares_viewer', 'viewer_id'),
        {'schema': settings.DB_SCHEMA}
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    image_id = Column(Integer, ForeignKey(f'{settings.schema_prefix}images.id', ondelete='CASCADE'), nullable=False)
    owner_id = Column(Integer, ForeignKey(f'{settings.schema_prefix}users.id', ondelete='CASCADE'), nullable=False)
    viewer_id = Column(Integer, ForeignKey(f'{settings.schema_prefix}users.id', ondelete='CASCADE'), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    image = relationship("Image")
    owner = relationship("User", foreign_keys=[owner_id])
    viewer = relationship("User", foreign_keys=[viewer_id])

    def __repr__(self):
        return f"<Share {self.id} Image={self.image_id} Owner={self.owner_id} Viewer={self.viewer_id}>"
