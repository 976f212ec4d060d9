"""
User model. Owners and viewers of images, and both ends of a pair.
"""
from sqlalchemy import Column, Integer, String, TIMESTAMP
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from photon.core.database import Base
from photon.core.config import settings


class User(Base):
    """User account, identified by a unique email."""

    __tablename__ = "users"
    __table_args__ = {'schema': settings.DB_SCHEMA}

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=True)

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())

    # Relationships
    images = relationship("Image", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email}>"
