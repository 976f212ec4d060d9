"""
Pair model: the friend-request record between two users.

One row per unordered pair of users. The pair is stored twice: directed
(requester_id -> recipient_id) for the request semantics, and canonical
(user_low, user_high) with user_low < user_high so a unique constraint
rejects a second record for the same two users in either direction.
"""
import enum

from sqlalchemy import Column, Integer, Enum, TIMESTAMP, ForeignKey, UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from photon.core.database import Base
from photon.core.config import settings


class PairStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"


class Pair(Base):
    """Friend request, pending or accepted. Rejected/withdrawn requests are deleted."""

    __tablename__ = "pairs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    requester_id = Column(Integer, ForeignKey(f"{settings.schema_prefix}users.id", ondelete="CASCADE"), nullable=False)
    recipient_id = Column(Integer, ForeignKey(f"{settings.schema_prefix}users.id", ondelete="CASCADE"), nullable=False)

    user_low = Column(Integer, nullable=False)
    user_high = Column(Integer, nullable=False)

    status = Column(
        Enum(PairStatus, name="pair_status", native_enum=False, create_constraint=True, length=20),
        nullable=False,
        default=PairStatus.PENDING,
    )

    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now())

    requester = relationship("User", foreign_keys=[requester_id])
    recipient = relationship("User", foreign_keys=[recipient_id])

    __table_args__ = (
        UniqueConstraint('user_low', 'user_high', name='uq_pair_users'),
        CheckConstraint('requester_id <> recipient_id', name='ck_pair_not_self'),
        CheckConstraint('user_low < user_high', name='ck_pair_low_lt_high'),
        Index('idx_pairs_requester', 'requester_id'),
        Index('idx_pairs_recipient', 'recipient_id'),
        {'schema': settings.DB_SCHEMA}
    )

    @classmethod
    def request(cls, requester_id: int, recipient_id: int) -> "Pair":
        """Build a PENDING pair with its canonical ordering filled in."""
        low, high = sorted_pair(requester_id, recipient_id)
        return cls(
            requester_id=requester_id,
            recipient_id=recipient_id,
            user_low=low,
            user_high=high,
            status=PairStatus.PENDING,
        )

    def __repr__(self):
        return f"<Pair {self.requester_id}->{self.recipient_id} {self.status}>"


def sorted_pair(a: int, b: int) -> tuple:
    return (a, b) if a < b else (b, a)
