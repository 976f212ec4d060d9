"""
Friend pairs between users.

Per unordered pair {A, B}:

    NONE --send--> PENDING(requester) --accept--> ACCEPTED
    PENDING --reject/withdraw--> NONE
    ACCEPTED --remove--> NONE

"At most one record per pair" is enforced by the uq_pair_users constraint,
so two concurrent requests for the same pair cannot both succeed.
"""
import enum
import logging
from typing import List, Optional

from sqlalchemy import select, and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from photon.core.exceptions import ConflictError, InvalidStateError, NotFoundError
from photon.models.pair import Pair, PairStatus, sorted_pair
from photon.models.user import User

logger = logging.getLogger(__name__)


class PairState(str, enum.Enum):
    NONE = "NONE"
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"


class PairService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _require_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def _find_pair(self, a_id: int, b_id: int) -> Optional[Pair]:
        low, high = sorted_pair(a_id, b_id)
        result = await self.db.execute(
            select(Pair).where(Pair.user_low == low, Pair.user_high == high)
        )
        return result.scalar_one_or_none()

    async def _find_pending(self, requester_id: int, recipient_id: int) -> Pair:
        """The PENDING record requester -> recipient, or the error explaining why there isn't one."""
        pair = await self._find_pair(requester_id, recipient_id)
        if pair is None:
            raise NotFoundError("Friend request", f"{requester_id}->{recipient_id}")
        if pair.status != PairStatus.PENDING or pair.requester_id != requester_id:
            raise InvalidStateError(
                f"No pending request from user {requester_id} to user {recipient_id}",
                current_state=pair.status.value,
                details={"requester_id": pair.requester_id, "recipient_id": pair.recipient_id},
            )
        return pair

    async def get_state(self, a_id: int, b_id: int) -> PairState:
        pair = await self._find_pair(a_id, b_id)
        if pair is None:
            return PairState.NONE
        return PairState(pair.status.value)

    # --- Transitions ---

    async def send_request(self, from_id: int, to_id: int) -> Pair:
        if from_id == to_id:
            raise ConflictError("Cannot send a friend request to yourself", details={"user_id": from_id})

        await self._require_user(from_id)
        await self._require_user(to_id)

        existing = await self._find_pair(from_id, to_id)
        if existing is not None:
            raise ConflictError(
                "A friend request or friendship already exists between these users",
                details={"status": existing.status.value, "requester_id": existing.requester_id},
            )

        pair = Pair.request(from_id, to_id)
        self.db.add(pair)
        try:
            await self.db.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent request for the same pair
            await self.db.rollback()
            raise ConflictError(
                "A friend request or friendship already exists between these users",
                details={"requester_id": from_id, "recipient_id": to_id},
            ) from e

        await self.db.refresh(pair)
        logger.info(f"User {from_id} sent a friend request to user {to_id}")
        return pair

    async def accept_request(self, by_id: int, requester_id: int) -> Pair:
        pair = await self._find_pending(requester_id, by_id)
        pair.status = PairStatus.ACCEPTED
        await self.db.commit()
        await self.db.refresh(pair)
        logger.info(f"User {by_id} accepted friend request from user {requester_id}")
        return pair

    async def _remove_pending(self, requester_id: int, recipient_id: int) -> None:
        pair = await self._find_pending(requester_id, recipient_id)
        await self.db.delete(pair)
        await self.db.commit()

    async def reject_request(self, by_id: int, requester_id: int) -> None:
        """Recipient declines a request sent to them."""
        await self._remove_pending(requester_id, by_id)
        logger.info(f"User {by_id} rejected friend request from user {requester_id}")

    async def delete_request(self, by_id: int, target_id: int) -> None:
        """Requester withdraws a request they sent."""
        await self._remove_pending(by_id, target_id)
        logger.info(f"User {by_id} withdrew friend request to user {target_id}")

    async def remove_friend(self, a_id: int, b_id: int) -> None:
        pair = await self._find_pair(a_id, b_id)
        if pair is None:
            raise NotFoundError("Friendship", f"{a_id}<->{b_id}")
        if pair.status != PairStatus.ACCEPTED:
            raise InvalidStateError(
                f"Users {a_id} and {b_id} are not friends",
                current_state=pair.status.value,
            )
        await self.db.delete(pair)
        await self.db.commit()
        logger.info(f"User {a_id} removed friend {b_id}")

    # --- Queries ---

    async def get_available_users(self, user_id: int) -> List[User]:
        """Users with no record of any kind with user_id (and not user_id itself)."""
        requested = select(Pair.recipient_id).where(Pair.requester_id == user_id)
        requested_by = select(Pair.requester_id).where(Pair.recipient_id == user_id)
        result = await self.db.execute(
            select(User)
            .where(
                User.id != user_id,
                User.id.not_in(requested),
                User.id.not_in(requested_by),
            )
            .order_by(User.id)
        )
        return list(result.scalars().all())

    async def get_friends(self, user_id: int) -> List[User]:
        result = await self.db.execute(
            select(User)
            .join(
                Pair,
                or_(
                    and_(Pair.requester_id == User.id, Pair.recipient_id == user_id),
                    and_(Pair.recipient_id == User.id, Pair.requester_id == user_id),
                ),
            )
            .where(Pair.status == PairStatus.ACCEPTED)
            .order_by(User.id)
        )
        return list(result.scalars().all())

    async def get_pending_requests(self, user_id: int) -> List[User]:
        """Users who sent user_id a request that is still pending."""
        result = await self.db.execute(
            select(User)
            .join(Pair, Pair.requester_id == User.id)
            .where(Pair.recipient_id == user_id, Pair.status == PairStatus.PENDING)
            .order_by(User.id)
        )
        return list(result.scalars().all())

    async def get_sent_request_ids(self, user_id: int) -> List[int]:
        result = await self.db.execute(
            select(Pair.recipient_id)
            .where(Pair.requester_id == user_id, Pair.status == PairStatus.PENDING)
            .order_by(Pair.recipient_id)
        )
        return list(result.scalars().all())
