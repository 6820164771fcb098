"""
Follows domain — idempotent, asymmetric follow edges.

Following twice, or unfollowing someone you do not follow, is never an error:
the end state is what the caller asked for.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from app.exceptions import CannotFollowSelf, UserNotFound
from app.store.port import EdgeWithUser, RelationshipStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FollowCounts:
    followers: int
    following: int


class FollowService:
    def __init__(self, store: RelationshipStore) -> None:
        self._store = store

    async def follow_user(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> bool:
        if follower_id == following_id:
            raise CannotFollowSelf()
        if not await self._store.user_exists(following_id):
            raise UserNotFound()
        await self._store.upsert_follow(follower_id, following_id)
        logger.debug("%s follows %s", follower_id, following_id)
        return True

    async def unfollow_user(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> bool:
        await self._store.delete_follow(follower_id, following_id)
        return False

    async def get_followers(
        self, user_id: uuid.UUID, *, limit: int, offset: int
    ) -> tuple[list[EdgeWithUser], int]:
        return await self._store.list_followers(user_id, limit, offset)

    async def get_following(
        self, user_id: uuid.UUID, *, limit: int, offset: int
    ) -> tuple[list[EdgeWithUser], int]:
        return await self._store.list_following(user_id, limit, offset)

    async def get_follow_status(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> bool:
        """Return True if follower_id currently follows following_id."""
        return await self._store.follow_exists(follower_id, following_id)

    async def get_follow_counts(self, user_id: uuid.UUID) -> FollowCounts:
        return FollowCounts(
            followers=await self._store.count_followers(user_id),
            following=await self._store.count_following(user_id),
        )
