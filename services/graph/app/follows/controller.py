"""
Follows domain — request orchestration.
"""
from __future__ import annotations

import uuid

from shared.pagination import OffsetPage
from app.follows.schemas import FollowCountsResponse, FollowListItem, FollowStateResponse
from app.follows.service import FollowService
from app.store.port import EdgeWithUser


def _page(rows: list[EdgeWithUser], total: int, limit: int, offset: int) -> OffsetPage[FollowListItem]:
    return OffsetPage[FollowListItem](
        items=[FollowListItem.model_validate(r) for r in rows],
        total=total,
        limit=limit,
        offset=offset,
    )


async def follow_user(
    svc: FollowService,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> FollowStateResponse:
    return FollowStateResponse(following=await svc.follow_user(follower_id, following_id))


async def unfollow_user(
    svc: FollowService,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> FollowStateResponse:
    return FollowStateResponse(following=await svc.unfollow_user(follower_id, following_id))


async def list_followers(
    svc: FollowService,
    user_id: uuid.UUID,
    limit: int,
    offset: int,
) -> OffsetPage[FollowListItem]:
    rows, total = await svc.get_followers(user_id, limit=limit, offset=offset)
    return _page(rows, total, limit, offset)


async def list_following(
    svc: FollowService,
    user_id: uuid.UUID,
    limit: int,
    offset: int,
) -> OffsetPage[FollowListItem]:
    rows, total = await svc.get_following(user_id, limit=limit, offset=offset)
    return _page(rows, total, limit, offset)


async def follow_status(
    svc: FollowService,
    follower_id: uuid.UUID,
    following_id: uuid.UUID,
) -> FollowStateResponse:
    return FollowStateResponse(following=await svc.get_follow_status(follower_id, following_id))


async def follow_counts(svc: FollowService, user_id: uuid.UUID) -> FollowCountsResponse:
    counts = await svc.get_follow_counts(user_id)
    return FollowCountsResponse(followers=counts.followers, following=counts.following)
