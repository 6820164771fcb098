"""
Follows domain — user-facing routes.

Routes (prefixed /api/v1/follows):
  POST   /                    Follow a user (idempotent, 50/hour)
  DELETE /{user_id}           Unfollow (idempotent)
  GET    /followers           Who follows me (limit/offset)
  GET    /following           Who I follow (limit/offset)
  GET    /{user_id}/status    Do I follow this user?
  GET    /{user_id}/counts    Follower / following counts for a user
"""

import uuid

from fastapi import APIRouter, Depends, Query, Request, status

from shared.models.user import CurrentUser
from shared.pagination import OffsetPage
from app.dependencies import get_current_user, get_follow_service
from app.follows import controller as ctrl
from app.follows.schemas import (
    FollowCountsResponse,
    FollowListItem,
    FollowRequest,
    FollowStateResponse,
)
from app.follows.service import FollowService
from app.rate_limit import limiter

router = APIRouter(prefix="/follows", tags=["follows"])


@router.post(
    "",
    response_model=FollowStateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Follow a user",
    description="Idempotent: following someone you already follow succeeds. Rate-limited to 50 per hour.",
)
@limiter.limit("50/hour")
async def follow_user(
    request: Request,
    body: FollowRequest,
    current_user: CurrentUser = Depends(get_current_user),
    svc: FollowService = Depends(get_follow_service),
) -> FollowStateResponse:
    return await ctrl.follow_user(svc, current_user.id, body.user_id)


@router.delete(
    "/{user_id}",
    response_model=FollowStateResponse,
    summary="Unfollow a user",
    description="Idempotent: unfollowing someone you do not follow succeeds.",
)
async def unfollow_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    svc: FollowService = Depends(get_follow_service),
) -> FollowStateResponse:
    return await ctrl.unfollow_user(svc, current_user.id, user_id)


@router.get(
    "/followers",
    response_model=OffsetPage[FollowListItem],
    summary="List users who follow me",
)
async def my_followers(
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    offset: int = Query(0, ge=0, description="Items to skip"),
    current_user: CurrentUser = Depends(get_current_user),
    svc: FollowService = Depends(get_follow_service),
) -> OffsetPage[FollowListItem]:
    return await ctrl.list_followers(svc, current_user.id, limit=limit, offset=offset)


@router.get(
    "/following",
    response_model=OffsetPage[FollowListItem],
    summary="List users I follow",
)
async def my_following(
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    offset: int = Query(0, ge=0, description="Items to skip"),
    current_user: CurrentUser = Depends(get_current_user),
    svc: FollowService = Depends(get_follow_service),
) -> OffsetPage[FollowListItem]:
    return await ctrl.list_following(svc, current_user.id, limit=limit, offset=offset)


@router.get(
    "/{user_id}/status",
    response_model=FollowStateResponse,
    summary="Check whether I follow a user",
)
async def follow_status(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    svc: FollowService = Depends(get_follow_service),
) -> FollowStateResponse:
    return await ctrl.follow_status(svc, current_user.id, user_id)


@router.get(
    "/{user_id}/counts",
    response_model=FollowCountsResponse,
    summary="Follower and following counts for a user",
)
async def follow_counts(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),  # noqa: ARG001 (auth only)
    svc: FollowService = Depends(get_follow_service),
) -> FollowCountsResponse:
    return await ctrl.follow_counts(svc, user_id)
