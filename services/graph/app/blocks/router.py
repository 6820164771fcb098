"""
Blocks domain — user-facing routes.

Routes (prefixed /api/v1):
  POST   /blocks                    Block a user (removes any connection both ways)
  DELETE /blocks/{user_id}          Unblock (idempotent; connections are not restored)
  GET    /blocks                    My block list (limit/offset)
  GET    /blocks/{user_id}/status   Is there a block in either direction?
  POST   /reports                   Report a user or content (10/hour)
"""

import uuid

from fastapi import APIRouter, Depends, Query, Request, status

from shared.models.user import CurrentUser
from shared.pagination import OffsetPage
from app.blocks import controller as ctrl
from app.blocks.schemas import (
    BlockListItem,
    BlockRequest,
    BlockResponse,
    BlockStatusResponse,
    ReportRequest,
    ReportResponse,
)
from app.blocks.service import BlockService
from app.dependencies import get_block_service, get_current_user
from app.rate_limit import limiter

router = APIRouter(tags=["blocks"])


@router.post(
    "/blocks",
    response_model=BlockResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Block a user",
    description="Idempotent. Removes any connection or pending request between the two users.",
)
async def block_user(
    body: BlockRequest,
    current_user: CurrentUser = Depends(get_current_user),
    svc: BlockService = Depends(get_block_service),
) -> BlockResponse:
    return await ctrl.block_user(svc, current_user.id, body.user_id)


@router.delete(
    "/blocks/{user_id}",
    response_model=BlockResponse,
    summary="Unblock a user",
)
async def unblock_user(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    svc: BlockService = Depends(get_block_service),
) -> BlockResponse:
    return await ctrl.unblock_user(svc, current_user.id, user_id)


@router.get(
    "/blocks",
    response_model=OffsetPage[BlockListItem],
    summary="List users I have blocked",
)
async def my_blocked(
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    offset: int = Query(0, ge=0, description="Items to skip"),
    current_user: CurrentUser = Depends(get_current_user),
    svc: BlockService = Depends(get_block_service),
) -> OffsetPage[BlockListItem]:
    return await ctrl.list_blocked(svc, current_user.id, limit=limit, offset=offset)


@router.get(
    "/blocks/{user_id}/status",
    response_model=BlockStatusResponse,
    summary="Check for a block between me and a user",
    description="True if either side has blocked the other.",
)
async def block_status(
    user_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    svc: BlockService = Depends(get_block_service),
) -> BlockStatusResponse:
    return await ctrl.block_status(svc, current_user.id, user_id)


@router.post(
    "/reports",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report a user or their content",
)
@limiter.limit("10/hour")
async def report(
    request: Request,
    body: ReportRequest,
    current_user: CurrentUser = Depends(get_current_user),
    svc: BlockService = Depends(get_block_service),
) -> ReportResponse:
    return await ctrl.report(svc, current_user.id, body)
