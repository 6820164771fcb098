"""
Blocks domain — request orchestration.
"""
from __future__ import annotations

import uuid

from shared.pagination import OffsetPage
from app.blocks.schemas import (
    BlockListItem,
    BlockResponse,
    BlockStatusResponse,
    ReportRequest,
    ReportResponse,
)
from app.blocks.service import BlockService


async def block_user(
    svc: BlockService,
    blocker_id: uuid.UUID,
    blocked_id: uuid.UUID,
) -> BlockResponse:
    await svc.block_user(blocker_id, blocked_id)
    return BlockResponse(blocked_id=blocked_id, blocked=True)


async def unblock_user(
    svc: BlockService,
    blocker_id: uuid.UUID,
    blocked_id: uuid.UUID,
) -> BlockResponse:
    await svc.unblock_user(blocker_id, blocked_id)
    return BlockResponse(blocked_id=blocked_id, blocked=False)


async def list_blocked(
    svc: BlockService,
    user_id: uuid.UUID,
    limit: int,
    offset: int,
) -> OffsetPage[BlockListItem]:
    rows, total = await svc.get_blocked_users(user_id, limit=limit, offset=offset)
    return OffsetPage[BlockListItem](
        items=[BlockListItem.model_validate(r) for r in rows],
        total=total,
        limit=limit,
        offset=offset,
    )


async def block_status(
    svc: BlockService,
    user_id: uuid.UUID,
    other_id: uuid.UUID,
) -> BlockStatusResponse:
    return BlockStatusResponse(blocked=await svc.is_blocked(user_id, other_id))


async def report(
    svc: BlockService,
    reporter_id: uuid.UUID,
    body: ReportRequest,
) -> ReportResponse:
    record = await svc.report(
        reporter_id, body.target_type, body.target_id, body.reason, body.description
    )
    return ReportResponse.model_validate(record)
