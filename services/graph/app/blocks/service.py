"""
Blocks domain — pure business logic.

State rules:
  block:    cannot block self; idempotent; removes every connection row
            between the pair (both directions, any status) in the same
            transaction as the block insert
  unblock:  idempotent; deleted connections are not restored
  report:   cannot report yourself; anything else is recorded for moderation
"""
from __future__ import annotations

import logging
import uuid

from app.blocks.constants import ReportReason, ReportTargetType
from app.exceptions import CannotBlockSelf, CannotReportSelf, UserNotFound
from app.store.port import EdgeWithUser, RelationshipStore, ReportRecord

logger = logging.getLogger(__name__)


class BlockService:
    def __init__(self, store: RelationshipStore) -> None:
        self._store = store

    async def block_user(self, blocker_id: uuid.UUID, blocked_id: uuid.UUID) -> None:
        if blocker_id == blocked_id:
            raise CannotBlockSelf()
        if not await self._store.user_exists(blocked_id):
            raise UserNotFound()
        async with self._store.transaction():
            await self._store.upsert_block(blocker_id, blocked_id)
            removed = await self._store.delete_connections_between(blocker_id, blocked_id)
        if removed:
            logger.info(
                "Block %s → %s removed %d connection row(s)", blocker_id, blocked_id, removed
            )

    async def unblock_user(self, blocker_id: uuid.UUID, blocked_id: uuid.UUID) -> None:
        await self._store.delete_block(blocker_id, blocked_id)

    async def get_blocked_users(
        self, user_id: uuid.UUID, *, limit: int, offset: int
    ) -> tuple[list[EdgeWithUser], int]:
        return await self._store.list_blocked(user_id, limit, offset)

    async def is_blocked(self, user_a: uuid.UUID, user_b: uuid.UUID) -> bool:
        """True if either user has blocked the other."""
        return await self._store.block_exists_either(user_a, user_b)

    async def report(
        self,
        reporter_id: uuid.UUID,
        target_type: ReportTargetType,
        target_id: uuid.UUID,
        reason: ReportReason,
        description: str | None = None,
    ) -> ReportRecord:
        if target_type == ReportTargetType.USER and target_id == reporter_id:
            raise CannotReportSelf()
        report = await self._store.create_report(
            reporter_id, target_type, target_id, reason, description
        )
        logger.info("Report %s filed by %s against %s %s", report.id, reporter_id, target_type.value, target_id)
        return report
