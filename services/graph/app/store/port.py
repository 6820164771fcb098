"""
RelationshipStore — the storage port consumed by the relationship services.

The services depend only on this protocol and the plain records below, never
on ORM rows or a session.  These guarantees are part of the contract, not
implementation detail:

  * ``upsert_follow`` / ``upsert_block`` are single atomic insert-or-ignore
    operations keyed by the unique pair, so concurrent identical calls never
    create two rows and never raise.
  * ``conditional_update_connection_status`` only touches the row while it
    still has ``expected`` status and reports how many rows it changed.  The
    caller uses a zero count to detect a concurrent transition.
  * ``create_connection`` raises ActiveConnectionExists instead of inserting a
    second PENDING/ACCEPTED row for the same unordered pair.
"""
from __future__ import annotations

import uuid
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from shared.pagination import CursorKey
from app.blocks.constants import ReportReason, ReportStatus, ReportTargetType
from app.connections.constants import ConnectionStatus


class ActiveConnectionExists(Exception):
    """The pair already has a PENDING or ACCEPTED connection."""


# ── Records ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class UserRef:
    """Minimal public profile embedded in relationship listings."""

    id: uuid.UUID
    display_name: str
    avatar_url: str | None = None
    headline: str | None = None


@dataclass(frozen=True, slots=True)
class ConnectionRecord:
    id: uuid.UUID
    sender_id: uuid.UUID
    receiver_id: uuid.UUID
    status: ConnectionStatus
    message: str | None
    created_at: datetime
    expires_at: datetime
    responded_at: datetime | None = None
    cooldown_until: datetime | None = None


@dataclass(frozen=True, slots=True)
class ConnectionWithUser:
    """A connection plus the *other* party, relative to the querying user."""

    connection: ConnectionRecord
    user: UserRef


@dataclass(frozen=True, slots=True)
class EdgeWithUser:
    """A follow or block edge plus the user on the far side of it."""

    id: uuid.UUID
    user: UserRef
    created_at: datetime


@dataclass(frozen=True, slots=True)
class ReportRecord:
    id: uuid.UUID
    reporter_id: uuid.UUID
    target_type: ReportTargetType
    target_id: uuid.UUID
    reason: ReportReason
    description: str | None
    status: ReportStatus
    created_at: datetime


# ── Port ───────────────────────────────────────────────────────────────────────

class RelationshipStore(Protocol):
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """All writes inside the block commit or roll back together."""
        ...

    # users
    async def user_exists(self, user_id: uuid.UUID) -> bool: ...

    # connections
    async def get_connection(self, connection_id: uuid.UUID) -> ConnectionRecord | None: ...

    async def find_active_connection(
        self, user_a: uuid.UUID, user_b: uuid.UUID
    ) -> ConnectionRecord | None:
        """PENDING or ACCEPTED connection between the pair, either direction."""
        ...

    async def find_rejected_within_cooldown(
        self, sender_id: uuid.UUID, receiver_id: uuid.UUID, now: datetime
    ) -> ConnectionRecord | None:
        """REJECTED sender→receiver row whose cooldown_until is after `now`."""
        ...

    async def count_pending_outgoing(self, sender_id: uuid.UUID) -> int: ...

    async def create_connection(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        message: str | None,
        created_at: datetime,
        expires_at: datetime,
    ) -> ConnectionRecord: ...

    async def conditional_update_connection_status(
        self,
        connection_id: uuid.UUID,
        expected: ConnectionStatus,
        new: ConnectionStatus,
        **fields: Any,
    ) -> int: ...

    async def list_accepted_connections(
        self, user_id: uuid.UUID, after: CursorKey | None, limit: int
    ) -> list[ConnectionWithUser]:
        """ACCEPTED connections ordered (responded_at desc, id desc), at most `limit` rows."""
        ...

    async def list_pending_incoming(self, user_id: uuid.UUID) -> list[ConnectionWithUser]: ...

    async def list_pending_outgoing(self, user_id: uuid.UUID) -> list[ConnectionWithUser]: ...

    async def delete_connections_between(self, user_a: uuid.UUID, user_b: uuid.UUID) -> int: ...

    # follows
    async def upsert_follow(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> None: ...

    async def delete_follow(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> None: ...

    async def follow_exists(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> bool: ...

    async def count_followers(self, user_id: uuid.UUID) -> int: ...

    async def count_following(self, user_id: uuid.UUID) -> int: ...

    async def list_followers(
        self, user_id: uuid.UUID, limit: int, offset: int
    ) -> tuple[list[EdgeWithUser], int]: ...

    async def list_following(
        self, user_id: uuid.UUID, limit: int, offset: int
    ) -> tuple[list[EdgeWithUser], int]: ...

    # blocks
    async def upsert_block(self, blocker_id: uuid.UUID, blocked_id: uuid.UUID) -> None: ...

    async def delete_block(self, blocker_id: uuid.UUID, blocked_id: uuid.UUID) -> None: ...

    async def block_exists_either(self, user_a: uuid.UUID, user_b: uuid.UUID) -> bool: ...

    async def list_blocked(
        self, user_id: uuid.UUID, limit: int, offset: int
    ) -> tuple[list[EdgeWithUser], int]: ...

    # reports
    async def create_report(
        self,
        reporter_id: uuid.UUID,
        target_type: ReportTargetType,
        target_id: uuid.UUID,
        reason: ReportReason,
        description: str | None,
    ) -> ReportRecord: ...
