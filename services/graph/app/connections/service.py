"""
Connections domain — pure business logic (zero FastAPI routing).

State rules:
  send:     not to self; receiver must exist; no PENDING/ACCEPTED row in either
            direction; not while a rejection cooldown runs (sender → receiver);
            at most `pending_limit` outgoing PENDING requests (soft limit)
  respond:  only the receiver; only from PENDING; one transition per row
  history:  a request after cooldown is a new row; old rejections stay put
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from shared.pagination import CursorKey, InvalidCursorError, build_cursor_page, decode_cursor
from app.connections.constants import ConnectionPolicy, ConnectionStatus
from app.exceptions import (
    AlreadyConnected,
    CannotConnectWithSelf,
    ConnectionCooldownActive,
    ConnectionNotFound,
    ConnectionNotPending,
    ConnectionRequestExpired,
    ConnectionRequestPending,
    InvalidCursor,
    NotConnectionRecipient,
    PendingRequestLimitReached,
    UserNotFound,
)
from app.store.port import (
    ActiveConnectionExists,
    ConnectionRecord,
    ConnectionWithUser,
    RelationshipStore,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ConnectionPage:
    items: list[ConnectionWithUser]
    next_cursor: str | None
    has_more: bool


@dataclass(frozen=True, slots=True)
class PendingConnections:
    incoming: list[ConnectionWithUser]
    outgoing: list[ConnectionWithUser]


class ConnectionService:
    def __init__(
        self,
        store: RelationshipStore,
        policy: ConnectionPolicy | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._policy = policy or ConnectionPolicy()
        self._clock = clock

    # ── Request ───────────────────────────────────────────────────────────────

    async def send_request(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        message: str | None = None,
    ) -> ConnectionRecord:
        if sender_id == receiver_id:
            raise CannotConnectWithSelf()
        if not await self._store.user_exists(receiver_id):
            raise UserNotFound()

        existing = await self._store.find_active_connection(sender_id, receiver_id)
        if existing is not None:
            if existing.status == ConnectionStatus.ACCEPTED:
                raise AlreadyConnected()
            raise ConnectionRequestPending()

        now = self._clock()
        if await self._store.find_rejected_within_cooldown(sender_id, receiver_id, now) is not None:
            raise ConnectionCooldownActive()

        # Read-then-decide: concurrent sends may overshoot by a few.
        pending = await self._store.count_pending_outgoing(sender_id)
        if pending >= self._policy.pending_limit:
            raise PendingRequestLimitReached(self._policy.pending_limit)

        try:
            connection = await self._store.create_connection(
                sender_id=sender_id,
                receiver_id=receiver_id,
                message=message,
                created_at=now,
                expires_at=now + self._policy.expiry,
            )
        except ActiveConnectionExists:
            # Lost a race with a concurrent request for the same pair.
            raise ConnectionRequestPending() from None
        logger.info("Connection request %s sent %s → %s", connection.id, sender_id, receiver_id)
        return connection

    # ── Respond ───────────────────────────────────────────────────────────────

    async def _load_pending_for_recipient(
        self, connection_id: uuid.UUID, actor_id: uuid.UUID, action: str
    ) -> ConnectionRecord:
        connection = await self._store.get_connection(connection_id)
        if connection is None:
            raise ConnectionNotFound()
        if connection.receiver_id != actor_id:
            raise NotConnectionRecipient(action)
        if connection.status != ConnectionStatus.PENDING:
            raise ConnectionNotPending()
        return connection

    async def _transition(
        self, connection: ConnectionRecord, new: ConnectionStatus, **fields
    ) -> None:
        affected = await self._store.conditional_update_connection_status(
            connection.id, ConnectionStatus.PENDING, new, **fields
        )
        if affected == 0:
            logger.warning(
                "Connection %s left PENDING concurrently; %s discarded", connection.id, new.value
            )
            raise ConnectionNotPending()

    async def accept_request(
        self, connection_id: uuid.UUID, actor_id: uuid.UUID
    ) -> ConnectionRecord:
        connection = await self._load_pending_for_recipient(connection_id, actor_id, "accept")
        now = self._clock()
        if self._policy.enforce_expiry and connection.expires_at <= now:
            raise ConnectionRequestExpired()

        await self._transition(connection, ConnectionStatus.ACCEPTED, responded_at=now)
        logger.info("Connection request %s accepted by %s", connection.id, actor_id)
        return ConnectionRecord(
            id=connection.id,
            sender_id=connection.sender_id,
            receiver_id=connection.receiver_id,
            status=ConnectionStatus.ACCEPTED,
            message=connection.message,
            created_at=connection.created_at,
            expires_at=connection.expires_at,
            responded_at=now,
        )

    async def reject_request(
        self, connection_id: uuid.UUID, actor_id: uuid.UUID
    ) -> ConnectionRecord:
        connection = await self._load_pending_for_recipient(connection_id, actor_id, "reject")
        now = self._clock()
        cooldown_until = now + self._policy.cooldown

        await self._transition(
            connection,
            ConnectionStatus.REJECTED,
            responded_at=now,
            cooldown_until=cooldown_until,
        )
        logger.info(
            "Connection request %s rejected by %s; cooldown until %s",
            connection.id, actor_id, cooldown_until.isoformat(),
        )
        return ConnectionRecord(
            id=connection.id,
            sender_id=connection.sender_id,
            receiver_id=connection.receiver_id,
            status=ConnectionStatus.REJECTED,
            message=connection.message,
            created_at=connection.created_at,
            expires_at=connection.expires_at,
            responded_at=now,
            cooldown_until=cooldown_until,
        )

    # ── Listings ──────────────────────────────────────────────────────────────

    async def list_connections(
        self,
        user_id: uuid.UUID,
        cursor: str | None = None,
        limit: int = 20,
    ) -> ConnectionPage:
        try:
            after: CursorKey | None = decode_cursor(cursor)
        except InvalidCursorError as exc:
            raise InvalidCursor(str(exc)) from exc

        rows = await self._store.list_accepted_connections(user_id, after, limit + 1)
        items, next_cursor, has_more = build_cursor_page(
            rows, limit, key=lambda r: (r.connection.responded_at, r.connection.id)
        )
        return ConnectionPage(items=items, next_cursor=next_cursor, has_more=has_more)

    async def list_pending(self, user_id: uuid.UUID) -> PendingConnections:
        incoming = await self._store.list_pending_incoming(user_id)
        outgoing = await self._store.list_pending_outgoing(user_id)
        return PendingConnections(incoming=incoming, outgoing=outgoing)
