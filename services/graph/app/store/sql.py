"""
SQLAlchemy implementation of the RelationshipStore port.

One instance wraps one request-scoped AsyncSession.  Upserts use the dialect's
``INSERT … ON CONFLICT DO NOTHING`` against the unique pair constraints
(PostgreSQL in production, SQLite in tests); status transitions are single
conditional UPDATE statements whose rowcount is returned to the caller.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from shared.pagination import CursorKey, keyset_after
from app.blocks.constants import ReportReason, ReportTargetType
from app.connections.constants import ACTIVE_STATUSES, ConnectionStatus
from app.models import Block, Connection, Follow, Report, User
from app.models.connection import ACTIVE_PAIR_INDEX
from app.store.port import (
    ActiveConnectionExists,
    ConnectionRecord,
    ConnectionWithUser,
    EdgeWithUser,
    ReportRecord,
    UserRef,
)

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _aware(dt: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything stored is UTC.
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _user_ref(user: User) -> UserRef:
    return UserRef(
        id=user.id,
        display_name=user.display_name,
        avatar_url=user.avatar_url,
        headline=user.headline,
    )


def _connection_record(c: Connection) -> ConnectionRecord:
    return ConnectionRecord(
        id=c.id,
        sender_id=c.sender_id,
        receiver_id=c.receiver_id,
        status=ConnectionStatus(c.status),
        message=c.message,
        created_at=_aware(c.created_at),
        expires_at=_aware(c.expires_at),
        responded_at=_aware(c.responded_at),
        cooldown_until=_aware(c.cooldown_until),
    )


def _between(user_a: uuid.UUID, user_b: uuid.UUID) -> sa.ColumnElement[bool]:
    return sa.or_(
        sa.and_(Connection.sender_id == user_a, Connection.receiver_id == user_b),
        sa.and_(Connection.sender_id == user_b, Connection.receiver_id == user_a),
    )


class SqlRelationshipStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if self._session.in_transaction():
            # Inside the request's unit of work: a SAVEPOINT keeps this block
            # atomic even when the caller catches the error and carries on.
            async with self._session.begin_nested():
                yield
        else:
            async with self._session.begin():
                yield

    async def _insert_ignore(self, model: type, index_elements: list[str], **values: Any) -> None:
        dialect = self._session.get_bind().dialect.name
        try:
            insert = _INSERT_BY_DIALECT[dialect]
        except KeyError:
            raise NotImplementedError(f"Upsert not supported on dialect {dialect!r}") from None
        stmt = insert(model).values(**values).on_conflict_do_nothing(index_elements=index_elements)
        await self._session.execute(stmt)

    # ── Users ─────────────────────────────────────────────────────────────────

    async def user_exists(self, user_id: uuid.UUID) -> bool:
        result = await self._session.execute(sa.select(sa.exists().where(User.id == user_id)))
        return result.scalar_one()

    # ── Connections ───────────────────────────────────────────────────────────

    async def get_connection(self, connection_id: uuid.UUID) -> ConnectionRecord | None:
        result = await self._session.execute(
            sa.select(Connection).where(Connection.id == connection_id)
        )
        row = result.scalar_one_or_none()
        return _connection_record(row) if row is not None else None

    async def find_active_connection(
        self, user_a: uuid.UUID, user_b: uuid.UUID
    ) -> ConnectionRecord | None:
        result = await self._session.execute(
            sa.select(Connection)
            .where(_between(user_a, user_b), Connection.status.in_(ACTIVE_STATUSES))
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _connection_record(row) if row is not None else None

    async def find_rejected_within_cooldown(
        self, sender_id: uuid.UUID, receiver_id: uuid.UUID, now: datetime
    ) -> ConnectionRecord | None:
        result = await self._session.execute(
            sa.select(Connection)
            .where(
                Connection.sender_id == sender_id,
                Connection.receiver_id == receiver_id,
                Connection.status == ConnectionStatus.REJECTED,
                Connection.cooldown_until > now,
            )
            .order_by(Connection.cooldown_until.desc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _connection_record(row) if row is not None else None

    async def count_pending_outgoing(self, sender_id: uuid.UUID) -> int:
        result = await self._session.execute(
            sa.select(sa.func.count())
            .select_from(Connection)
            .where(Connection.sender_id == sender_id, Connection.status == ConnectionStatus.PENDING)
        )
        return result.scalar_one()

    async def create_connection(
        self,
        sender_id: uuid.UUID,
        receiver_id: uuid.UUID,
        message: str | None,
        created_at: datetime,
        expires_at: datetime,
    ) -> ConnectionRecord:
        row = Connection(
            sender_id=sender_id,
            receiver_id=receiver_id,
            message=message,
            status=ConnectionStatus.PENDING,
            created_at=created_at,
            expires_at=expires_at,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(row)
                await self._session.flush()
        except IntegrityError as exc:
            if ACTIVE_PAIR_INDEX not in str(exc.orig):
                raise
            logger.info("Active connection already exists %s ↔ %s", sender_id, receiver_id)
            raise ActiveConnectionExists() from exc
        return _connection_record(row)

    async def conditional_update_connection_status(
        self,
        connection_id: uuid.UUID,
        expected: ConnectionStatus,
        new: ConnectionStatus,
        **fields: Any,
    ) -> int:
        result = await self._session.execute(
            sa.update(Connection)
            .where(Connection.id == connection_id, Connection.status == expected)
            .values(status=new, **fields)
        )
        return result.rowcount

    async def list_accepted_connections(
        self, user_id: uuid.UUID, after: CursorKey | None, limit: int
    ) -> list[ConnectionWithUser]:
        sender = aliased(User)
        receiver = aliased(User)
        stmt = (
            sa.select(Connection, sender, receiver)
            .join(sender, sender.id == Connection.sender_id)
            .join(receiver, receiver.id == Connection.receiver_id)
            .where(
                sa.or_(Connection.sender_id == user_id, Connection.receiver_id == user_id),
                Connection.status == ConnectionStatus.ACCEPTED,
                Connection.responded_at.is_not(None),
            )
        )
        if after is not None:
            stmt = stmt.where(keyset_after(Connection.responded_at, Connection.id, after))
        stmt = stmt.order_by(Connection.responded_at.desc(), Connection.id.desc()).limit(limit)

        rows = (await self._session.execute(stmt)).all()
        return [
            ConnectionWithUser(
                connection=_connection_record(c),
                user=_user_ref(r if c.sender_id == user_id else s),
            )
            for c, s, r in rows
        ]

    async def _list_pending(
        self, *, owner_col: Any, other_col: Any, user_id: uuid.UUID
    ) -> list[ConnectionWithUser]:
        rows = (
            await self._session.execute(
                sa.select(Connection, User)
                .join(User, User.id == other_col)
                .where(owner_col == user_id, Connection.status == ConnectionStatus.PENDING)
                .order_by(Connection.created_at.desc(), Connection.id.desc())
            )
        ).all()
        return [ConnectionWithUser(connection=_connection_record(c), user=_user_ref(u)) for c, u in rows]

    async def list_pending_incoming(self, user_id: uuid.UUID) -> list[ConnectionWithUser]:
        return await self._list_pending(
            owner_col=Connection.receiver_id, other_col=Connection.sender_id, user_id=user_id
        )

    async def list_pending_outgoing(self, user_id: uuid.UUID) -> list[ConnectionWithUser]:
        return await self._list_pending(
            owner_col=Connection.sender_id, other_col=Connection.receiver_id, user_id=user_id
        )

    async def delete_connections_between(self, user_a: uuid.UUID, user_b: uuid.UUID) -> int:
        result = await self._session.execute(
            sa.delete(Connection).where(_between(user_a, user_b))
        )
        return result.rowcount

    # ── Follows ───────────────────────────────────────────────────────────────

    async def upsert_follow(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> None:
        await self._insert_ignore(
            Follow,
            ["follower_id", "following_id"],
            id=uuid.uuid4(),
            follower_id=follower_id,
            following_id=following_id,
            created_at=datetime.now(timezone.utc),
        )

    async def delete_follow(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> None:
        await self._session.execute(
            sa.delete(Follow).where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            )
        )

    async def follow_exists(self, follower_id: uuid.UUID, following_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            sa.select(sa.exists().where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
            ))
        )
        return result.scalar_one()

    async def count_followers(self, user_id: uuid.UUID) -> int:
        result = await self._session.execute(
            sa.select(sa.func.count()).select_from(Follow).where(Follow.following_id == user_id)
        )
        return result.scalar_one()

    async def count_following(self, user_id: uuid.UUID) -> int:
        result = await self._session.execute(
            sa.select(sa.func.count()).select_from(Follow).where(Follow.follower_id == user_id)
        )
        return result.scalar_one()

    async def _list_edges(
        self,
        model: Any,
        *,
        owner_col: Any,
        other_col: Any,
        user_id: uuid.UUID,
        limit: int,
        offset: int,
    ) -> tuple[list[EdgeWithUser], int]:
        total = (
            await self._session.execute(
                sa.select(sa.func.count()).select_from(model).where(owner_col == user_id)
            )
        ).scalar_one()
        rows = (
            await self._session.execute(
                sa.select(model, User)
                .join(User, User.id == other_col)
                .where(owner_col == user_id)
                .order_by(model.created_at.desc(), model.id.desc())
                .limit(limit)
                .offset(offset)
            )
        ).all()
        items = [
            EdgeWithUser(id=edge.id, user=_user_ref(u), created_at=_aware(edge.created_at))
            for edge, u in rows
        ]
        return items, total

    async def list_followers(
        self, user_id: uuid.UUID, limit: int, offset: int
    ) -> tuple[list[EdgeWithUser], int]:
        return await self._list_edges(
            Follow,
            owner_col=Follow.following_id,
            other_col=Follow.follower_id,
            user_id=user_id,
            limit=limit,
            offset=offset,
        )

    async def list_following(
        self, user_id: uuid.UUID, limit: int, offset: int
    ) -> tuple[list[EdgeWithUser], int]:
        return await self._list_edges(
            Follow,
            owner_col=Follow.follower_id,
            other_col=Follow.following_id,
            user_id=user_id,
            limit=limit,
            offset=offset,
        )

    # ── Blocks ────────────────────────────────────────────────────────────────

    async def upsert_block(self, blocker_id: uuid.UUID, blocked_id: uuid.UUID) -> None:
        await self._insert_ignore(
            Block,
            ["blocker_id", "blocked_id"],
            id=uuid.uuid4(),
            blocker_id=blocker_id,
            blocked_id=blocked_id,
            created_at=datetime.now(timezone.utc),
        )

    async def delete_block(self, blocker_id: uuid.UUID, blocked_id: uuid.UUID) -> None:
        await self._session.execute(
            sa.delete(Block).where(
                Block.blocker_id == blocker_id,
                Block.blocked_id == blocked_id,
            )
        )

    async def block_exists_either(self, user_a: uuid.UUID, user_b: uuid.UUID) -> bool:
        result = await self._session.execute(
            sa.select(sa.exists().where(
                sa.or_(
                    sa.and_(Block.blocker_id == user_a, Block.blocked_id == user_b),
                    sa.and_(Block.blocker_id == user_b, Block.blocked_id == user_a),
                )
            ))
        )
        return result.scalar_one()

    async def list_blocked(
        self, user_id: uuid.UUID, limit: int, offset: int
    ) -> tuple[list[EdgeWithUser], int]:
        return await self._list_edges(
            Block,
            owner_col=Block.blocker_id,
            other_col=Block.blocked_id,
            user_id=user_id,
            limit=limit,
            offset=offset,
        )

    # ── Reports ───────────────────────────────────────────────────────────────

    async def create_report(
        self,
        reporter_id: uuid.UUID,
        target_type: ReportTargetType,
        target_id: uuid.UUID,
        reason: ReportReason,
        description: str | None,
    ) -> ReportRecord:
        report = Report(
            reporter_id=reporter_id,
            target_type=target_type,
            target_id=target_id,
            reason=reason,
            description=description,
        )
        self._session.add(report)
        await self._session.flush()
        return ReportRecord(
            id=report.id,
            reporter_id=report.reporter_id,
            target_type=report.target_type,
            target_id=report.target_id,
            reason=report.reason,
            description=report.description,
            status=report.status,
            created_at=_aware(report.created_at),
        )
