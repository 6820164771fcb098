"""In-memory RelationshipStore and a controllable clock for service-level tests."""
from __future__ import annotations

import copy
import uuid
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from shared.pagination import CursorKey
from app.blocks.constants import ReportStatus
from app.connections.constants import ACTIVE_STATUSES, ConnectionStatus
from app.store.port import (
    ActiveConnectionExists,
    ConnectionRecord,
    ConnectionWithUser,
    EdgeWithUser,
    ReportRecord,
    UserRef,
)


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class InMemoryRelationshipStore:
    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.users: dict[uuid.UUID, UserRef] = {}
        self.connections: dict[uuid.UUID, ConnectionRecord] = {}
        self.follows: dict[tuple[uuid.UUID, uuid.UUID], EdgeWithUser] = {}
        self.blocks: dict[tuple[uuid.UUID, uuid.UUID], EdgeWithUser] = {}
        self.reports: list[ReportRecord] = []
        self.fail_next_delete = False

    def add_user(self, name: str = "User") -> uuid.UUID:
        user_id = uuid.uuid4()
        self.users[user_id] = UserRef(id=user_id, display_name=name)
        return user_id

    @asynccontextmanager
    async def transaction(self):
        snapshot = copy.deepcopy((self.connections, self.follows, self.blocks, self.reports))
        try:
            yield
        except BaseException:
            self.connections, self.follows, self.blocks, self.reports = snapshot
            raise

    # users

    async def user_exists(self, user_id):
        return user_id in self.users

    # connections

    async def get_connection(self, connection_id):
        return self.connections.get(connection_id)

    async def find_active_connection(self, user_a, user_b):
        for c in self.connections.values():
            if {c.sender_id, c.receiver_id} == {user_a, user_b} and c.status in ACTIVE_STATUSES:
                return c
        return None

    async def find_rejected_within_cooldown(self, sender_id, receiver_id, now):
        for c in self.connections.values():
            if (
                c.sender_id == sender_id
                and c.receiver_id == receiver_id
                and c.status == ConnectionStatus.REJECTED
                and c.cooldown_until is not None
                and c.cooldown_until > now
            ):
                return c
        return None

    async def count_pending_outgoing(self, sender_id):
        return sum(
            1 for c in self.connections.values()
            if c.sender_id == sender_id and c.status == ConnectionStatus.PENDING
        )

    async def create_connection(self, sender_id, receiver_id, message, created_at, expires_at):
        for c in self.connections.values():
            if {c.sender_id, c.receiver_id} == {sender_id, receiver_id} and c.status in ACTIVE_STATUSES:
                raise ActiveConnectionExists()
        record = ConnectionRecord(
            id=uuid.uuid4(),
            sender_id=sender_id,
            receiver_id=receiver_id,
            status=ConnectionStatus.PENDING,
            message=message,
            created_at=created_at,
            expires_at=expires_at,
        )
        self.connections[record.id] = record
        return record

    async def conditional_update_connection_status(self, connection_id, expected, new, **fields):
        current = self.connections.get(connection_id)
        if current is None or current.status != expected:
            return 0
        self.connections[connection_id] = replace(current, status=new, **fields)
        return 1

    def _other(self, c: ConnectionRecord, user_id: uuid.UUID) -> UserRef:
        return self.users[c.receiver_id if c.sender_id == user_id else c.sender_id]

    async def list_accepted_connections(self, user_id, after: CursorKey | None, limit):
        rows = [
            c for c in self.connections.values()
            if user_id in (c.sender_id, c.receiver_id)
            and c.status == ConnectionStatus.ACCEPTED
            and c.responded_at is not None
        ]
        rows.sort(key=lambda c: (c.responded_at, c.id), reverse=True)
        if after is not None:
            rows = [c for c in rows if (c.responded_at, c.id) < (after.created_at, after.id)]
        return [ConnectionWithUser(connection=c, user=self._other(c, user_id)) for c in rows[:limit]]

    async def _pending(self, predicate, user_id):
        rows = [
            c for c in self.connections.values()
            if predicate(c) and c.status == ConnectionStatus.PENDING
        ]
        rows.sort(key=lambda c: (c.created_at, c.id), reverse=True)
        return [ConnectionWithUser(connection=c, user=self._other(c, user_id)) for c in rows]

    async def list_pending_incoming(self, user_id):
        return await self._pending(lambda c: c.receiver_id == user_id, user_id)

    async def list_pending_outgoing(self, user_id):
        return await self._pending(lambda c: c.sender_id == user_id, user_id)

    async def delete_connections_between(self, user_a, user_b):
        if self.fail_next_delete:
            self.fail_next_delete = False
            raise RuntimeError("storage unavailable")
        doomed = [
            cid for cid, c in self.connections.items()
            if {c.sender_id, c.receiver_id} == {user_a, user_b}
        ]
        for cid in doomed:
            del self.connections[cid]
        return len(doomed)

    # follows / blocks

    def _edge(self, other_id: uuid.UUID) -> EdgeWithUser:
        return EdgeWithUser(id=uuid.uuid4(), user=self.users[other_id], created_at=self.clock())

    async def upsert_follow(self, follower_id, following_id):
        self.follows.setdefault((follower_id, following_id), self._edge(following_id))

    async def delete_follow(self, follower_id, following_id):
        self.follows.pop((follower_id, following_id), None)

    async def follow_exists(self, follower_id, following_id):
        return (follower_id, following_id) in self.follows

    async def count_followers(self, user_id):
        return sum(1 for (_, b) in self.follows if b == user_id)

    async def count_following(self, user_id):
        return sum(1 for (a, _) in self.follows if a == user_id)

    def _page(self, edges: list[EdgeWithUser], limit: int, offset: int):
        edges.sort(key=lambda e: (e.created_at, e.id), reverse=True)
        return edges[offset:offset + limit], len(edges)

    async def list_followers(self, user_id, limit, offset):
        edges = [
            replace(e, user=self.users[a])
            for (a, b), e in self.follows.items() if b == user_id
        ]
        return self._page(edges, limit, offset)

    async def list_following(self, user_id, limit, offset):
        edges = [e for (a, _), e in self.follows.items() if a == user_id]
        return self._page(edges, limit, offset)

    async def upsert_block(self, blocker_id, blocked_id):
        self.blocks.setdefault((blocker_id, blocked_id), self._edge(blocked_id))

    async def delete_block(self, blocker_id, blocked_id):
        self.blocks.pop((blocker_id, blocked_id), None)

    async def block_exists_either(self, user_a, user_b):
        return (user_a, user_b) in self.blocks or (user_b, user_a) in self.blocks

    async def list_blocked(self, user_id, limit, offset):
        edges = [e for (a, _), e in self.blocks.items() if a == user_id]
        return self._page(edges, limit, offset)

    # reports

    async def create_report(self, reporter_id, target_type, target_id, reason, description):
        record = ReportRecord(
            id=uuid.uuid4(),
            reporter_id=reporter_id,
            target_type=target_type,
            target_id=target_id,
            reason=reason,
            description=description,
            status=ReportStatus.PENDING,
            created_at=self.clock(),
        )
        self.reports.append(record)
        return record
