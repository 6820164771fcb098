"""
Connections domain — request orchestration.
"""
from __future__ import annotations

import uuid

from shared.pagination import CursorPage
from app.connections.schemas import (
    ConnectionAcceptedResponse,
    ConnectionListItem,
    ConnectionRejectedResponse,
    ConnectionRequestResponse,
    PendingConnectionItem,
    PendingConnectionsResponse,
    SendConnectionRequest,
)
from app.connections.service import ConnectionService
from app.schemas import SocialUserRef
from app.store.port import ConnectionWithUser


def _pending_item(row: ConnectionWithUser) -> PendingConnectionItem:
    c = row.connection
    return PendingConnectionItem(
        connection_id=c.id,
        user=SocialUserRef.model_validate(row.user),
        message=c.message,
        created_at=c.created_at,
        expires_at=c.expires_at,
    )


async def send_request(
    svc: ConnectionService,
    sender_id: uuid.UUID,
    body: SendConnectionRequest,
) -> ConnectionRequestResponse:
    c = await svc.send_request(sender_id, body.receiver_id, body.message)
    return ConnectionRequestResponse(
        connection_id=c.id,
        status=c.status,
        created_at=c.created_at,
        expires_at=c.expires_at,
    )


async def accept_request(
    svc: ConnectionService,
    connection_id: uuid.UUID,
    actor_id: uuid.UUID,
) -> ConnectionAcceptedResponse:
    c = await svc.accept_request(connection_id, actor_id)
    return ConnectionAcceptedResponse(
        connection_id=c.id, status=c.status, responded_at=c.responded_at
    )


async def reject_request(
    svc: ConnectionService,
    connection_id: uuid.UUID,
    actor_id: uuid.UUID,
) -> ConnectionRejectedResponse:
    c = await svc.reject_request(connection_id, actor_id)
    return ConnectionRejectedResponse(
        connection_id=c.id, status=c.status, cooldown_until=c.cooldown_until
    )


async def list_connections(
    svc: ConnectionService,
    user_id: uuid.UUID,
    cursor: str | None,
    limit: int,
) -> CursorPage[ConnectionListItem]:
    page = await svc.list_connections(user_id, cursor=cursor, limit=limit)
    items = [
        ConnectionListItem(
            connection_id=row.connection.id,
            user=SocialUserRef.model_validate(row.user),
            connected_since=row.connection.responded_at or row.connection.created_at,
        )
        for row in page.items
    ]
    return CursorPage[ConnectionListItem](
        items=items, next_cursor=page.next_cursor, has_more=page.has_more
    )


async def list_pending(
    svc: ConnectionService,
    user_id: uuid.UUID,
) -> PendingConnectionsResponse:
    pending = await svc.list_pending(user_id)
    return PendingConnectionsResponse(
        incoming=[_pending_item(r) for r in pending.incoming],
        outgoing=[_pending_item(r) for r in pending.outgoing],
        incoming_count=len(pending.incoming),
        outgoing_count=len(pending.outgoing),
    )
