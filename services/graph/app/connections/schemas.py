"""
Connections domain — Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.connections.constants import MESSAGE_MAX_LENGTH, ConnectionStatus
from app.schemas import SocialUserRef, StrictBody


class SendConnectionRequest(StrictBody):
    receiver_id: uuid.UUID
    message: str | None = Field(None, max_length=MESSAGE_MAX_LENGTH)


class ConnectionRequestResponse(BaseModel):
    connection_id: uuid.UUID
    status: ConnectionStatus
    created_at: datetime
    expires_at: datetime


class ConnectionAcceptedResponse(BaseModel):
    connection_id: uuid.UUID
    status: ConnectionStatus
    responded_at: datetime


class ConnectionRejectedResponse(BaseModel):
    connection_id: uuid.UUID
    status: ConnectionStatus
    cooldown_until: datetime


class ConnectionListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    connection_id: uuid.UUID
    user: SocialUserRef       # the other party
    connected_since: datetime


class PendingConnectionItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    connection_id: uuid.UUID
    user: SocialUserRef       # sender for incoming, receiver for outgoing
    message: str | None
    created_at: datetime
    expires_at: datetime


class PendingConnectionsResponse(BaseModel):
    incoming: list[PendingConnectionItem]
    outgoing: list[PendingConnectionItem]
    incoming_count: int
    outgoing_count: int
