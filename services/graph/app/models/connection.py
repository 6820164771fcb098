"""
Connection requests between two users.

A row is created PENDING and moves exactly once to ACCEPTED or REJECTED.
Rejected rows are kept as history (cooldown lookups read them); a fresh
request after the cooldown inserts a new row.  Rows are only deleted by
block teardown.
"""
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base
from app.connections.constants import MESSAGE_MAX_LENGTH, ConnectionStatus
from app.models._common import utcnow


class Connection(Base):
    __tablename__ = "connections"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    sender_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    receiver_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[ConnectionStatus] = mapped_column(
        sa.Enum(ConnectionStatus, name="connectionstatus"),
        nullable=False,
        default=ConnectionStatus.PENDING,
    )
    message: Mapped[str | None] = mapped_column(sa.String(MESSAGE_MAX_LENGTH), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow
    )
    responded_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)
    cooldown_until: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)

    sender = relationship("User", foreign_keys=[sender_id], lazy="raise")
    receiver = relationship("User", foreign_keys=[receiver_id], lazy="raise")

    __table_args__ = (
        sa.CheckConstraint("sender_id != receiver_id", name="ck_connections_no_self"),
        sa.Index("idx_connections_sender_status", "sender_id", "status"),
        sa.Index("idx_connections_receiver_status", "receiver_id", "status"),
        sa.Index("idx_connections_responded_at_id", "responded_at", "id"),
    )


ACTIVE_PAIR_INDEX = "uq_connections_active_pair"

# At most one PENDING or ACCEPTED row per unordered pair, whichever side sent it.
# CASE instead of LEAST/GREATEST so the same index builds on SQLite.
_pair_low = sa.case(
    (Connection.sender_id < Connection.receiver_id, Connection.sender_id),
    else_=Connection.receiver_id,
)
_pair_high = sa.case(
    (Connection.sender_id < Connection.receiver_id, Connection.receiver_id),
    else_=Connection.sender_id,
)
_active_only = sa.text("status IN ('PENDING', 'ACCEPTED')")

sa.Index(
    ACTIVE_PAIR_INDEX,
    _pair_low,
    _pair_high,
    unique=True,
    postgresql_where=_active_only,
    sqlite_where=_active_only,
)
