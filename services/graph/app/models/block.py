from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.database.postgres import Base
from app.models._common import utcnow


class Block(Base):
    """Block edge (blocker blocks blocked).  Visibility checks treat it as symmetric."""

    __tablename__ = "blocks"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    blocker_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    blocked_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow
    )

    blocker = relationship("User", foreign_keys=[blocker_id], lazy="raise")
    blocked = relationship("User", foreign_keys=[blocked_id], lazy="raise")

    __table_args__ = (
        sa.UniqueConstraint("blocker_id", "blocked_id", name="uq_blocks_pair"),
        sa.CheckConstraint("blocker_id != blocked_id", name="ck_blocks_no_self"),
        sa.Index("idx_blocks_blocker_id", "blocker_id"),
        sa.Index("idx_blocks_blocked_id", "blocked_id"),
    )
