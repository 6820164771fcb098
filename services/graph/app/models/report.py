from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base
from app.blocks.constants import ReportReason, ReportStatus, ReportTargetType
from app.models._common import utcnow


class Report(Base):
    """User / content report awaiting moderation.  Review happens elsewhere."""

    __tablename__ = "reports"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    reporter_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    target_type: Mapped[ReportTargetType] = mapped_column(
        sa.Enum(ReportTargetType, name="reporttargettype"), nullable=False
    )
    target_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, nullable=False)
    reason: Mapped[ReportReason] = mapped_column(
        sa.Enum(ReportReason, name="reportreason"), nullable=False
    )
    description: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    status: Mapped[ReportStatus] = mapped_column(
        sa.Enum(ReportStatus, name="reportstatus"),
        nullable=False,
        default=ReportStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        sa.Index("idx_reports_reporter_id", "reporter_id"),
        sa.Index("idx_reports_status", "status"),
        sa.Index("idx_reports_target", "target_type", "target_id"),
    )
