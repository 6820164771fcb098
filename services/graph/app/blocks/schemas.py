"""
Blocks domain — Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.blocks.constants import (
    REPORT_DESCRIPTION_MAX_LENGTH,
    ReportReason,
    ReportStatus,
    ReportTargetType,
)
from app.schemas import SocialUserRef, StrictBody


class BlockRequest(StrictBody):
    user_id: uuid.UUID


class BlockResponse(BaseModel):
    blocked_id: uuid.UUID
    blocked: bool


class BlockStatusResponse(BaseModel):
    blocked: bool


class BlockListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user: SocialUserRef
    created_at: datetime


# ── Report ─────────────────────────────────────────────────────────────────────

class ReportRequest(StrictBody):
    target_type: ReportTargetType
    target_id: uuid.UUID
    reason: ReportReason
    description: str | None = Field(None, max_length=REPORT_DESCRIPTION_MAX_LENGTH)


class ReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    target_type: ReportTargetType
    target_id: uuid.UUID
    reason: ReportReason
    status: ReportStatus
    created_at: datetime
