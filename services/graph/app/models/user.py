"""
Read-side projection of platform users.

The identity service owns user accounts; this service only needs enough of a
user to check existence and render the minimal public profile embedded in
relationship listings.
"""
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base
from app.models._common import utcnow


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid, primary_key=True, default=uuid.uuid4)
    display_name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(sa.String(500), nullable=True)
    headline: Mapped[str | None] = mapped_column(sa.String(220), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), nullable=False, default=utcnow
    )
