"""
Schemas shared by every relationship domain.
"""
from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict


class StrictBody(BaseModel):
    """Base for request bodies: unknown fields rejected, strings stripped."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class SocialUserRef(BaseModel):
    """Minimal user profile embedded in connection/follow/block list items."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    display_name: str
    avatar_url: str | None = None
    headline: str | None = None
