"""
Follows domain — Pydantic V2 request/response schemas.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from app.schemas import SocialUserRef, StrictBody


class FollowRequest(StrictBody):
    user_id: uuid.UUID


class FollowStateResponse(BaseModel):
    following: bool


class FollowListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID           # follow edge id
    user: SocialUserRef     # follower or followed user depending on the list
    created_at: datetime


class FollowCountsResponse(BaseModel):
    followers: int
    following: int
