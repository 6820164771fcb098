"""
Social graph service — FastAPI dependencies.

Routes import auth and service wiring from here, not from shared directly.
Each request gets its own store (bound to the request session) and fresh,
stateless service instances.
"""
from __future__ import annotations

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from shared.auth.dependencies import get_current_user_required
from app.blocks.service import BlockService
from app.config import Settings
from app.connections.constants import ConnectionPolicy
from app.connections.service import ConnectionService
from app.database import get_db
from app.follows.service import FollowService
from app.store.port import RelationshipStore
from app.store.sql import SqlRelationshipStore

get_current_user = get_current_user_required


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_store(session: AsyncSession = Depends(get_db)) -> RelationshipStore:
    return SqlRelationshipStore(session)


def get_connection_policy(settings: Settings = Depends(get_settings)) -> ConnectionPolicy:
    return ConnectionPolicy.from_settings(settings)


def get_connection_service(
    store: RelationshipStore = Depends(get_store),
    policy: ConnectionPolicy = Depends(get_connection_policy),
) -> ConnectionService:
    return ConnectionService(store, policy)


def get_follow_service(store: RelationshipStore = Depends(get_store)) -> FollowService:
    return FollowService(store)


def get_block_service(store: RelationshipStore = Depends(get_store)) -> BlockService:
    return BlockService(store)
