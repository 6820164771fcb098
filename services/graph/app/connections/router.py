"""
Connections domain — user-facing routes.

Routes (prefixed /api/v1/connections):
  POST   /request          Send a connection request  (20/minute rate limit)
  PUT    /{id}/accept      Accept an incoming request (recipient only)
  PUT    /{id}/reject      Reject an incoming request (recipient only; starts cooldown)
  GET    /                 My accepted connections (cursor-paginated, 60/minute)
  GET    /pending          My pending incoming + outgoing requests

/pending is registered before /{id}/... routes; the shapes differ anyway.
"""

import uuid

from fastapi import APIRouter, Depends, Query, Request, status

from shared.models.user import CurrentUser
from shared.pagination import CursorPage
from app.connections import controller as ctrl
from app.connections.schemas import (
    ConnectionAcceptedResponse,
    ConnectionListItem,
    ConnectionRejectedResponse,
    ConnectionRequestResponse,
    PendingConnectionsResponse,
    SendConnectionRequest,
)
from app.connections.service import ConnectionService
from app.dependencies import get_connection_service, get_current_user
from app.rate_limit import limiter

router = APIRouter(prefix="/connections", tags=["connections"])


@router.post(
    "/request",
    response_model=ConnectionRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a connection request",
    description="Rate-limited to 20 requests per minute. At most 100 outgoing requests may be pending.",
)
@limiter.limit("20/minute")
async def send_request(
    request: Request,
    body: SendConnectionRequest,
    current_user: CurrentUser = Depends(get_current_user),
    svc: ConnectionService = Depends(get_connection_service),
) -> ConnectionRequestResponse:
    return await ctrl.send_request(svc, current_user.id, body)


@router.get(
    "/pending",
    response_model=PendingConnectionsResponse,
    summary="List pending incoming and outgoing requests",
)
async def list_pending(
    current_user: CurrentUser = Depends(get_current_user),
    svc: ConnectionService = Depends(get_connection_service),
) -> PendingConnectionsResponse:
    return await ctrl.list_pending(svc, current_user.id)


@router.put(
    "/{connection_id}/accept",
    response_model=ConnectionAcceptedResponse,
    summary="Accept an incoming connection request",
)
async def accept_request(
    connection_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    svc: ConnectionService = Depends(get_connection_service),
) -> ConnectionAcceptedResponse:
    return await ctrl.accept_request(svc, connection_id, current_user.id)


@router.put(
    "/{connection_id}/reject",
    response_model=ConnectionRejectedResponse,
    summary="Reject an incoming connection request",
    description="The sender may not re-request for 30 days.",
)
async def reject_request(
    connection_id: uuid.UUID,
    current_user: CurrentUser = Depends(get_current_user),
    svc: ConnectionService = Depends(get_connection_service),
) -> ConnectionRejectedResponse:
    return await ctrl.reject_request(svc, connection_id, current_user.id)


@router.get(
    "",
    response_model=CursorPage[ConnectionListItem],
    summary="List my accepted connections",
    description="Newest first. Pass `next_cursor` from the previous page as `cursor`.",
)
@limiter.limit("60/minute")
async def list_connections(
    request: Request,
    cursor: str | None = Query(None, description="Opaque cursor from the previous page"),
    limit: int = Query(20, ge=1, le=50, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user),
    svc: ConnectionService = Depends(get_connection_service),
) -> CursorPage[ConnectionListItem]:
    return await ctrl.list_connections(svc, current_user.id, cursor=cursor, limit=limit)
