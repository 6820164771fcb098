"""
Social graph service — domain-specific HTTP exceptions.

All exceptions use preset status codes and detail messages so that callers
never need to specify these at the call site.  Grouped by failure kind:

  Validation (422)  self-targeted actions
  NotFound   (404)  missing user / connection
  Conflict   (409)  duplicate active connection
  Forbidden  (403)  not the recipient, cooldown still running
  BadRequest (400)  invalid state transition, quota reached, malformed cursor
"""
from fastapi import HTTPException, status


# ── Validation ────────────────────────────────────────────────────────────────

class CannotConnectWithSelf(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Cannot send connection request to yourself.",
        )


class CannotFollowSelf(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="You cannot follow yourself.")


class CannotBlockSelf(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="You cannot block yourself.")


class CannotReportSelf(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="You cannot report yourself.")


# ── Not found ─────────────────────────────────────────────────────────────────

class UserNotFound(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")


class ConnectionNotFound(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail="Connection request not found.")


# ── Conflict ──────────────────────────────────────────────────────────────────

class AlreadyConnected(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail="Already connected.")


class ConnectionRequestPending(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail="Connection request already pending.")


# ── Forbidden ─────────────────────────────────────────────────────────────────

class NotConnectionRecipient(HTTPException):
    """Only the receiver of a request may respond to it."""

    def __init__(self, action: str) -> None:
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only the recipient can {action} this request.",
        )


class ConnectionCooldownActive(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Connection request in cooldown period.",
        )


# ── Bad request ───────────────────────────────────────────────────────────────

class ConnectionNotPending(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Connection request is no longer pending.",
        )


class PendingRequestLimitReached(HTTPException):
    def __init__(self, limit: int) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Maximum pending connection requests reached ({limit:,}).",
        )


class InvalidCursor(HTTPException):
    def __init__(self, reason: str = "Invalid pagination cursor.") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=reason)


# ── Gone ──────────────────────────────────────────────────────────────────────

class ConnectionRequestExpired(HTTPException):
    """Only raised when CONNECTION_ENFORCE_EXPIRY is enabled."""

    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_410_GONE,
            detail="Connection request has expired.",
        )
