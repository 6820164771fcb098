"""Platform-wide pagination utilities.

Two pagination strategies, kept deliberately separate:
  - CursorPage: keyset/cursor-based for timelines and relationship lists
    (connections, jobs, notifications, messages, saved items)
  - OffsetPage: limit/offset for bounded lists (followers, following, blocked)

The cursor is an opaque string for clients.  Internally it is URL-safe base64
of a JSON object ``{"createdAt": <ISO-8601>, "id": <uuid>}`` describing the
last row of the previous page.
"""
from __future__ import annotations

import base64
import binascii
import json
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

import sqlalchemy as sa
from pydantic import BaseModel, ConfigDict, Field

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# Cursors we mint are ~120 characters; anything far longer is refused unread.
_MAX_CURSOR_LENGTH = 512


class InvalidCursorError(ValueError):
    """Raised for any cursor that cannot be decoded; always a client error."""


@dataclass(frozen=True, slots=True)
class CursorKey:
    """Decoded position marker: the sort timestamp and id of the last seen row."""

    created_at: datetime
    id: UUID


# ---------------------------------------------------------------------------
# Response envelopes
# ---------------------------------------------------------------------------


class CursorPage[T](BaseModel):
    """Cursor-paginated response envelope.

    `next_cursor` is null when there are no more pages.
    """

    model_config = ConfigDict(from_attributes=True)

    items: list[T]
    next_cursor: str | None = Field(
        default=None,
        description="Opaque cursor for the next page. Null when no more pages.",
    )
    has_more: bool = Field(default=False, description="True when additional pages exist.")


class OffsetPage[T](BaseModel):
    """Offset-paginated response envelope."""

    model_config = ConfigDict(from_attributes=True)

    items: list[T]
    total: int = Field(description="Total number of matching records.")
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------


def encode_cursor(created_at: datetime, record_id: UUID | str) -> str:
    """Encode a (timestamp, id) pair into an opaque URL-safe cursor string."""
    payload = json.dumps(
        {"createdAt": created_at.isoformat(), "id": str(record_id)},
        separators=(",", ":"),
    )
    return base64.urlsafe_b64encode(payload.encode()).decode()


def decode_cursor(cursor: str | None) -> CursorKey | None:
    """Decode a cursor produced by :func:`encode_cursor`.

    Returns None for a missing/empty cursor.  Raises InvalidCursorError on
    anything malformed; callers translate that into a 400 response.
    """
    if not cursor:
        return None
    if len(cursor) > _MAX_CURSOR_LENGTH:
        raise InvalidCursorError("Invalid cursor format.")
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeError, json.JSONDecodeError, RecursionError) as exc:
        raise InvalidCursorError("Invalid cursor format.") from exc
    if not isinstance(data, dict):
        raise InvalidCursorError("Invalid cursor format.")

    created_raw = data.get("createdAt")
    id_raw = data.get("id")
    if not isinstance(created_raw, str):
        raise InvalidCursorError("Invalid cursor: bad date.")
    try:
        created_at = datetime.fromisoformat(created_raw)
        # Naive values would be read in the database server's local zone.
        if created_at.tzinfo is None:
            raise ValueError("cursor timestamp has no UTC offset")
        created_at = created_at.astimezone(timezone.utc)
    except (ValueError, OverflowError) as exc:
        raise InvalidCursorError("Invalid cursor: bad date.") from exc
    if not isinstance(id_raw, str) or not _UUID_RE.match(id_raw):
        raise InvalidCursorError("Invalid cursor: bad id.")
    return CursorKey(created_at=created_at, id=UUID(id_raw))


# ---------------------------------------------------------------------------
# Keyset helpers
# ---------------------------------------------------------------------------


def keyset_after(
    sort_col: sa.ColumnElement[datetime],
    id_col: sa.ColumnElement[UUID],
    key: CursorKey,
) -> sa.ColumnElement[bool]:
    """Predicate selecting rows strictly after `key` in (sort desc, id desc) order.

    The id tie-break is required: sort timestamps are not unique.
    """
    return sa.or_(
        sort_col < key.created_at,
        sa.and_(sort_col == key.created_at, id_col < key.id),
    )


def build_cursor_page[T](
    rows: Sequence[T],
    limit: int,
    key: Callable[[T], tuple[datetime, UUID]],
) -> tuple[list[T], str | None, bool]:
    """Trim a `limit + 1` fetch into (items, next_cursor, has_more).

    The cursor comes from the last row actually returned, never the extra row.
    """
    has_more = len(rows) > limit
    items = list(rows[:limit])
    next_cursor = None
    if has_more and items:
        next_cursor = encode_cursor(*key(items[-1]))
    return items, next_cursor, has_more
