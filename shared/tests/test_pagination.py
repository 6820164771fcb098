import base64
import json
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from shared.pagination import (
    CursorKey,
    CursorPage,
    InvalidCursorError,
    OffsetPage,
    build_cursor_page,
    decode_cursor,
    encode_cursor,
)

T0 = datetime(2026, 3, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)


def _raw(payload) -> str:
    return base64.urlsafe_b64encode(json.dumps(payload).encode()).decode()


def test_cursor_round_trip_keeps_timestamp_and_id() -> None:
    record_id = uuid4()
    key = decode_cursor(encode_cursor(T0, record_id))
    assert key == CursorKey(created_at=T0, id=record_id)


def test_cursor_is_url_safe_json() -> None:
    record_id = UUID("6f1c2e1a-0b9d-4c77-8f7a-2d3b4e5f6a7b")
    cursor = encode_cursor(T0, record_id)

    assert "+" not in cursor and "/" not in cursor
    assert json.loads(base64.urlsafe_b64decode(cursor)) == {
        "createdAt": "2026-03-01T12:30:15.123456+00:00",
        "id": "6f1c2e1a-0b9d-4c77-8f7a-2d3b4e5f6a7b",
    }


def test_unpadded_cursor_is_accepted() -> None:
    cursor = encode_cursor(T0, uuid4()).rstrip("=")
    assert decode_cursor(cursor).created_at == T0


@pytest.mark.parametrize("cursor", [None, ""])
def test_missing_cursor_means_first_page(cursor) -> None:
    assert decode_cursor(cursor) is None


@pytest.mark.parametrize(
    "cursor,message",
    [
        ("***", "Invalid cursor format."),
        (base64.urlsafe_b64encode(b"not json").decode(), "Invalid cursor format."),
        (_raw(["2026-03-01T12:00:00+00:00", str(uuid4())]), "Invalid cursor format."),
        (_raw({"createdAt": "yesterday", "id": str(uuid4())}), "Invalid cursor: bad date."),
        (_raw({"createdAt": 1700000000, "id": str(uuid4())}), "Invalid cursor: bad date."),
        (_raw({"id": str(uuid4())}), "Invalid cursor: bad date."),
        (_raw({"createdAt": "2024-01-01T00:00:00", "id": str(uuid4())}), "Invalid cursor: bad date."),
        (_raw({"createdAt": "0001-01-01T00:00:00+05:00", "id": str(uuid4())}), "Invalid cursor: bad date."),
        (base64.urlsafe_b64encode(b"[" * 5000).decode(), "Invalid cursor format."),
        (encode_cursor(T0, uuid4()) + "A" * 512, "Invalid cursor format."),
        (_raw({"createdAt": T0.isoformat(), "id": "42"}), "Invalid cursor: bad id."),
        (_raw({"createdAt": T0.isoformat(), "id": uuid4().hex}), "Invalid cursor: bad id."),
        (_raw({"createdAt": T0.isoformat()}), "Invalid cursor: bad id."),
    ],
)
def test_malformed_cursor_raises(cursor, message) -> None:
    with pytest.raises(InvalidCursorError, match=message.replace(".", r"\.")):
        decode_cursor(cursor)


def test_deeply_nested_payload_is_invalid_format(monkeypatch) -> None:
    def too_deep(_s):
        raise RecursionError("maximum recursion depth exceeded while decoding a JSON array")

    monkeypatch.setattr("shared.pagination.json.loads", too_deep)
    with pytest.raises(InvalidCursorError, match=r"Invalid cursor format\."):
        decode_cursor(encode_cursor(T0, uuid4()))


def test_offset_timestamp_is_normalised_to_utc() -> None:
    local = datetime(2026, 3, 1, 18, 0, tzinfo=timezone(timedelta(hours=5, minutes=30)))
    key = decode_cursor(encode_cursor(local, uuid4()))

    assert key.created_at == local
    assert key.created_at.utcoffset() == timedelta(0)


def test_invalid_cursor_error_is_value_error() -> None:
    assert issubclass(InvalidCursorError, ValueError)


def _rows(n: int) -> list[tuple[datetime, UUID]]:
    return [(T0 - timedelta(minutes=i), uuid4()) for i in range(n)]


def test_build_page_with_lookahead_row() -> None:
    rows = _rows(4)

    items, next_cursor, has_more = build_cursor_page(rows, 3, key=lambda r: r)

    assert items == rows[:3]
    assert has_more is True
    assert decode_cursor(next_cursor) == CursorKey(created_at=rows[2][0], id=rows[2][1])


@pytest.mark.parametrize("n", [0, 2, 3])
def test_build_last_page_has_no_cursor(n) -> None:
    items, next_cursor, has_more = build_cursor_page(_rows(n), 3, key=lambda r: r)

    assert len(items) == n
    assert has_more is False
    assert next_cursor is None


def test_page_envelopes_serialize() -> None:
    page = CursorPage[int](items=[1, 2], next_cursor=None, has_more=False)
    assert page.model_dump() == {"items": [1, 2], "next_cursor": None, "has_more": False}

    offset_page = OffsetPage[int](items=[1, 2], total=5, limit=2, offset=2)
    assert offset_page.has_more is True
    assert OffsetPage[int](items=[5], total=5, limit=2, offset=4).has_more is False
