import uuid

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from shared.middleware import error_envelope_middleware, request_id_middleware
from shared.pagination import InvalidCursorError


def _build_app() -> FastAPI:
    app = FastAPI()
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(error_envelope_middleware)

    @app.get("/ok")
    async def ok() -> dict:
        return {"ok": True}

    @app.get("/boom")
    async def boom() -> dict:
        raise RuntimeError("database exploded")

    @app.get("/cursor")
    async def cursor() -> dict:
        raise InvalidCursorError("Invalid cursor format.")

    return app


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=_build_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_request_id_is_echoed(client) -> None:
    response = await client.get("/ok", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_request_id_is_minted_when_missing_or_oversized(client) -> None:
    for headers in ({}, {"X-Request-ID": "x" * 129}):
        response = await client.get("/ok", headers=headers)
        uuid.UUID(response.headers["X-Request-ID"])


@pytest.mark.asyncio
async def test_unhandled_error_becomes_500_envelope(client) -> None:
    response = await client.get("/boom", headers={"X-Request-ID": "req-500"})

    assert response.status_code == 500
    assert response.json() == {
        "error": {"code": "internal_error", "message": "An unexpected error occurred"},
        "request_id": "req-500",
    }


@pytest.mark.asyncio
async def test_stray_cursor_error_is_client_error(client) -> None:
    response = await client.get("/cursor")

    assert response.status_code == 400
    assert response.json()["error"] == {
        "code": "invalid_cursor",
        "message": "Invalid cursor format.",
    }
