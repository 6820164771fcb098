import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.blocks.router import router as blocks_router
from app.connections.router import router as connections_router
from app.database import init_db
from app.dependencies import get_settings
from app.follows.router import router as follows_router
from app.rate_limit import limiter
from shared.middleware.error_handler import error_envelope_middleware
from shared.middleware.request_id import request_id_middleware

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## Social Graph Service

Owns the relationships between platform users:

* **Connections** — mutual, request-based.  A request is PENDING until the
  recipient accepts or rejects it.  Rejection starts a 30-day cooldown for that
  sender; each sender may hold at most 100 pending outgoing requests.
* **Follows** — one-directional and idempotent.
* **Blocks** — idempotent; blocking removes any connection or pending request
  between the two users.  Unblocking does not restore it.
* **Reports** — user / content reports queued for moderation.

### Pagination
Connection listings are cursor-paginated: pass the `next_cursor` of one page as
`cursor` to fetch the next.  Cursors are opaque.  Follower, following and block
lists use `limit` / `offset`.

### Authentication
All endpoints except `/health` require:
```
Authorization: Bearer <access_token>
```
"""

_TAGS_METADATA = [
    {
        "name": "connections",
        "description": (
            "Send, accept and reject connection requests; list accepted connections "
            "(cursor-paginated) and pending requests."
        ),
    },
    {
        "name": "follows",
        "description": "Follow / unfollow users, follower and following lists, status and counts.",
    },
    {
        "name": "blocks",
        "description": (
            "Block / unblock users and list blocked users.  Blocking removes connections "
            "in both directions.  Also hosts user/content reporting."
        ),
    },
]


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


# ── App factory ───────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.getLogger("app").setLevel(settings.log_level.upper())
    init_db(settings.graph_database_url)
    logger.info("Social graph service starting (env=%s)", settings.env_name)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    public_docs = settings.env_name != "production"
    app = FastAPI(
        title="Social Graph Service",
        version="1.0.0",
        description=_DESCRIPTION,
        openapi_tags=_TAGS_METADATA,
        docs_url="/docs" if public_docs else None,
        redoc_url="/redoc" if public_docs else None,
        lifespan=lifespan,
    )

    # slowapi looks the limiter up on app.state.
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Registration order is inside-out: CORS ends up outermost, so 429s and
    # error envelopes carry CORS headers too.
    app.add_middleware(SlowAPIMiddleware)
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(error_envelope_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    for router in (connections_router, follows_router, blocks_router):
        app.include_router(router, prefix=API_PREFIX)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="social-graph")

    return app


app = create_app()
