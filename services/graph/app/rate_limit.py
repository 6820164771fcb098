"""
Global slowapi rate limiter.

Imported by the domain routers for per-endpoint limits.  Mounted onto
app.state in main.py so slowapi middleware can find it.

Storage: Redis when REDIS_URL is set (shared across workers), otherwise
in-memory (useful in local dev and tests).
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.dependencies import get_settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=get_settings().redis_url or "memory://",
)
