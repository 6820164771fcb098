import os
import ssl
from pathlib import Path
from typing import Any

import sqlalchemy as sa
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

# Names for the constraints models leave unnamed (primary and foreign keys);
# they match what the migrations create.  Checks, uniques and indexes are named
# explicitly on each model.
NAMING_CONVENTION = {
    "pk": "pk_%(table_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s",
}

# Applied to server databases only; SQLite (tests, local) takes none of these.
POOL_OPTIONS: dict[str, Any] = {
    "pool_pre_ping": True,
    "pool_size": int(os.environ.get("DATABASE_POOL_SIZE", "5")),
    "max_overflow": int(os.environ.get("DATABASE_MAX_OVERFLOW", "10")),
    "pool_recycle": 3600,
}


class Base(DeclarativeBase):
    metadata = sa.MetaData(naming_convention=NAMING_CONVENTION)


def ssl_connect_args() -> dict[str, Any]:
    """asyncpg ``connect_args`` for the DATABASE_SSL / RDS_SSL_CERT environment.

    DATABASE_SSL unset or "disable" means plain TCP.  With a readable CA bundle
    in RDS_SSL_CERT the server certificate is verified; otherwise the link is
    encrypted without verification.
    """
    mode = os.environ.get("DATABASE_SSL", "").lower()
    if mode in ("", "disable"):
        return {}
    cert_path = os.environ.get("RDS_SSL_CERT", "")
    if cert_path and Path(cert_path).is_file():
        return {"ssl": ssl.create_default_context(cafile=cert_path)}
    return {"ssl": "require"}


def get_async_engine(database_url: str, **kwargs: Any) -> AsyncEngine:
    if make_url(database_url).get_backend_name() == "sqlite":
        return create_async_engine(database_url, **kwargs)
    connect_args = {**ssl_connect_args(), **kwargs.pop("connect_args", {})}
    options = {**POOL_OPTIONS, **kwargs}
    if connect_args:
        options["connect_args"] = connect_args
    return create_async_engine(database_url, **options)


def get_async_session_factory(
    database_url: str,
    *,
    expire_on_commit: bool = False,
    **engine_kwargs: Any,
) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        get_async_engine(database_url, **engine_kwargs),
        class_=AsyncSession,
        expire_on_commit=expire_on_commit,
        autoflush=False,
    )
