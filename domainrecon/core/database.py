"""
Async SQLAlchemy engine, session factory, and declarative base.

Provides:
- ``build_engine`` -- a new async engine for the configured ``DATABASE_URL``.
- ``build_session_factory`` -- a session-maker that produces ``AsyncSession`` instances.
- ``Base`` -- the declarative base class for all ORM models.
- ``init_models`` -- create all tables.

An async engine's pooled connections belong to the event loop that opened
them, so there is no module-level engine: each ``asyncio.run`` or Celery
task builds its own and disposes it before its loop closes.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from domainrecon.config import get_settings

# ── Constants ────────────────────────────────────────────────────────────────

_POOL_SIZE: int = 20
_MAX_OVERFLOW: int = 10
_POOL_TIMEOUT_SECONDS: int = 30
_POOL_RECYCLE_SECONDS: int = 1800  # 30 minutes


# ── Declarative Base ─────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models in the project."""


# ── Engine & Session Factory ─────────────────────────────────────────────────

def build_engine(url: Optional[str] = None) -> AsyncEngine:
    """Create and return a new async engine.

    Args:
        url: Database URL.  Defaults to ``settings.DATABASE_URL``.  Pool
            sizing is only applied to server databases; SQLite uses its own
            single-connection pool.
    """
    settings = get_settings()
    url = url or settings.DATABASE_URL
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.DEBUG)
    return create_async_engine(
        url,
        echo=settings.DEBUG,
        pool_size=_POOL_SIZE,
        max_overflow=_MAX_OVERFLOW,
        pool_timeout=_POOL_TIMEOUT_SECONDS,
        pool_recycle=_POOL_RECYCLE_SECONDS,
        pool_pre_ping=True,
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a session-maker with the project's session defaults."""
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_models(bind: Optional[AsyncEngine] = None) -> None:
    """Create every table registered on :class:`Base`.

    Importing :mod:`domainrecon.models` registers all models on the
    metadata before ``create_all`` runs.  Without *bind* a temporary
    engine is built from the settings and disposed afterwards.
    """
    import domainrecon.models  # noqa: F401

    engine = bind or build_engine()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    finally:
        if bind is None:
            await engine.dispose()
