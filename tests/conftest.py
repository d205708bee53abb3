"""
Shared pytest fixtures for the domainrecon test suite.

Provides an in-memory SQLite database (via aiosqlite), async session
management, settings with every external source disabled, and factory
fixtures for scans.
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine

from domainrecon.config import Settings
from domainrecon.core.database import Base, build_session_factory, init_models
from domainrecon.engine.repository import ScanRepository
from domainrecon.models.scan import Scan


# ---------------------------------------------------------------------------
# Database engine and session fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an async in-memory SQLite engine and provision all tables.

    Yields the engine and disposes it after the test.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///",
        echo=False,
    )
    await init_models(engine)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an AsyncSession bound to the in-memory test database."""
    async with build_session_factory(test_engine)() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture()
async def repository(db_session: AsyncSession) -> ScanRepository:
    return ScanRepository(db_session)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture()
def settings() -> Settings:
    """Settings with no API keys, no scraping and no Redis publishing."""
    return Settings(
        _env_file=None,
        SHODAN_API_KEY=None,
        SECURITYTRAILS_API_KEY=None,
        C99_ENABLED=False,
        PUBLISH_EVENTS=False,
        DATABASE_URL="sqlite+aiosqlite:///",
    )


# ---------------------------------------------------------------------------
# ORM factory fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def pending_scan(repository: ScanRepository) -> Scan:
    """A freshly submitted scan of ``example.com``."""
    return await repository.create_scan("Example.COM")


@pytest_asyncio.fixture()
async def running_scan(repository: ScanRepository, pending_scan: Scan) -> Scan:
    return await repository.mark_running(pending_scan)


# ---------------------------------------------------------------------------
# httpx mocking
# ---------------------------------------------------------------------------

@pytest.fixture()
def mock_http_client():
    """Return a factory patching ``httpx.AsyncClient`` in a given module.

    Usage::

        with mock_http_client("domainrecon.clients.crtsh", response) as client:
            ...
    """
    from contextlib import contextmanager
    from unittest.mock import AsyncMock, patch

    @contextmanager
    def _factory(module_path: str, response=None, side_effect=None):
        with patch(f"{module_path}.httpx.AsyncClient") as MockClient:
            mock_client_instance = AsyncMock()
            if side_effect is not None:
                mock_client_instance.get.side_effect = side_effect
            else:
                mock_client_instance.get.return_value = response
            mock_client_instance.__aenter__ = AsyncMock(return_value=mock_client_instance)
            mock_client_instance.__aexit__ = AsyncMock(return_value=False)
            MockClient.return_value = mock_client_instance
            yield mock_client_instance

    return _factory
