"""
Celery task definitions for domainrecon scan execution.

This module registers the Celery task that bridges the synchronous Celery
worker environment with the async
:class:`~domainrecon.engine.orchestrator.ScanOrchestrator`, plus
:func:`submit_scan`, which records a new scan and enqueues it.

The task :func:`run_scan` creates a fresh async event loop, opens a
database session, and delegates the entire scan lifecycle to the
orchestrator.  Marking a failed scan and publishing the failure event are
the orchestrator's job; the task only logs and re-raises.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from domainrecon.config import Settings, get_settings
from domainrecon.core.celery_app import celery
from domainrecon.core.database import build_engine, build_session_factory
from domainrecon.core.logging import get_logger
from domainrecon.core.security import validate_domain
from domainrecon.engine.orchestrator import ScanOrchestrator
from domainrecon.engine.repository import ScanRepository

logger = get_logger(__name__)


@asynccontextmanager
async def _task_session(settings: Settings) -> AsyncIterator[AsyncSession]:
    """Yield a session on an engine owned by the running event loop.

    Pooled connections are bound to the loop that opened them, and every
    task and every :func:`submit_scan` call runs on a new loop, so the
    engine is built here and disposed before the loop goes away.
    """
    task_engine = build_engine(settings.DATABASE_URL)
    task_session_factory = build_session_factory(task_engine)
    try:
        async with task_session_factory() as db_session:
            yield db_session
    finally:
        await task_engine.dispose()


async def _execute_scan(scan_id: str) -> Optional[str]:
    """Async entry point that creates a DB session and runs the orchestrator.

    Returns the final scan status, or ``None`` when the scan does not exist.
    """
    settings = get_settings()
    async with _task_session(settings) as db_session:
        orchestrator = ScanOrchestrator(settings)
        scan = await orchestrator.run_scan(scan_id=scan_id, db_session=db_session)
        return scan.status.value if scan is not None else None


async def _create_scan(domain: str, config: Optional[dict[str, Any]]) -> str:
    async with _task_session(get_settings()) as db_session:
        scan = await ScanRepository(db_session).create_scan(domain, config)
        return str(scan.id)


@celery.task(
    name="domainrecon.run_scan",
    bind=True,
    max_retries=0,
    acks_late=True,
    reject_on_worker_lost=True,
    track_started=True,
)
def run_scan(self: Any, scan_id: str) -> dict[str, Optional[str]]:
    """Celery task that executes a full reconnaissance scan.

    The task is non-retryable (``max_retries=0``): a scan that ends
    ``failed`` stays failed.

    Args:
        self: The Celery task instance (bound via ``bind=True``).
        scan_id: UUID of the :class:`~domainrecon.models.scan.Scan` to execute.

    Returns:
        A dictionary with ``scan_id`` and ``status`` keys.

    Raises:
        Exception: Propagated from the orchestrator if the scan fails.
    """
    logger.info(
        "Celery task received for scan %s",
        scan_id,
        extra={"action": "task_received", "target": scan_id},
    )

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        status = loop.run_until_complete(_execute_scan(scan_id))
    except Exception:
        logger.exception(
            "Celery task failed for scan %s",
            scan_id,
            extra={"action": "task_failed", "target": scan_id},
        )
        raise
    finally:
        loop.close()

    logger.info(
        "Celery task finished for scan %s with status %s",
        scan_id,
        status,
        extra={"action": "task_completed", "target": scan_id},
    )

    return {"scan_id": scan_id, "status": status}


def submit_scan(domain: str, stages: Optional[Iterable[str]] = None) -> str:
    """Validate *domain*, record a pending scan and enqueue it.

    Args:
        domain: Target domain; normalised before it is stored.
        stages: Optional subset of stage names to run.  All stages run
            when omitted.

    Returns:
        The new scan's id.

    Raises:
        InvalidDomainError: *domain* is not a valid domain name.
    """
    domain = validate_domain(domain)
    config = {"stages": sorted(set(stages))} if stages else None
    scan_id = asyncio.run(_create_scan(domain, config))
    run_scan.delay(scan_id)
    logger.info(
        "Scan %s queued",
        scan_id,
        extra={"action": "scan_queued", "target": domain},
    )
    return scan_id
