"""
Celery application for scan dispatch.

Redis is both broker and result backend.  Scans run on their own ``scans``
queue, one at a time per worker process, since a single scan already fans
out into many concurrent probes.
"""

from __future__ import annotations

from typing import Any

from celery import Celery
from celery.signals import after_setup_logger

from domainrecon.config import Settings, get_settings
from domainrecon.core.logging import configure_logging

SCAN_QUEUE: str = "scans"

_RESULT_EXPIRES_SECONDS: int = 24 * 3600
_HARD_LIMIT_GRACE_SECONDS: int = 300


def create_celery_app(settings: Settings) -> Celery:
    """Build the Celery app from *settings*."""
    app = Celery(
        settings.APP_NAME,
        broker=settings.REDIS_URL,
        backend=settings.REDIS_URL,
        include=["domainrecon.tasks.scan_tasks"],
    )

    app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        task_routes={"domainrecon.run_scan": {"queue": SCAN_QUEUE}},
        task_default_queue=SCAN_QUEUE,
        task_soft_time_limit=settings.SCAN_TIME_LIMIT,
        task_time_limit=settings.SCAN_TIME_LIMIT + _HARD_LIMIT_GRACE_SECONDS,
        task_acks_late=True,
        task_reject_on_worker_lost=True,
        task_track_started=True,
        result_expires=_RESULT_EXPIRES_SECONDS,
        worker_prefetch_multiplier=1,
        worker_hijack_root_logger=False,
        broker_connection_retry_on_startup=True,
    )
    return app


@after_setup_logger.connect
def _setup_worker_logging(**_kwargs: Any) -> None:
    configure_logging()


celery: Celery = create_celery_app(get_settings())
