"""
Structured logging for domainrecon.

Every line carries ``action``, ``target`` and ``scan`` fields so scan
activity can be grepped per scan id or per target domain::

    2025-01-01T12:00:00+0000 | INFO | domainrecon.engine.orchestrator | scan=3f2a... | target=example.com | action=stage_completed | Stage completed: dns

Engine code binds the scan once with :func:`scan_logger` and passes only
``action`` per call; stage modules and clients log through plain
``logging.getLogger(__name__)`` loggers in the same namespace.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, MutableMapping, Optional, TextIO

from domainrecon.config import get_settings

_LOG_FORMAT: str = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "scan=%(scan_id)s | target=%(target)s | action=%(action)s | %(message)s"
)
_DATE_FORMAT: str = "%Y-%m-%dT%H:%M:%S%z"
_ROOT_LOGGER_NAME: str = "domainrecon"

# Collaborator libraries that log every request at INFO.
_QUIET_LOGGERS: tuple[str, ...] = ("sqlalchemy.engine", "celery", "httpx", "httpcore", "whois")


class StructuredFormatter(logging.Formatter):
    """Fill in ``-`` for structured fields a record does not carry."""

    FIELDS: tuple[str, ...] = ("action", "target", "scan_id")

    def format(self, record: logging.LogRecord) -> str:
        for key in self.FIELDS:
            if getattr(record, key, None) is None:
                setattr(record, key, "-")
        return super().format(record)


class ScanLogAdapter(logging.LoggerAdapter):
    """Logger bound to one scan.

    ``scan_id`` and ``target`` come from the adapter; a call may still
    override ``target`` and must supply ``action`` through ``extra``.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def configure_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """Attach the structured handler to the ``domainrecon`` logger.

    Safe to call more than once; the handler is only added the first time.
    The Celery worker calls it from the ``after_setup_logger`` signal.

    Args:
        level: Log level name.  ``DEBUG`` when ``settings.DEBUG`` is set,
            otherwise ``INFO``.
        stream: Output stream, ``sys.stdout`` by default.
    """
    settings = get_settings()
    level = level or ("DEBUG" if settings.DEBUG else "INFO")

    root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    root_logger.setLevel(level)

    if not root_logger.handlers:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(StructuredFormatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        root_logger.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.debug(
        "Logging configured at %s",
        level,
        extra={"action": "logging_init", "target": settings.APP_NAME},
    )


def get_logger(name: str) -> logging.Logger:
    """Return *name* as a logger inside the ``domainrecon`` namespace."""
    if name == _ROOT_LOGGER_NAME or name.startswith(f"{_ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")


def scan_logger(logger: logging.Logger, scan_id: Any, target: str) -> ScanLogAdapter:
    """Bind *logger* to one scan."""
    return ScanLogAdapter(logger, {"scan_id": str(scan_id), "target": target})
