"""
Scan persistence.

:class:`ScanRepository` is the only writer of scan state.  It enforces the
status state machine and monotone progress, and appends finding rows.
Finding rows are never updated once inserted.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Type, TypeVar, Union

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domainrecon.core.database import Base
from domainrecon.core.exceptions import ScanNotFoundError, ScanStateError
from domainrecon.core.logging import get_logger
from domainrecon.core.security import validate_domain
from domainrecon.models import (
    ALLOWED_TRANSITIONS,
    FINDING_MODELS,
    DnsRecord,
    HistoricalDns,
    HistoricalIp,
    HistoricalWhois,
    Port,
    Scan,
    ScanStatus,
    SslCertificate,
    Subdomain,
    Technology,
    Vulnerability,
    WaybackSnapshot,
    WhoisRecord,
)

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

COMPLETE_PROGRESS: int = 100
_MAX_ERROR_LENGTH: int = 2000

# Stage result keys that hold findings, and the table each one lands in.
FINDING_KEYS: dict[str, Type[Base]] = {
    "whois": WhoisRecord,
    "dns_records": DnsRecord,
    "subdomains": Subdomain,
    "ports": Port,
    "technologies": Technology,
    "certificate": SslCertificate,
    "vulnerabilities": Vulnerability,
    "historical_dns": HistoricalDns,
    "historical_whois": HistoricalWhois,
    "historical_ips": HistoricalIp,
    "wayback_snapshots": WaybackSnapshot,
}


def build_finding_rows(scan_id: uuid.UUID, data: dict[str, Any]) -> list[Base]:
    """Turn a stage's result data into ORM rows owned by *scan_id*.

    Keys without a table (context such as ``resolved_ip``) are ignored, as
    are item fields with no matching column.  Strings longer than their
    ``VARCHAR`` column are cut to the column length.
    """
    rows: list[Base] = []
    for key, model in FINDING_KEYS.items():
        value = data.get(key)
        if not value:
            continue
        items = [value] if isinstance(value, dict) else value
        limits = _column_lengths(model)
        for item in items:
            fields = {
                name: _clip(item[name], limits[name])
                for name in limits
                if name in item
            }
            rows.append(model(scan_id=scan_id, **fields))
    return rows


def _column_lengths(model: Type[Base]) -> dict[str, Optional[int]]:
    """Writable columns of *model* mapped to their string length, if bounded."""
    return {
        column.key: getattr(column.type, "length", None)
        for column in model.__table__.columns
        if column.key not in ("id", "scan_id", "created_at")
    }


def _clip(value: Any, length: Optional[int]) -> Any:
    if length is not None and isinstance(value, str) and len(value) > length:
        return value[:length]
    return value


class ScanRepository:
    """Read and append operations on a scan and its findings.

    Args:
        session: The async session every operation runs in.  Each mutating
            call commits.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # -- Scan records ---------------------------------------------------------

    async def create_scan(self, domain: str, config: Optional[dict] = None) -> Scan:
        """Validate *domain* and insert a new ``pending`` scan."""
        scan = Scan(
            domain=validate_domain(domain),
            status=ScanStatus.PENDING,
            progress=0,
            config=config,
        )
        self.session.add(scan)
        await self.session.commit()
        logger.info(
            "Scan created",
            extra={"action": "scan_created", "target": scan.domain},
        )
        return scan

    async def get_scan(self, scan_id: Union[str, uuid.UUID]) -> Scan:
        """Load a scan.

        Raises:
            ScanNotFoundError: No row exists for *scan_id*.
        """
        try:
            key = scan_id if isinstance(scan_id, uuid.UUID) else uuid.UUID(str(scan_id))
        except ValueError as exc:
            raise ScanNotFoundError(scan_id) from exc

        scan = await self.session.get(Scan, key)
        if scan is None:
            raise ScanNotFoundError(scan_id)
        return scan

    async def mark_running(self, scan: Scan) -> Scan:
        self._transition(scan, ScanStatus.RUNNING)
        scan.started_at = datetime.now(timezone.utc)
        await self.session.commit()
        return scan

    async def advance_progress(self, scan: Scan, progress: int) -> int:
        """Raise progress to *progress*; lower values leave it unchanged.

        Returns the stored progress.

        Raises:
            ScanStateError: The scan is not running.
        """
        if scan.status != ScanStatus.RUNNING:
            raise ScanStateError(scan.status, f"progress {progress}")
        scan.progress = max(scan.progress or 0, min(progress, COMPLETE_PROGRESS))
        await self.session.commit()
        return scan.progress

    async def mark_completed(self, scan: Scan) -> Scan:
        self._transition(scan, ScanStatus.COMPLETED)
        scan.progress = COMPLETE_PROGRESS
        self._finish(scan)
        await self.session.commit()
        return scan

    async def mark_failed(self, scan: Scan, error: str) -> Scan:
        """Move a running scan to ``failed``.

        Any pending, uncommitted work in the session is rolled back first;
        committed findings are kept.  Progress is left where it was.
        """
        await self.session.rollback()
        await self.session.refresh(scan)
        self._transition(scan, ScanStatus.FAILED)
        scan.error = error[:_MAX_ERROR_LENGTH]
        self._finish(scan)
        await self.session.commit()
        return scan

    async def delete_scan(self, scan_id: Union[str, uuid.UUID]) -> None:
        """Delete a scan together with every finding it owns."""
        scan = await self.get_scan(scan_id)
        for model in FINDING_MODELS:
            await self.session.execute(delete(model).where(model.scan_id == scan.id))
        await self.session.delete(scan)
        await self.session.commit()
        logger.info(
            "Scan deleted",
            extra={"action": "scan_deleted", "target": scan.domain},
        )

    # -- Findings -------------------------------------------------------------

    async def add_findings(self, scan: Scan, rows: Iterable[Base]) -> int:
        """Append finding rows to *scan* and commit them."""
        rows = list(rows)
        for row in rows:
            row.scan_id = scan.id
        if rows:
            self.session.add_all(rows)
            await self.session.commit()
        return len(rows)

    async def list_findings(
        self,
        scan_id: Union[str, uuid.UUID],
        model: Type[ModelT],
    ) -> list[ModelT]:
        """Return every *model* row of a scan in insertion order."""
        scan = await self.get_scan(scan_id)
        result = await self.session.execute(
            select(model).where(model.scan_id == scan.id).order_by(model.created_at)
        )
        return list(result.scalars().all())

    # -- Internal helpers -----------------------------------------------------

    @staticmethod
    def _transition(scan: Scan, requested: ScanStatus) -> None:
        current = ScanStatus(scan.status)
        if requested not in ALLOWED_TRANSITIONS[current]:
            raise ScanStateError(current, requested)
        scan.status = requested

    @staticmethod
    def _finish(scan: Scan) -> None:
        now = datetime.now(timezone.utc)
        scan.completed_at = now
        started = scan.started_at
        if started is not None and started.tzinfo is None:
            # SQLite drops the offset on reload.
            started = started.replace(tzinfo=timezone.utc)
        scan.duration_seconds = (now - started).total_seconds() if started else 0.0
