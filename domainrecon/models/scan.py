"""
Scan model and lifecycle status.

A :class:`Scan` is the single source of truth for external observers polling
scan state.  It exclusively owns every finding row recorded during its run:
each finding table references ``scans.id`` with ``ON DELETE CASCADE`` and
:meth:`~domainrecon.engine.repository.ScanRepository.delete_scan` removes
children together with the scan.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Enum, Float, Integer, JSON, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from domainrecon.core.database import Base


class ScanStatus(str, enum.Enum):
    """Lifecycle states of a scan.

    ``pending -> running -> completed`` on normal exhaustion of all stages,
    ``running -> failed`` on an orchestrator fault.  ``completed`` and
    ``failed`` are terminal.
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ScanStatus.COMPLETED, ScanStatus.FAILED)


ALLOWED_TRANSITIONS: dict[ScanStatus, frozenset[ScanStatus]] = {
    ScanStatus.PENDING: frozenset({ScanStatus.RUNNING}),
    ScanStatus.RUNNING: frozenset({ScanStatus.COMPLETED, ScanStatus.FAILED}),
    ScanStatus.COMPLETED: frozenset(),
    ScanStatus.FAILED: frozenset(),
}


class Scan(Base):
    """One reconnaissance run against a target domain.

    Attributes:
        id: UUID primary key, auto-generated.
        domain: Normalised target domain.
        status: Current :class:`ScanStatus`.
        progress: Percentage 0-100, never decreasing within a run.
        config: Optional scan options, e.g. ``{"stages": ["whois", "dns"]}``.
        error: Failure message for scans that ended ``failed``.
        created_at: Submission time.
        started_at: Time the orchestrator picked the scan up.
        completed_at: Time the scan reached a terminal status.
        duration_seconds: Wall-clock run time once terminal.
    """

    __tablename__ = "scans"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    domain: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    status: Mapped[ScanStatus] = mapped_column(
        Enum(
            ScanStatus,
            name="scan_status",
            values_callable=lambda members: [m.value for m in members],
        ),
        default=ScanStatus.PENDING,
        nullable=False,
    )
    progress: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        server_default="0",
    )
    config: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
    )
    error: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    started_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    duration_seconds: Mapped[Optional[float]] = mapped_column(
        Float,
        nullable=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Scan id={self.id} domain={self.domain!r} "
            f"status={self.status} progress={self.progress}>"
        )
