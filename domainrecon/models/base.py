"""
Shared columns for finding tables.

Every finding row is an insert-only fact scoped to exactly one
:class:`~domainrecon.models.scan.Scan`.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column


class FindingMixin:
    """Primary key, owning scan, and insertion timestamp.

    Attributes:
        id: UUID primary key, auto-generated.
        scan_id: Foreign key to the owning scan; rows are removed with it.
        created_at: Time the finding was recorded.
    """

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    scan_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("scans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
