"""Web-archive snapshot model."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from domainrecon.core.database import Base
from domainrecon.models.base import FindingMixin


class WaybackSnapshot(FindingMixin, Base):
    """An archived capture of the target's front page.

    Attributes:
        timestamp: Capture time as ``YYYYMMDDhhmmss``.
        url: Replay URL on web.archive.org.
        status: HTTP status code recorded at capture time.
    """

    __tablename__ = "wayback_snapshots"

    timestamp: Mapped[str] = mapped_column(String(20), nullable=False)
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
