"""
Vulnerability model.

Represents a passive, header-level weakness observed on the target's web
front page (missing security headers, version disclosure).
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from domainrecon.core.database import Base
from domainrecon.models.base import FindingMixin

SEVERITIES: tuple[str, ...] = ("low", "medium", "high", "critical")


class Vulnerability(FindingMixin, Base):
    """A weakness found by header inspection.

    Attributes:
        title: Short title (e.g. ``Missing HSTS Header``).
        severity: One of :data:`SEVERITIES`.
        description: What was observed.
        recommendation: How to remediate it.
        affected_url: The URL whose response exhibited the weakness.
    """

    __tablename__ = "vulnerabilities"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    severity: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    recommendation: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    affected_url: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Vulnerability {self.severity} {self.title!r} scan_id={self.scan_id}>"
