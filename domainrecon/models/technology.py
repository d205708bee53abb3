"""
Technology model.

Represents a technology component (web server, framework, CMS, language,
etc.) fingerprinted on the target's web front page.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from domainrecon.core.database import Base
from domainrecon.models.base import FindingMixin


class Technology(FindingMixin, Base):
    """A detected technology stack component.

    Detection confidence is expressed as an integer percentage (0-100) where
    100 means the technology was positively fingerprinted and lower values
    indicate heuristic or partial matches.

    Attributes:
        name: Technology name (e.g. ``Nginx``, ``WordPress``, ``jQuery``).
        version: Detected version string, if available.
        category: Classification bucket (``web_server``, ``framework``, ``cms``,
            ``language``, ``javascript_library``, ``cdn``, etc.).
        confidence: Detection confidence as an integer percentage (0--100).
    """

    __tablename__ = "technologies"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    version: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    category: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    confidence: Mapped[int] = mapped_column(
        Integer,
        default=50,
        nullable=False,
        server_default="50",
    )

    def __repr__(self) -> str:
        version_str = f"/{self.version}" if self.version else ""
        return (
            f"<Technology {self.name}{version_str} "
            f"confidence={self.confidence}% scan_id={self.scan_id}>"
        )
