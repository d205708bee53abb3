"""
Subdomain model.

Represents a subdomain discovered during a reconnaissance scan.  Each
subdomain belongs to exactly one :class:`~domainrecon.models.scan.Scan`.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from domainrecon.core.database import Base
from domainrecon.models.base import FindingMixin


class Subdomain(FindingMixin, Base):
    """A subdomain discovered during a scan.

    Attributes:
        name: The fully-qualified subdomain name (indexed for fast lookup).
        ip_address: Resolved IPv4 or IPv6 address (up to 45 characters).
        source: Origin tag of the source that first produced the name
            (``bruteforce``, ``crtsh``, ``c99``, ``securitytrails``).
        is_alive: Whether the name resolved during brute-force discovery.
    """

    __tablename__ = "subdomains"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),
        nullable=True,
    )
    source: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    is_alive: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        server_default="false",
    )

    def __repr__(self) -> str:
        return f"<Subdomain name={self.name!r} ip={self.ip_address} scan_id={self.scan_id}>"
