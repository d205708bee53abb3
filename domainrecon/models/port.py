"""
Port model.

Represents an open TCP port found on the target's primary address, either
by an active probe or from passive host intelligence.  Closed and filtered
ports are never recorded.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from domainrecon.core.database import Base
from domainrecon.models.base import FindingMixin


class Port(FindingMixin, Base):
    """An open port with its inferred service.

    Attributes:
        host: The address that was probed.
        port: TCP port number.
        service: Label from the static port table (e.g. ``SSH``).
        version: Version string extracted from the banner, if any.
        banner: Raw banner text, absent for encrypted-only services.
        state: Connectivity state; always ``open``.
        source: ``probe`` for an active scan, ``shodan`` for passive data.
    """

    __tablename__ = "ports"

    host: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    port: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    service: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    version: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    banner: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    state: Mapped[str] = mapped_column(
        String(50),
        default="open",
        nullable=False,
        server_default="open",
    )
    source: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Port {self.service}:{self.port} host={self.host} scan_id={self.scan_id}>"
