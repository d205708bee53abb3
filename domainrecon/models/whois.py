"""
WHOIS snapshot model.

Stores the registration facts parsed from the raw WHOIS text together with
the raw text itself.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from domainrecon.core.database import Base
from domainrecon.models.base import FindingMixin


class WhoisRecord(FindingMixin, Base):
    """Registration data of the target domain at scan time.

    Attributes:
        registrar: Registrar name.
        creation_date: Creation date as printed by the registry.
        expiration_date: Expiration date as printed by the registry.
        name_servers: Comma-separated name servers.
        status: Comma-separated EPP status tokens.
        raw_data: The unparsed WHOIS response, or a placeholder when the
            lookup was unavailable.
    """

    __tablename__ = "whois_records"

    registrar: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    creation_date: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    expiration_date: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    name_servers: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    raw_data: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
