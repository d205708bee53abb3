"""
Historical intelligence models.

Time-series facts about DNS records, WHOIS registrations and IP addresses
of the target, as reported by a historical-intelligence provider.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from domainrecon.core.database import Base
from domainrecon.models.base import FindingMixin


class HistoricalDns(FindingMixin, Base):
    """A DNS value the target held at some point in time."""

    __tablename__ = "historical_dns"

    record_type: Mapped[str] = mapped_column(String(10), nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    first_seen: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_seen: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)


class HistoricalWhois(FindingMixin, Base):
    """A past WHOIS registration of the target."""

    __tablename__ = "historical_whois"

    registrar: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    expires: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    updated: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    name_servers: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    registrant_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    registrant_org: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)


class HistoricalIp(FindingMixin, Base):
    """An IPv4 address the target resolved to in the past."""

    __tablename__ = "historical_ips"

    ip_address: Mapped[str] = mapped_column(String(45), nullable=False)
    first_seen: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_seen: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
