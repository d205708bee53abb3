"""DNS record model: one resolved value of one record type."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from domainrecon.core.database import Base
from domainrecon.models.base import FindingMixin


class DnsRecord(FindingMixin, Base):
    """A current DNS record of the target domain.

    Attributes:
        record_type: ``A``, ``AAAA``, ``MX``, ``NS``, ``TXT`` or ``CNAME``.
        value: Record value; MX values are ``"<preference> <exchange>"``.
    """

    __tablename__ = "dns_records"

    record_type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )
    value: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<DnsRecord {self.record_type} {self.value!r} scan_id={self.scan_id}>"
