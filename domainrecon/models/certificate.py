"""
TLS certificate snapshot model.

Captures the leaf certificate presented by the target on port 443.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from domainrecon.core.database import Base
from domainrecon.models.base import FindingMixin


class SslCertificate(FindingMixin, Base):
    """Certificate attributes observed during the scan.

    Attributes:
        issuer: Issuer organisation, falling back to its common name.
        subject: Subject common name.
        valid_from: Start of the validity window (ISO-8601).
        valid_to: End of the validity window (ISO-8601).
        serial_number: Serial number as upper-case hex.
        signature_algorithm: Signature algorithm name (e.g. ``sha256WithRSAEncryption``).
        is_valid: Whether the scan time fell inside the validity window.
    """

    __tablename__ = "ssl_certificates"

    issuer: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    subject: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    valid_from: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    valid_to: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    serial_number: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    signature_algorithm: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    is_valid: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
