"""
Certificate-inspection collaborator.

Completes a TLS handshake without verification, takes the leaf certificate
in DER form and parses it with ``cryptography``.
"""

from __future__ import annotations

import asyncio
import logging
import ssl
from datetime import datetime, timezone
from typing import Any, Optional

from cryptography import x509
from cryptography.x509.oid import NameOID

logger = logging.getLogger(__name__)

_UNKNOWN: str = "Unknown"


def _name_attribute(name: x509.Name, oid: x509.ObjectIdentifier) -> Optional[str]:
    attrs = name.get_attributes_for_oid(oid)
    return str(attrs[0].value) if attrs else None


def describe_certificate(
    cert: x509.Certificate,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Flatten a certificate into the attributes recorded per scan.

    ``is_valid`` only reflects the validity window; chain trust is not
    evaluated.
    """
    now = now or datetime.now(timezone.utc)
    not_before = cert.not_valid_before_utc
    not_after = cert.not_valid_after_utc

    issuer = (
        _name_attribute(cert.issuer, NameOID.ORGANIZATION_NAME)
        or _name_attribute(cert.issuer, NameOID.COMMON_NAME)
        or _UNKNOWN
    )
    subject = _name_attribute(cert.subject, NameOID.COMMON_NAME) or _UNKNOWN

    try:
        signature_algorithm = cert.signature_algorithm_oid._name
    except AttributeError:
        signature_algorithm = _UNKNOWN

    return {
        "issuer": issuer,
        "subject": subject,
        "valid_from": not_before.isoformat(),
        "valid_to": not_after.isoformat(),
        "serial_number": format(cert.serial_number, "X"),
        "signature_algorithm": signature_algorithm or _UNKNOWN,
        "is_valid": not_before <= now <= not_after,
    }


class CertificateInspector:
    """Read the certificate a host presents on a TLS port.

    Args:
        timeout: Seconds allowed for connect and handshake.
    """

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout

    async def inspect(self, domain: str, port: int = 443) -> Optional[dict[str, Any]]:
        """Return the certificate attributes, or ``None`` if the handshake fails."""
        der = await self.fetch_der(domain, port)
        if der is None:
            return None
        try:
            cert = x509.load_der_x509_certificate(der)
        except ValueError as exc:
            logger.debug("Unparseable certificate from %s: %s", domain, exc)
            return None
        return describe_certificate(cert)

    async def fetch_der(self, domain: str, port: int = 443) -> Optional[bytes]:
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE

        try:
            _reader, writer = await asyncio.wait_for(
                asyncio.open_connection(domain, port, ssl=ctx, server_hostname=domain),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, OSError) as exc:
            logger.debug("TLS connect to %s:%d failed: %s", domain, port, exc)
            return None

        try:
            ssl_object = writer.get_extra_info("ssl_object")
            if ssl_object is None:
                return None
            return ssl_object.getpeercert(binary_form=True)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass
