"""
Tests for the offline parsing helpers: WHOIS text, DNS rdata formatting and
certificate description.
"""

from __future__ import annotations

import datetime
from unittest.mock import MagicMock, patch

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from domainrecon.clients.resolver import NameResolver, format_rdata
from domainrecon.clients.whois import WHOIS_UNAVAILABLE, WhoisClient, parse_whois_text
from domainrecon.clients.certificate import describe_certificate

WHOIS_TEXT = """\
Domain Name: EXAMPLE.COM
Registrar WHOIS Server: whois.example-registrar.com
Registrar: Example Registrar, Inc.
Creation Date: 1995-08-14T04:00:00Z
Registry Expiry Date: 2025-08-13T04:00:00Z
Name Server: A.IANA-SERVERS.NET
Name Server: b.iana-servers.net.
Name Server: a.iana-servers.net
Domain Status: clientDeleteProhibited https://icann.org/epp#clientDeleteProhibited
Domain Status: clientTransferProhibited https://icann.org/epp#clientTransferProhibited
Domain Status: clientDeleteProhibited https://icann.org/epp#clientDeleteProhibited
"""


# ---------------------------------------------------------------------------
# WHOIS
# ---------------------------------------------------------------------------

def test_parse_whois_text() -> None:
    data = parse_whois_text(WHOIS_TEXT)

    assert data.registrar == "Example Registrar, Inc."
    assert data.creation_date == "1995-08-14T04:00:00Z"
    assert data.expiration_date == "2025-08-13T04:00:00Z"
    assert data.name_servers == ["a.iana-servers.net", "b.iana-servers.net"]
    assert data.status == ["clientDeleteProhibited", "clientTransferProhibited"]
    assert data.to_dict()["name_servers"] == "a.iana-servers.net, b.iana-servers.net"


def test_parse_whois_text_alternative_keys() -> None:
    data = parse_whois_text("created: 2001-02-03\nexpires: 2030-02-03\nnserver: NS1.EXAMPLE.NL\n")

    assert data.creation_date == "2001-02-03"
    assert data.expiration_date == "2030-02-03"
    assert data.name_servers == ["ns1.example.nl"]
    assert data.registrar is None
    assert data.to_dict()["status"] is None


@pytest.mark.asyncio
async def test_whois_failure_yields_placeholder() -> None:
    with patch("domainrecon.clients.whois.whois.whois", side_effect=ConnectionResetError("reset")):
        record = await WhoisClient(timeout=1.0).fetch("example.com")

    assert record.raw_data == WHOIS_UNAVAILABLE
    assert record.registrar is None


@pytest.mark.asyncio
async def test_whois_lookup_returns_raw_text() -> None:
    response = MagicMock()
    response.text = WHOIS_TEXT

    with patch("domainrecon.clients.whois.whois.whois", return_value=response):
        record = await WhoisClient(timeout=1.0).fetch("example.com")

    assert record.raw_data == WHOIS_TEXT
    assert record.registrar == "Example Registrar, Inc."


# ---------------------------------------------------------------------------
# DNS
# ---------------------------------------------------------------------------

def test_format_rdata() -> None:
    mx = MagicMock()
    mx.preference = 10
    mx.exchange.to_text.return_value = "mail.example.com"
    assert format_rdata("MX", mx) == "10 mail.example.com"

    ns = MagicMock()
    ns.target.to_text.return_value = "ns1.example.com"
    assert format_rdata("NS", ns) == "ns1.example.com"

    txt = MagicMock()
    txt.strings = (b"v=spf1", b"-all")
    assert format_rdata("TXT", txt) == "v=spf1 -all"

    assert format_rdata("A", "203.0.113.5") == "203.0.113.5"


@pytest.mark.asyncio
async def test_resolver_never_raises() -> None:
    resolver = NameResolver(timeout=0.5)
    with patch.object(NameResolver, "_resolve_record", side_effect=RuntimeError("socket closed")):
        assert await resolver.resolve("example.com", "A") == []
    resolver.shutdown()


@pytest.mark.asyncio
async def test_resolve_all_collects_typed_pairs() -> None:
    answers = {"A": ["203.0.113.5"], "MX": [MagicMock(preference=5)]}
    answers["MX"][0].exchange.to_text.return_value = "mx.example.com"

    resolver = NameResolver(timeout=0.5)
    with patch.object(
        NameResolver,
        "_resolve_record",
        side_effect=lambda domain, rtype: answers.get(rtype),
    ):
        pairs = await resolver.resolve_all("example.com")
    resolver.shutdown()

    assert pairs == [("A", "203.0.113.5"), ("MX", "5 mx.example.com")]


# ---------------------------------------------------------------------------
# Certificates
# ---------------------------------------------------------------------------

def _certificate(not_before: datetime.datetime, not_after: datetime.datetime) -> x509.Certificate:
    key = ec.generate_private_key(ec.SECP256R1())
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "example.com")])
    issuer = x509.Name([
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Example CA"),
        x509.NameAttribute(NameOID.COMMON_NAME, "Example CA R1"),
    ])
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(0xABC123)
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .sign(key, hashes.SHA256())
    )


def test_describe_certificate() -> None:
    start = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)
    cert = _certificate(start, start + datetime.timedelta(days=90))

    info = describe_certificate(cert, now=start + datetime.timedelta(days=30))

    assert info["issuer"] == "Example CA"
    assert info["subject"] == "example.com"
    assert info["serial_number"] == "ABC123"
    assert info["signature_algorithm"] == "ecdsa-with-SHA256"
    assert info["valid_from"].startswith("2024-01-01T00:00:00")
    assert info["is_valid"] is True


def test_expired_certificate_is_invalid() -> None:
    start = datetime.datetime(2020, 1, 1, tzinfo=datetime.timezone.utc)
    cert = _certificate(start, start + datetime.timedelta(days=90))

    assert describe_certificate(cert, now=start + datetime.timedelta(days=365))["is_valid"] is False
