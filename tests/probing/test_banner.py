"""
Tests for banner capture and version extraction.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from domainrecon.probing.banner import BannerReader, BannerSample, probe_payload
from domainrecon.probing.ports import PortFinding
from domainrecon.probing.version import MAX_VERSION_LENGTH, extract_version


class FakeReader:
    """Hands out queued chunks, then EOF or a hang."""

    def __init__(self, chunks: list[bytes], hang: bool = False) -> None:
        self.chunks = list(chunks)
        self.hang = hang

    async def read(self, n: int) -> bytes:
        if self.chunks:
            return self.chunks.pop(0)
        if self.hang:
            await asyncio.sleep(10)
        return b""


def _writer() -> MagicMock:
    writer = MagicMock()
    writer.drain = AsyncMock()
    writer.wait_closed = AsyncMock()
    return writer


# ---------------------------------------------------------------------------
# Version extraction
# ---------------------------------------------------------------------------

def test_ftp_greeting_version() -> None:
    assert extract_version("220 myftp.example FTP server ready", "FTP") == "myftp.example FTP server ready"


def test_ssh_version() -> None:
    assert extract_version("SSH-2.0-OpenSSH_8.9p1 Ubuntu-3\r\n", "SSH") == "OpenSSH_8.9p1 Ubuntu-3"


def test_smtp_multiline_greeting() -> None:
    banner = "220-mail.example.com ESMTP Postfix\r\n220 ready\r\n"
    assert extract_version(banner, "SMTP") == "mail.example.com ESMTP Postfix"


def test_http_server_header() -> None:
    banner = "HTTP/1.1 200 OK\r\nserver: nginx/1.24.0\r\nContent-Length: 0\r\n"
    assert extract_version(banner, "HTTP-Proxy") == "nginx/1.24.0"


def test_mysql_and_redis_versions() -> None:
    assert extract_version("J\x00\x00\x00\n8.0.36-0ubuntu0\x00", "MySQL") == "MySQL 8.0.36"
    assert extract_version("$3000\r\n# Server\r\nredis_version:7.2.4\r\n", "Redis") == "Redis 7.2.4"


def test_no_version_for_unmatched_or_empty_banner() -> None:
    assert extract_version(None, "FTP") is None
    assert extract_version("", "SSH") is None
    assert extract_version("hello", "Telnet") is None
    assert extract_version("500 go away", "FTP") is None


@pytest.mark.parametrize(
    ("banner", "service"),
    [
        ("220 " + "A" * 300, "FTP"),
        ("SSH-2.0-" + "B" * 900, "SSH"),
        ("HTTP/1.1 200 OK\r\nServer: " + "C" * 500 + "\r\n", "HTTP"),
    ],
)
def test_long_banner_version_is_capped(banner: str, service: str) -> None:
    version = extract_version(banner, service)

    assert version is not None
    assert len(version) == MAX_VERSION_LENGTH


# ---------------------------------------------------------------------------
# Banner capture
# ---------------------------------------------------------------------------

def test_probe_payloads() -> None:
    assert probe_payload("example.com", 8080) == b"HEAD / HTTP/1.0\r\nHost: example.com\r\n\r\n"
    assert probe_payload("example.com", 6379) == b"INFO\r\n"
    assert probe_payload("example.com", 22) is None


@pytest.mark.asyncio
async def test_encrypted_port_has_no_banner_without_connecting() -> None:
    """443 resolves with no banner even though a connection would succeed."""
    open_connection = AsyncMock(return_value=(FakeReader([b"\x16\x03\x01 tls junk"]), _writer()))

    with patch("domainrecon.probing.banner.asyncio.open_connection", open_connection):
        sample = await BannerReader(timeout=0.5).read("203.0.113.5", 443, "HTTPS")

    assert sample == BannerSample(port=443, service="HTTPS")
    open_connection.assert_not_called()


@pytest.mark.asyncio
async def test_ftp_banner_and_version() -> None:
    reader = FakeReader([b"220 ProFTPD 1.3.5 Server ready\r\n"])
    writer = _writer()

    with patch(
        "domainrecon.probing.banner.asyncio.open_connection",
        AsyncMock(return_value=(reader, writer)),
    ):
        sample = await BannerReader(timeout=0.5).read("203.0.113.5", 21, "FTP")

    assert sample.banner == "220 ProFTPD 1.3.5 Server ready\r\n"
    assert sample.version == "ProFTPD 1.3.5 Server ready"
    writer.write.assert_not_called()
    writer.close.assert_called_once()


@pytest.mark.asyncio
async def test_http_port_sends_head_request() -> None:
    reader = FakeReader([b"HTTP/1.0 200 OK\r\nServer: Apache/2.4.58\r\n\r\n"])
    writer = _writer()

    with patch(
        "domainrecon.probing.banner.asyncio.open_connection",
        AsyncMock(return_value=(reader, writer)),
    ):
        sample = await BannerReader(timeout=0.5).read("example.com", 80, "HTTP")

    writer.write.assert_called_once_with(b"HEAD / HTTP/1.0\r\nHost: example.com\r\n\r\n")
    writer.drain.assert_awaited_once()
    assert sample.version == "Apache/2.4.58"


@pytest.mark.asyncio
async def test_partial_banner_kept_on_timeout() -> None:
    """Bytes read before the deadline are returned."""
    reader = FakeReader([b"SSH-2"], hang=True)

    with patch(
        "domainrecon.probing.banner.asyncio.open_connection",
        AsyncMock(return_value=(reader, _writer())),
    ):
        banner = await BannerReader(timeout=0.1).grab("203.0.113.5", 22)

    assert banner == "SSH-2"


@pytest.mark.asyncio
async def test_connection_error_yields_no_banner() -> None:
    with patch(
        "domainrecon.probing.banner.asyncio.open_connection",
        AsyncMock(side_effect=ConnectionResetError("reset")),
    ):
        sample = await BannerReader(timeout=0.1).read("203.0.113.5", 25, "SMTP")

    assert sample.banner is None
    assert sample.version is None


@pytest.mark.asyncio
async def test_read_all_keeps_input_order() -> None:
    findings = [
        PortFinding(host="203.0.113.5", port=21, service="FTP"),
        PortFinding(host="203.0.113.5", port=443, service="HTTPS"),
    ]

    with patch(
        "domainrecon.probing.banner.asyncio.open_connection",
        AsyncMock(return_value=(FakeReader([b"220 vsFTPd 3.0.5\r\n"]), _writer())),
    ):
        samples = await BannerReader(timeout=0.5).read_all("203.0.113.5", findings)

    assert [s.port for s in samples] == [21, 443]
    assert samples[0].version == "vsFTPd 3.0.5"
    assert samples[1].banner is None
