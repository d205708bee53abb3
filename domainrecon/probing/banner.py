"""
Protocol-aware banner capture.

For each reachable port a fresh connection is opened, an optional probe is
written, and the first response fragment is collected.  Connection and read
share one deadline so a silent service costs at most ``timeout`` seconds.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from domainrecon.probing.ports import PortFinding
from domainrecon.probing.version import extract_version

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT: float = 3.0
_MIN_BANNER_BYTES: int = 10
_READ_CHUNK: int = 1024

# Encrypted-only or handshake-first protocols: a plain read yields nothing useful.
NO_PLAINTEXT_PORTS: frozenset[int] = frozenset({443, 8443, 5432, 27017})
HTTP_PORTS: frozenset[int] = frozenset({80, 8000, 8080, 8888})
_REDIS_PORT: int = 6379


@dataclass(frozen=True)
class BannerSample:
    """Banner captured from one port, with the version inferred from it."""

    port: int
    service: str
    banner: Optional[str] = None
    version: Optional[str] = None


def probe_payload(host: str, port: int) -> Optional[bytes]:
    """Return the bytes to send right after connecting, if any."""
    if port in HTTP_PORTS:
        return f"HEAD / HTTP/1.0\r\nHost: {host}\r\n\r\n".encode()
    if port == _REDIS_PORT:
        return b"INFO\r\n"
    return None


class BannerReader:
    """Capture initial service responses.

    Args:
        timeout: Seconds allowed for connecting and reading, combined.
    """

    def __init__(self, timeout: float = _DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    async def read(self, host: str, port: int, service: str) -> BannerSample:
        """Grab the banner of one port and extract its version."""
        if port in NO_PLAINTEXT_PORTS:
            return BannerSample(port=port, service=service)

        banner = await self.grab(host, port)
        return BannerSample(
            port=port,
            service=service,
            banner=banner,
            version=extract_version(banner, service),
        )

    async def read_all(
        self,
        host: str,
        findings: Iterable[PortFinding],
    ) -> list[BannerSample]:
        """Read banners for every finding concurrently, in input order."""
        findings = list(findings)
        results = await asyncio.gather(
            *(self.read(host, f.port, f.service) for f in findings),
            return_exceptions=True,
        )

        samples: list[BannerSample] = []
        for finding, result in zip(findings, results):
            if isinstance(result, BannerSample):
                samples.append(result)
            else:
                logger.debug("Banner read %s:%d raised: %s", host, finding.port, result)
                samples.append(BannerSample(port=finding.port, service=finding.service))
        return samples

    async def grab(self, host: str, port: int) -> Optional[str]:
        """Return the decoded initial response of ``host:port``, or ``None``.

        Reading stops once more than ten bytes are buffered, on EOF, or at the
        deadline.  Data captured before a timeout is kept; a connection or
        socket error discards it.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout

        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, OSError):
            return None

        buffer = bytearray()
        try:
            payload = probe_payload(host, port)
            if payload:
                writer.write(payload)
                await writer.drain()

            while len(buffer) <= _MIN_BANNER_BYTES:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    break
                try:
                    chunk = await asyncio.wait_for(reader.read(_READ_CHUNK), timeout=remaining)
                except asyncio.TimeoutError:
                    break
                if not chunk:
                    break
                buffer.extend(chunk)
        except OSError as exc:
            logger.debug("Banner read %s:%d failed: %s", host, port, exc)
            return None
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass

        if not buffer:
            return None
        return buffer.decode("utf-8", errors="replace")
