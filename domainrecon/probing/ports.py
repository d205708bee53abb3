"""
Concurrent TCP reachability prober.

Every candidate port gets one connection attempt bounded by a timeout.  All
attempts run at once behind a semaphore and are joined before the scan
returns.  Only successful connects are reported; a timeout or connection
error leaves no trace for that port.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from domainrecon.probing.services import COMMON_PORTS, service_name

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT: float = 3.0
_DEFAULT_CONCURRENCY: int = 25


@dataclass(frozen=True)
class PortFinding:
    """An open port on one host."""

    host: str
    port: int
    service: str
    state: str = "open"
    version: Optional[str] = None
    banner: Optional[str] = None
    source: str = "probe"

    def to_dict(self) -> dict:
        return {
            "host": self.host,
            "port": self.port,
            "service": self.service,
            "version": self.version,
            "banner": self.banner,
            "state": self.state,
            "source": self.source,
        }


class PortProber:
    """Test TCP reachability of a fixed candidate port set.

    Args:
        ports: Candidate ports.  Defaults to :data:`COMMON_PORTS`.
        timeout: Seconds allowed for each connection attempt.
        concurrency: Maximum simultaneous attempts.
    """

    def __init__(
        self,
        ports: Iterable[int] = COMMON_PORTS,
        timeout: float = _DEFAULT_TIMEOUT,
        concurrency: int = _DEFAULT_CONCURRENCY,
    ) -> None:
        self.ports: tuple[int, ...] = tuple(ports)
        self.timeout = timeout
        self.concurrency = max(1, concurrency)

    async def scan(self, host: str) -> list[PortFinding]:
        """Probe every candidate port of *host* and return the open ones.

        Returns:
            Findings with state ``open``, sorted by port number.
        """
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _bounded(port: int) -> Optional[PortFinding]:
            async with semaphore:
                return await self.probe(host, port)

        results = await asyncio.gather(
            *(_bounded(port) for port in self.ports),
            return_exceptions=True,
        )

        findings: list[PortFinding] = []
        for result in results:
            if isinstance(result, PortFinding):
                findings.append(result)
            elif isinstance(result, BaseException):
                logger.debug("Probe task for %s raised: %s", host, result)

        findings.sort(key=lambda f: f.port)
        logger.info(
            "Port probe of %s: %d/%d ports open",
            host,
            len(findings),
            len(self.ports),
        )
        return findings

    async def probe(self, host: str, port: int) -> Optional[PortFinding]:
        """Attempt one connection.  Returns a finding only on success."""
        try:
            _reader, writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, OSError):
            return None

        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass
        return PortFinding(host=host, port=port, service=service_name(port))
