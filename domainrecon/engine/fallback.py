"""
Passive-first port discovery.

Shodan's port list is used when it has one for the address; it is faster
and sees through IP-obfuscating reverse proxies.  Otherwise the active
prober runs.  The decision is made once per scan.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from domainrecon.clients.shodan import HostIntel
from domainrecon.probing.ports import PortFinding
from domainrecon.probing.services import service_name

logger = logging.getLogger(__name__)

SOURCE_SHODAN: str = "shodan"
SOURCE_PROBE: str = "probe"


class HostIntelSource(Protocol):
    async def host(self, ip: str) -> Optional[HostIntel]: ...


class ActivePortScanner(Protocol):
    async def scan(self, host: str) -> list[PortFinding]: ...


@dataclass(frozen=True)
class FallbackResult:
    """Open ports, where they came from, and the passive record if any."""

    findings: list[PortFinding]
    source: str
    intel: Optional[HostIntel] = None


class HostIntelFallback:
    """Choose between passive host intelligence and active probing."""

    def __init__(self, host_intel_client: HostIntelSource, prober: ActivePortScanner) -> None:
        self.host_intel_client = host_intel_client
        self.prober = prober

    async def discover(self, ip: str) -> FallbackResult:
        intel: Optional[HostIntel] = None
        try:
            intel = await self.host_intel_client.host(ip)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Host intelligence lookup for %s failed: %s", ip, exc)

        if intel is not None and intel.ports:
            findings = [
                PortFinding(
                    host=ip,
                    port=port,
                    service=service_name(port),
                    source=SOURCE_SHODAN,
                )
                for port in sorted(set(intel.ports))
            ]
            logger.info("Using %d ports from Shodan for %s", len(findings), ip)
            return FallbackResult(findings=findings, source=SOURCE_SHODAN, intel=intel)

        logger.info("No passive port data for %s; probing actively", ip)
        findings = await self.prober.scan(ip)
        return FallbackResult(findings=findings, source=SOURCE_PROBE, intel=intel)
