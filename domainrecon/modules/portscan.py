"""
Port discovery stage.

Finds open TCP ports on the target's primary IPv4 address and reads their
banners:

1. Shodan's host record is used when it lists ports for the address.
2. Otherwise the 25 common ports are probed concurrently.
3. Every open port then gets a concurrent banner read, and a version is
   inferred from the banner where a rule matches.

Closed and filtered ports are never reported.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from domainrecon.clients.resolver import NameResolver
from domainrecon.clients.shodan import ShodanClient
from domainrecon.config import Settings
from domainrecon.engine.fallback import HostIntelFallback
from domainrecon.modules.base import BaseReconModule, ModuleResult
from domainrecon.modules.registry import ModuleRegistry
from domainrecon.probing.banner import BannerReader
from domainrecon.probing.ports import PortProber

logger = logging.getLogger(__name__)


@ModuleRegistry.register
class PortScanModule(BaseReconModule):
    """Passive-first port discovery with banner grabbing."""

    name: str = "portscan"
    description: str = "Port Discovery (Shodan or TCP connect) with Banner Grabbing"
    order: int = 4
    checkpoint: int = 65

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fallback: Optional[HostIntelFallback] = None,
        banner_reader: Optional[BannerReader] = None,
        resolver: Optional[NameResolver] = None,
    ) -> None:
        super().__init__(settings)
        self.fallback = fallback or HostIntelFallback(
            ShodanClient(self.settings.SHODAN_API_KEY, timeout=self.settings.HTTP_TIMEOUT),
            PortProber(
                timeout=self.settings.PORT_PROBE_TIMEOUT,
                concurrency=self.settings.PORT_PROBE_CONCURRENCY,
            ),
        )
        self.banner_reader = banner_reader or BannerReader(timeout=self.settings.BANNER_TIMEOUT)
        self._owns_resolver: bool = resolver is None
        self.resolver = resolver or NameResolver(timeout=self.settings.DNS_TIMEOUT)

    def close(self) -> None:
        if self._owns_resolver:
            self.resolver.shutdown()

    async def execute(self, target: str, context: dict[str, Any]) -> ModuleResult:
        """Discover open ports of *target*'s primary address.

        Args:
            target:  Root domain (e.g. ``"example.com"``).
            context: ``"resolved_ip"`` from the DNS stage when available;
                     the address is looked up here otherwise.

        Returns:
            A :class:`ModuleResult` with ``data["ports"]`` sorted by port,
            ``data["port_source"]`` (``shodan`` or ``probe``) and, when
            Shodan knew the host, ``data["host_intel"]``.
        """
        start: float = time.monotonic()

        ip: Optional[str] = context.get("resolved_ip") or await self.resolver.first_address(target)
        if not ip:
            logger.warning("No A record for %s; skipping port discovery", target)
            return ModuleResult(
                module_name=self.name,
                success=True,
                data={"ports": []},
                duration_seconds=round(time.monotonic() - start, 3),
            )

        discovery = await self.fallback.discover(ip)
        samples = await self.banner_reader.read_all(ip, discovery.findings)

        ports: list[dict[str, Any]] = []
        for finding, sample in zip(discovery.findings, samples):
            entry = finding.to_dict()
            entry["banner"] = sample.banner
            entry["version"] = sample.version or finding.version
            ports.append(entry)

        data: dict[str, Any] = {"ports": ports, "port_source": discovery.source}
        if discovery.intel is not None:
            data["host_intel"] = discovery.intel.to_dict()

        duration: float = time.monotonic() - start
        logger.info(
            "Port discovery on %s (%s) found %d open ports via %s in %.1fs",
            target,
            ip,
            len(ports),
            discovery.source,
            duration,
        )

        return ModuleResult(
            module_name=self.name,
            success=True,
            data=data,
            duration_seconds=round(duration, 3),
        )
