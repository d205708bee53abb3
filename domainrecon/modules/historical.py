"""
Historical enrichment stage.

Pulls SecurityTrails history (DNS values per record type, WHOIS
registrations, past IPv4 addresses, known subdomains) and the Wayback
Machine's snapshots of the front page.  Without a SecurityTrails key only
the snapshots are collected.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from domainrecon.clients.securitytrails import SecurityTrailsClient
from domainrecon.clients.wayback import WaybackClient
from domainrecon.config import Settings
from domainrecon.engine.aggregator import SubdomainAggregator
from domainrecon.modules.base import BaseReconModule, ModuleResult
from domainrecon.modules.registry import ModuleRegistry

logger = logging.getLogger(__name__)

# SecurityTrails can return thousands of names for large domains.
SUBDOMAIN_LIMIT: int = 100


@ModuleRegistry.register
class HistoricalModule(BaseReconModule):
    """Historical DNS, WHOIS, IP and archive data for the target."""

    name: str = "historical"
    description: str = "Historical Intelligence (SecurityTrails, Wayback Machine)"
    order: int = 8
    checkpoint: int = 100
    requires_api_key: bool = True
    api_key_setting: str = "SECURITYTRAILS_API_KEY"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        securitytrails: Optional[SecurityTrailsClient] = None,
        wayback: Optional[WaybackClient] = None,
    ) -> None:
        super().__init__(settings)
        self.securitytrails = securitytrails or SecurityTrailsClient(
            self.settings.SECURITYTRAILS_API_KEY,
            timeout=self.settings.HTTP_TIMEOUT,
        )
        self.wayback = wayback or WaybackClient(timeout=self.settings.HTTP_TIMEOUT)

    async def execute(self, target: str, context: dict[str, Any]) -> ModuleResult:
        """Collect historical data for *target*.

        Args:
            target:  Root domain (e.g. ``"example.com"``).
            context: ``"subdomains"`` found earlier; those names are not
                     reported again.

        Returns:
            A :class:`ModuleResult` with ``historical_dns``,
            ``historical_whois``, ``historical_ips``, ``subdomains`` and
            ``wayback_snapshots`` lists.
        """
        start: float = time.monotonic()
        data: dict[str, Any] = {}

        if self.securitytrails.configured:
            data.update(await self._securitytrails(target, context))
        else:
            logger.info("SecurityTrails API key not configured; skipping history for %s", target)

        data["wayback_snapshots"] = await self.wayback.snapshots(f"https://{target}")

        duration: float = time.monotonic() - start
        logger.info(
            "Historical enrichment of %s: %s in %.1fs",
            target,
            {key: len(value) for key, value in data.items()},
            duration,
        )

        return ModuleResult(
            module_name=self.name,
            success=True,
            data=data,
            duration_seconds=round(duration, 3),
        )

    async def _securitytrails(self, target: str, context: dict[str, Any]) -> dict[str, Any]:
        dns_history = await self.securitytrails.dns_history(target)
        historical_dns = [
            {"record_type": rtype.upper(), **entry}
            for rtype, entries in dns_history.items()
            for entry in entries
            if entry.get("value")
        ]

        whois_history = await self.securitytrails.whois_history(target)
        ip_history = await self.securitytrails.ip_history(target)

        known = [sub["name"] for sub in context.get("subdomains", []) if sub.get("name")]
        candidates = (await self.securitytrails.subdomains(target))[:SUBDOMAIN_LIMIT]
        aggregator = SubdomainAggregator(target)
        aggregator.add("securitytrails", candidates)
        new_subdomains = aggregator.findings(exclude=known)
        if new_subdomains:
            logger.info(
                "SecurityTrails added %d subdomains for %s",
                len(new_subdomains),
                target,
            )

        return {
            "historical_dns": historical_dns,
            "historical_whois": whois_history,
            "historical_ips": ip_history,
            "subdomains": [finding.to_dict() for finding in new_subdomains],
        }
