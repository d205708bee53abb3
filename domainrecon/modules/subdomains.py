"""
Subdomain discovery stage.

Combines three independent sources into one validated, deduplicated list:

* **bruteforce** -- A-record resolution of a wordlist of common labels,
* **crtsh** -- certificate-transparency search,
* **c99** -- the c99.nl subdomain finder (optional, ``C99_ENABLED``).

Only names resolved during the brute force carry an address and are
flagged alive.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Optional

from domainrecon.clients.c99 import C99Client
from domainrecon.clients.crtsh import CrtshClient
from domainrecon.clients.resolver import NameResolver
from domainrecon.config import Settings
from domainrecon.engine.aggregator import SubdomainAggregator
from domainrecon.modules.base import BaseReconModule, ModuleResult
from domainrecon.modules.registry import ModuleRegistry

logger = logging.getLogger(__name__)

_CONCURRENCY = 20

WORDLIST: tuple[str, ...] = (
    "www", "mail", "ftp", "localhost", "webmail", "smtp", "pop", "ns1",
    "webdisk", "ns2", "cpanel", "whm", "autodiscover", "autoconfig", "test",
    "dev", "staging", "api", "admin", "blog", "shop", "forum", "support",
    "portal", "cdn", "static", "assets", "images", "img", "js", "css", "app",
    "mobile", "m", "vpn", "remote", "git", "jenkins", "gitlab", "github",
    "bitbucket", "jira", "confluence",
)


@ModuleRegistry.register
class SubdomainModule(BaseReconModule):
    """Multi-source subdomain discovery."""

    name: str = "subdomains"
    description: str = "Subdomain Discovery (wordlist, crt.sh, c99)"
    order: int = 3
    checkpoint: int = 50

    def __init__(
        self,
        settings: Optional[Settings] = None,
        resolver: Optional[NameResolver] = None,
        crtsh: Optional[CrtshClient] = None,
        c99: Optional[C99Client] = None,
    ) -> None:
        super().__init__(settings)
        self._owns_resolver: bool = resolver is None
        self.resolver = resolver or NameResolver(timeout=self.settings.DNS_TIMEOUT)
        self.crtsh = crtsh or CrtshClient()
        self.c99 = c99 if c99 is not None else (C99Client() if self.settings.C99_ENABLED else None)

    def close(self) -> None:
        if self._owns_resolver:
            self.resolver.shutdown()

    async def execute(self, target: str, context: dict[str, Any]) -> ModuleResult:
        """Discover subdomains of *target*.

        Returns:
            A :class:`ModuleResult` whose ``data["subdomains"]`` is a
            name-sorted list of ``{"name", "ip_address", "is_alive", "source"}``.
        """
        start: float = time.monotonic()
        errors: list[str] = []
        aggregator = SubdomainAggregator(target)

        sources: dict[str, Any] = {
            "bruteforce": self._bruteforce(target),
            "crtsh": self.crtsh.subdomains(target),
        }
        if self.c99 is not None:
            sources["c99"] = self.c99.subdomains(target)

        results = await asyncio.gather(*sources.values(), return_exceptions=True)

        for source, result in zip(sources, results):
            if isinstance(result, BaseException):
                error_msg = f"{source} source failed: {result}"
                logger.warning(error_msg)
                errors.append(error_msg)
                continue

            if source == "bruteforce":
                resolved: dict[str, str] = result
                aggregator.add(source, resolved)
                for name, ip_address in resolved.items():
                    aggregator.annotate(name, ip_address)
            else:
                added = aggregator.add(source, result)
                logger.info("%s contributed %d new subdomains", source, added)

        findings = aggregator.findings()
        duration: float = time.monotonic() - start
        logger.info(
            "Found %d subdomains of %s in %.1fs",
            len(findings),
            target,
            duration,
        )

        return ModuleResult(
            module_name=self.name,
            success=True,
            data={"subdomains": [finding.to_dict() for finding in findings]},
            errors=errors or None,
            duration_seconds=round(duration, 3),
        )

    async def _bruteforce(self, target: str) -> dict[str, str]:
        """Resolve every wordlist label; returns ``{name: first IPv4}``."""
        semaphore = asyncio.Semaphore(_CONCURRENCY)
        resolved: dict[str, str] = {}

        async def _check_label(label: str) -> None:
            name = f"{label}.{target}"
            async with semaphore:
                address = await self.resolver.first_address(name)
            if address:
                resolved[name] = address

        await asyncio.gather(
            *(_check_label(label) for label in WORDLIST),
            return_exceptions=True,
        )
        return resolved
