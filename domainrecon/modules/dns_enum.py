"""
DNS stage.

Resolves the current A, AAAA, MX, NS, TXT and CNAME records of the target
domain.  The first A record is handed on to later stages as
``resolved_ip``.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from domainrecon.clients.resolver import NameResolver
from domainrecon.config import Settings
from domainrecon.modules.base import BaseReconModule, ModuleResult
from domainrecon.modules.registry import ModuleRegistry

logger = logging.getLogger(__name__)


@ModuleRegistry.register
class DnsEnumModule(BaseReconModule):
    """DNS record enumeration for the target domain.

    Record types are queried concurrently; a type with no answer simply
    contributes nothing.
    """

    name: str = "dns"
    description: str = "DNS Record Enumeration (A, AAAA, MX, NS, TXT, CNAME)"
    order: int = 2
    checkpoint: int = 35

    def __init__(
        self,
        settings: Optional[Settings] = None,
        resolver: Optional[NameResolver] = None,
    ) -> None:
        super().__init__(settings)
        self._owns_resolver: bool = resolver is None
        self.resolver = resolver or NameResolver(timeout=self.settings.DNS_TIMEOUT)

    def close(self) -> None:
        if self._owns_resolver:
            self.resolver.shutdown()

    async def execute(self, target: str, context: dict[str, Any]) -> ModuleResult:
        """Resolve DNS records for *target*.

        Returns:
            A :class:`ModuleResult` with::

                data = {
                    "dns_records": [{"record_type": "A", "value": "93.184.216.34"}, ...],
                    "resolved_ip": "93.184.216.34",   # only when an A record exists
                }
        """
        start: float = time.monotonic()

        pairs = await self.resolver.resolve_all(target)
        records = [{"record_type": rtype, "value": value} for rtype, value in pairs]

        data: dict[str, Any] = {"dns_records": records}
        resolved_ip = next((value for rtype, value in pairs if rtype == "A"), None)
        if resolved_ip:
            data["resolved_ip"] = resolved_ip

        duration: float = time.monotonic() - start
        logger.info(
            "DNS returned %d records for %s in %.1fs",
            len(records),
            target,
            duration,
        )

        return ModuleResult(
            module_name=self.name,
            success=True,
            data=data,
            duration_seconds=round(duration, 3),
        )
