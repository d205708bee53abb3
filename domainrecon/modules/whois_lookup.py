"""
WHOIS stage.

Retrieves the raw registration record of the target domain and parses
registrar, creation and expiration dates, name servers and status tokens.
An unavailable WHOIS service still yields a placeholder snapshot.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from domainrecon.clients.whois import WHOIS_UNAVAILABLE, WhoisClient
from domainrecon.config import Settings
from domainrecon.modules.base import BaseReconModule, ModuleResult
from domainrecon.modules.registry import ModuleRegistry

logger = logging.getLogger(__name__)


@ModuleRegistry.register
class WhoisModule(BaseReconModule):
    """WHOIS registration data lookup for the target domain."""

    name: str = "whois"
    description: str = "WHOIS Domain Registration Data"
    order: int = 1
    checkpoint: int = 20

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[WhoisClient] = None,
    ) -> None:
        super().__init__(settings)
        self.client = client or WhoisClient(timeout=self.settings.WHOIS_TIMEOUT)

    async def execute(self, target: str, context: dict[str, Any]) -> ModuleResult:
        """Look up *target* and return ``data["whois"]``.

        Args:
            target:  Root domain to query (e.g. ``"example.com"``).
            context: Results from previously executed stages (unused here).
        """
        start: float = time.monotonic()

        record = await self.client.fetch(target)
        errors: list[str] = []
        if record.raw_data == WHOIS_UNAVAILABLE:
            errors.append(f"WHOIS lookup for {target} unavailable")
            logger.info("WHOIS unavailable for %s; storing placeholder", target)

        duration: float = time.monotonic() - start

        return ModuleResult(
            module_name=self.name,
            success=True,
            data={"whois": record.to_dict()},
            errors=errors or None,
            duration_seconds=round(duration, 3),
        )
