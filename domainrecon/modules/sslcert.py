"""
Certificate stage.

Reads the leaf certificate the target presents on port 443.  A failed
handshake means no certificate snapshot, not a stage error.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from domainrecon.clients.certificate import CertificateInspector
from domainrecon.config import Settings
from domainrecon.modules.base import BaseReconModule, ModuleResult
from domainrecon.modules.registry import ModuleRegistry

logger = logging.getLogger(__name__)


@ModuleRegistry.register
class SSLCertModule(BaseReconModule):
    """TLS certificate snapshot of the target domain."""

    name: str = "sslcert"
    description: str = "TLS Certificate Inspection"
    order: int = 6
    checkpoint: int = 90

    def __init__(
        self,
        settings: Optional[Settings] = None,
        inspector: Optional[CertificateInspector] = None,
    ) -> None:
        super().__init__(settings)
        self.inspector = inspector or CertificateInspector(timeout=self.settings.HTTP_TIMEOUT)

    async def execute(self, target: str, context: dict[str, Any]) -> ModuleResult:
        start: float = time.monotonic()

        certificate = await self.inspector.inspect(target)
        if certificate is None:
            logger.info("No TLS certificate obtained from %s", target)
        elif not certificate["is_valid"]:
            logger.warning(
                "Certificate of %s is outside its validity window (%s - %s)",
                target,
                certificate["valid_from"],
                certificate["valid_to"],
            )

        return ModuleResult(
            module_name=self.name,
            success=True,
            data={"certificate": certificate} if certificate else {},
            duration_seconds=round(time.monotonic() - start, 3),
        )
