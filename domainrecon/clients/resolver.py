"""
Name-resolution collaborator.

Wraps ``dnspython`` in a thread pool so lookups do not block the event
loop.  Negative answers (NXDOMAIN, NoAnswer, ...) and transport failures
both yield an empty list; :meth:`NameResolver.resolve` never raises.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

import dns.exception
import dns.resolver

logger = logging.getLogger(__name__)

RECORD_TYPES: tuple[str, ...] = ("A", "AAAA", "MX", "NS", "TXT", "CNAME")

_DEFAULT_WORKERS: int = 30


class NameResolver:
    """Resolve DNS records with conservative timeouts.

    Args:
        timeout: Per-server query timeout in seconds.
        lifetime: Total time allowed for one query.  Defaults to
            ``timeout + 2``.
        executor: Thread pool for the blocking resolver calls.
    """

    def __init__(
        self,
        timeout: float = 3.0,
        lifetime: Optional[float] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self.timeout = timeout
        self.lifetime = lifetime if lifetime is not None else timeout + 2.0
        self._executor = executor or ThreadPoolExecutor(max_workers=_DEFAULT_WORKERS)
        self._resolver: Optional[dns.resolver.Resolver] = None

    @property
    def resolver(self) -> dns.resolver.Resolver:
        if self._resolver is None:
            resolver = dns.resolver.Resolver()
            resolver.timeout = self.timeout
            resolver.lifetime = self.lifetime
            self._resolver = resolver
        return self._resolver

    async def resolve(self, domain: str, rtype: str) -> list[str]:
        """Return the formatted values of one record type."""
        loop = asyncio.get_running_loop()
        try:
            answers = await loop.run_in_executor(
                self._executor, self._resolve_record, domain, rtype
            )
        except Exception as exc:  # noqa: BLE001
            logger.debug("DNS %s for %s failed: %s", rtype, domain, exc)
            return []

        if answers is None:
            return []
        return [format_rdata(rtype, rdata) for rdata in answers]

    async def resolve_all(self, domain: str) -> list[tuple[str, str]]:
        """Resolve every supported record type; returns ``(type, value)`` pairs."""
        results = await asyncio.gather(
            *(self.resolve(domain, rtype) for rtype in RECORD_TYPES)
        )
        return [
            (rtype, value)
            for rtype, values in zip(RECORD_TYPES, results)
            for value in values
        ]

    async def first_address(self, domain: str) -> Optional[str]:
        """Return the first IPv4 address of *domain*, if any."""
        addresses = await self.resolve(domain, "A")
        return addresses[0] if addresses else None

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)

    def _resolve_record(self, domain: str, rtype: str) -> Any:
        try:
            return self.resolver.resolve(domain, rtype)
        except (
            dns.resolver.NXDOMAIN,
            dns.resolver.NoAnswer,
            dns.resolver.NoNameservers,
            dns.exception.Timeout,
        ):
            return None


def format_rdata(rtype: str, rdata: Any) -> str:
    """Render one answer record as text."""
    if rtype == "MX":
        return f"{rdata.preference} {rdata.exchange.to_text(omit_final_dot=True)}"
    if rtype in ("NS", "CNAME"):
        return rdata.target.to_text(omit_final_dot=True)
    if rtype == "TXT":
        return " ".join(
            part.decode("utf-8", errors="replace") if isinstance(part, bytes) else str(part)
            for part in rdata.strings
        )
    return str(rdata)
