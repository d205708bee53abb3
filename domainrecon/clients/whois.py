"""
WHOIS collaborator.

Fetches the raw registration text through ``python-whois`` and parses it
line by line.  A failed lookup never raises: callers get a placeholder
record instead.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import whois  # python-whois

logger = logging.getLogger(__name__)

WHOIS_UNAVAILABLE: str = "WHOIS lookup not available for this domain"


@dataclass
class WhoisData:
    """Registration facts parsed from raw WHOIS text."""

    raw_data: str
    registrar: Optional[str] = None
    creation_date: Optional[str] = None
    expiration_date: Optional[str] = None
    name_servers: list[str] = field(default_factory=list)
    status: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "registrar": self.registrar,
            "creation_date": self.creation_date,
            "expiration_date": self.expiration_date,
            "name_servers": ", ".join(self.name_servers) or None,
            "status": ", ".join(self.status) or None,
            "raw_data": self.raw_data,
        }


def parse_whois_text(raw: str) -> WhoisData:
    """Extract registrar, dates, name servers and status tokens.

    Keys are matched case-insensitively anywhere in the line, so registry
    specific prefixes (``Registry Expiry Date``, ``nserver``) are covered.
    Later registrar and date lines override earlier ones.
    """
    data = WhoisData(raw_data=raw)

    for line in raw.splitlines():
        if ":" not in line:
            continue
        lower = line.lower()
        value = line.split(":", 1)[1].strip()
        if not value:
            continue

        if "registrar:" in lower:
            data.registrar = value
        elif "creation date:" in lower or "created:" in lower:
            data.creation_date = value
        elif (
            "expiration date:" in lower
            or "expires:" in lower
            or "registry expiry date:" in lower
        ):
            data.expiration_date = value
        elif "name server:" in lower or "nserver:" in lower:
            server = value.split()[0].lower().rstrip(".")
            if server not in data.name_servers:
                data.name_servers.append(server)
        elif "status:" in lower:
            # "clientTransferProhibited https://icann.org/epp#..." -> first token
            token = value.split()[0]
            if token not in data.status:
                data.status.append(token)

    return data


class WhoisClient:
    """Async wrapper around the blocking ``python-whois`` lookup.

    Args:
        timeout: Seconds allowed for one lookup.
    """

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout

    async def lookup(self, domain: str) -> Optional[str]:
        """Return the raw WHOIS text for *domain*, or ``None`` on failure."""
        loop = asyncio.get_running_loop()
        try:
            response = await asyncio.wait_for(
                loop.run_in_executor(None, whois.whois, domain),
                timeout=self.timeout,
            )
        except Exception as exc:  # noqa: BLE001 - python-whois raises its own and socket errors
            logger.warning("WHOIS lookup for %s failed: %s", domain, exc)
            return None

        text = getattr(response, "text", None)
        return text or None

    async def fetch(self, domain: str) -> WhoisData:
        """Look up and parse *domain*; returns a placeholder when unavailable."""
        raw = await self.lookup(domain)
        if not raw:
            return WhoisData(raw_data=WHOIS_UNAVAILABLE)
        return parse_whois_text(raw)
