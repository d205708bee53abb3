"""
Passive host-intelligence collaborator (Shodan host API).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HostIntel:
    """What Shodan knows about one address."""

    ip: str
    ports: list[int] = field(default_factory=list)
    hostnames: list[str] = field(default_factory=list)
    organization: Optional[str] = None
    isp: Optional[str] = None
    asn: Optional[str] = None
    os: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    vulns: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ip": self.ip,
            "ports": list(self.ports),
            "hostnames": list(self.hostnames),
            "organization": self.organization,
            "isp": self.isp,
            "asn": self.asn,
            "os": self.os,
            "country": self.country,
            "city": self.city,
            "vulns": list(self.vulns),
        }


class ShodanClient:
    """Look up host records in the Shodan database.

    Args:
        api_key: Shodan API key; ``None`` disables every lookup.
        timeout: Request timeout in seconds.
    """

    HOST_URL: str = "https://api.shodan.io/shodan/host/{ip}"

    def __init__(self, api_key: Optional[str], timeout: float = 10.0) -> None:
        self.api_key = api_key
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def host(self, ip: str) -> Optional[HostIntel]:
        """Return Shodan's record for *ip*.

        ``None`` when no key is configured, Shodan has no data (404), or the
        request fails.
        """
        if not self.configured:
            logger.debug("Shodan API key not configured; skipping %s", ip)
            return None

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            ) as client:
                response = await client.get(
                    self.HOST_URL.format(ip=ip),
                    params={"key": self.api_key},
                )
                if response.status_code == 404:
                    logger.info("Shodan has no information for %s", ip)
                    return None
                response.raise_for_status()
                data: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("Shodan returned HTTP %d for %s", exc.response.status_code, ip)
            return None
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Shodan lookup for %s failed: %s", ip, exc)
            return None

        vulns = data.get("vulns") or []
        if isinstance(vulns, dict):
            vulns = list(vulns)

        return HostIntel(
            ip=ip,
            ports=sorted({int(port) for port in data.get("ports") or []}),
            hostnames=list(data.get("hostnames") or []),
            organization=data.get("org") or None,
            isp=data.get("isp") or None,
            asn=data.get("asn") or None,
            os=data.get("os") or None,
            country=data.get("country_name") or None,
            city=data.get("city") or None,
            vulns=list(vulns),
        )
