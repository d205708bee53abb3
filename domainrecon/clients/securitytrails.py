"""
Historical-intelligence collaborator (SecurityTrails API v1).

Each public method is one independent sub-query: a failure in one of them
yields an empty result for that sub-query only.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DNS_HISTORY_TYPES: tuple[str, ...] = ("a", "aaaa", "mx", "ns", "txt", "soa")

# Field carrying the record value, per history type.
_VALUE_KEYS: tuple[str, ...] = ("ip", "ipv6", "hostname", "nameserver", "value", "email")


def _history_value(entry: dict[str, Any]) -> str:
    for key in _VALUE_KEYS:
        if entry.get(key):
            return str(entry[key])
    return ""


def _join(values: Any) -> Optional[str]:
    if not values:
        return None
    if isinstance(values, str):
        return values
    return ", ".join(str(v) for v in values)


class SecurityTrailsClient:
    """Query domain history from SecurityTrails.

    Args:
        api_key: SecurityTrails API key; ``None`` makes every query empty.
        timeout: Request timeout in seconds.
    """

    BASE_URL: str = "https://api.securitytrails.com/v1"

    def __init__(self, api_key: Optional[str], timeout: float = 10.0) -> None:
        self.api_key = api_key
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def dns_history(self, domain: str) -> dict[str, list[dict[str, Any]]]:
        """Historical DNS values grouped by lower-case record type.

        Types with no data or a failed request are left out.
        """
        history: dict[str, list[dict[str, Any]]] = {}
        for rtype in DNS_HISTORY_TYPES:
            data = await self._get(f"/history/{domain}/dns/{rtype}")
            if not data:
                continue
            entries = self._flatten_records(data.get("records") or [])
            if entries:
                history[rtype] = entries
        return history

    async def whois_history(self, domain: str) -> list[dict[str, Any]]:
        data = await self._get(f"/history/{domain}/whois")
        if not data:
            return []

        result = data.get("result") or []
        items = result.get("items", []) if isinstance(result, dict) else result

        records: list[dict[str, Any]] = []
        for item in items:
            registrant = self._registrant(item.get("contacts"))
            records.append({
                "registrar": item.get("registrar") or item.get("registrarName"),
                "created": _stringify(item.get("created") or item.get("createdDate")),
                "expires": _stringify(item.get("expires") or item.get("expiresDate")),
                "updated": _stringify(item.get("updated") or item.get("updatedDate")),
                "name_servers": _join(item.get("nameservers") or item.get("nameServers")),
                "registrant_name": registrant.get("name"),
                "registrant_org": registrant.get("organization"),
            })
        return records

    async def subdomains(self, domain: str) -> list[str]:
        """Fully-qualified subdomain names known to SecurityTrails."""
        data = await self._get(f"/domain/{domain}/subdomains")
        if not data:
            return []
        return [
            f"{label}.{domain}"
            for label in data.get("subdomains") or []
            if label
        ]

    async def ip_history(self, domain: str) -> list[dict[str, Any]]:
        """IPv4 addresses the domain pointed to over time."""
        data = await self._get(f"/history/{domain}/dns/a")
        if not data:
            return []

        history: list[dict[str, Any]] = []
        for entry in self._flatten_records(data.get("records") or []):
            if entry["value"]:
                history.append({
                    "ip_address": entry["value"],
                    "first_seen": entry["first_seen"],
                    "last_seen": entry["last_seen"],
                })
        return history

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _get(self, endpoint: str) -> Optional[dict[str, Any]]:
        if not self.configured:
            return None

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            ) as client:
                response = await client.get(
                    f"{self.BASE_URL}{endpoint}",
                    headers={"APIKEY": self.api_key, "Accept": "application/json"},
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "SecurityTrails %s returned HTTP %d",
                endpoint,
                exc.response.status_code,
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("SecurityTrails %s failed: %s", endpoint, exc)
        return None

    @staticmethod
    def _flatten_records(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        entries: list[dict[str, Any]] = []
        for record in records:
            values = record.get("values")
            if not isinstance(values, list):
                values = [record]
            for value in values:
                entries.append({
                    "value": _history_value(value),
                    "first_seen": value.get("first_seen") or record.get("first_seen"),
                    "last_seen": value.get("last_seen") or record.get("last_seen"),
                })
        return entries

    @staticmethod
    def _registrant(contacts: Any) -> dict[str, Any]:
        if isinstance(contacts, dict):
            return contacts.get("registrant") or {}
        if isinstance(contacts, list):
            for contact in contacts:
                if contact.get("type") == "registrant":
                    return contact
        return {}


def _stringify(value: Any) -> Optional[str]:
    return None if value is None else str(value)
