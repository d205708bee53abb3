"""
Certificate-transparency collaborator (crt.sh).

Returns host names that appear in publicly logged certificates for the
target.  Wildcard and e-mail entries are skipped.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class CrtshClient:
    """Search crt.sh for certificates matching ``%.{domain}``."""

    CRTSH_URL: str = "https://crt.sh/"

    def __init__(self, timeout: float = 30.0) -> None:
        self.timeout = timeout

    async def subdomains(self, domain: str) -> list[str]:
        domain = domain.lower()
        names: set[str] = set()

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(connect=10.0, read=self.timeout, write=10.0, pool=10.0),
                follow_redirects=True,
            ) as client:
                response = await client.get(
                    self.CRTSH_URL,
                    params={"q": f"%.{domain}", "output": "json"},
                )
                response.raise_for_status()
                entries: list[dict[str, Any]] = response.json()
        except httpx.TimeoutException as exc:
            logger.warning("crt.sh request timed out: %s", exc)
            return []
        except httpx.HTTPStatusError as exc:
            logger.warning("crt.sh returned HTTP %d", exc.response.status_code)
            return []
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("crt.sh query failed: %s", exc)
            return []

        if not isinstance(entries, list):
            logger.warning("crt.sh returned an unexpected payload for %s", domain)
            return []

        for entry in entries:
            for raw_name in str(entry.get("name_value", "")).split("\n"):
                name = raw_name.strip().lower()
                if not name or name.startswith("*") or "@" in name:
                    continue
                if name.endswith(f".{domain}"):
                    names.add(name)

        return sorted(names)
