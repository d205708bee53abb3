"""
Archive-snapshot collaborator (Internet Archive Wayback Machine).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


def format_wayback_timestamp(timestamp: str) -> str:
    """Render ``YYYYMMDDhhmmss`` as ``YYYY-MM-DD hh:mm``.

    Shorter strings are returned unchanged.
    """
    if not timestamp or len(timestamp) < 14:
        return timestamp
    return (
        f"{timestamp[0:4]}-{timestamp[4:6]}-{timestamp[6:8]} "
        f"{timestamp[8:10]}:{timestamp[10:12]}"
    )


class WaybackClient:
    """List archived captures of a URL.

    Args:
        timeout: Request timeout in seconds.
    """

    CDX_URL: str = "https://web.archive.org/cdx/search/cdx"
    AVAILABLE_URL: str = "https://archive.org/wayback/available"

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout

    async def snapshots(self, url: str, limit: int = 100) -> list[dict[str, str]]:
        """Return up to *limit* successful (HTTP 200) captures of *url*."""
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            ) as client:
                response = await client.get(
                    self.CDX_URL,
                    params={
                        "url": url,
                        "output": "json",
                        "limit": str(limit),
                        "filter": "statuscode:200",
                    },
                )
                response.raise_for_status()
                rows: list[list[str]] = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.info("No Wayback snapshots for %s: %s", url, exc)
            return []

        if not isinstance(rows, list) or len(rows) <= 1:
            return []

        snapshots: list[dict[str, str]] = []
        # First row is the CDX header.
        for row in rows[1:limit + 1]:
            if not row or len(row) < 3:
                continue
            timestamp, original = row[1], row[2]
            snapshots.append({
                "timestamp": timestamp,
                "url": f"https://web.archive.org/web/{timestamp}/{original}",
                "status": (row[4] if len(row) > 4 and row[4] else "200"),
            })
        return snapshots

    async def latest(self, url: str) -> Optional[dict[str, str]]:
        """Return the capture closest to now, if the archive has one."""
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            ) as client:
                response = await client.get(self.AVAILABLE_URL, params={"url": url})
                response.raise_for_status()
                data: dict[str, Any] = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.info("Wayback availability lookup for %s failed: %s", url, exc)
            return None

        closest = (data.get("archived_snapshots") or {}).get("closest") or {}
        if not closest.get("available"):
            return None
        return {
            "timestamp": closest.get("timestamp", ""),
            "url": closest.get("url", ""),
            "status": closest.get("status", ""),
        }
