"""
Web-fetch collaborator.

One GET per call with redirects followed and certificate verification
disabled, so misconfigured targets can still be fingerprinted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

import httpx

logger = logging.getLogger(__name__)

USER_AGENT: str = "Mozilla/5.0 (compatible; domainrecon/1.0)"


@dataclass(frozen=True)
class WebPage:
    """A fetched HTTP response.  Header names are lower-cased.

    ``url`` is the final URL after redirects; ``requested_url`` is the one
    that was asked for.
    """

    url: str
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    text: str = ""
    requested_url: str = ""

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())


class WebFetcher:
    """Fetch pages over HTTP(S).

    Args:
        timeout: Total request timeout in seconds.
    """

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout

    async def fetch(self, url: str) -> Optional[WebPage]:
        """GET *url*.  Returns ``None`` on any transport or protocol error."""
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                verify=False,  # noqa: S501
                headers={"User-Agent": USER_AGENT},
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            logger.debug("Fetching %s failed: %s", url, exc)
            return None

        return WebPage(
            url=str(response.url),
            status_code=response.status_code,
            headers={name.lower(): value for name, value in response.headers.items()},
            text=response.text,
            requested_url=url,
        )

    async def fetch_first(self, urls: Iterable[str]) -> Optional[WebPage]:
        """Return the first URL in *urls* that answers."""
        for url in urls:
            page = await self.fetch(url)
            if page is not None:
                return page
        return None
