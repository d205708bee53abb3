"""
Scraped subdomain source (subdomainfinder.c99.nl).

Parses the result table, and any ``var subdomains = [...]`` array embedded
in a script block, from the public finder page.
"""

from __future__ import annotations

import json
import logging
import re

import httpx
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

_SCRIPT_ARRAY_RE = re.compile(r"var\s+subdomains\s*=\s*(\[.*?\])", re.DOTALL)

_HEADERS: dict[str, str] = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Referer": "https://subdomainfinder.c99.nl/",
}


def parse_c99_page(html: str, domain: str) -> list[str]:
    """Extract subdomains of *domain* from a finder result page."""
    soup = BeautifulSoup(html, "html.parser")
    found: list[str] = []

    for row in soup.select("table tr"):
        cell = row.find("td")
        if cell is None:
            continue
        text = cell.get_text(strip=True)
        if text and "." in text and " " not in text:
            found.append(text)

    for script in soup.find_all("script"):
        match = _SCRIPT_ARRAY_RE.search(script.string or "")
        if not match:
            continue
        try:
            values = json.loads(match.group(1))
        except ValueError:
            continue
        if isinstance(values, list):
            found.extend(str(v) for v in values)

    domain = domain.lower()
    return sorted({name.lower() for name in found if domain in name.lower()})


class C99Client:
    """Scrape the c99.nl subdomain finder.

    Args:
        timeout: Request timeout in seconds; the finder is slow.
    """

    SCAN_URL: str = "https://subdomainfinder.c99.nl/scans.php"

    def __init__(self, timeout: float = 60.0) -> None:
        self.timeout = timeout

    async def subdomains(self, domain: str) -> list[str]:
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                max_redirects=5,
                headers=_HEADERS,
            ) as client:
                response = await client.get(
                    self.SCAN_URL,
                    params={"method": "subdomain", "domain": domain},
                )
                response.raise_for_status()
                html = response.text
        except httpx.HTTPError as exc:
            logger.warning("c99 subdomain finder failed for %s: %s", domain, exc)
            return []

        names = parse_c99_page(html, domain)
        logger.info("c99 returned %d subdomains for %s", len(names), domain)
        return names
