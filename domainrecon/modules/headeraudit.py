"""
HTTP security header stage.

Fetches the target's front page (HTTPS, falling back to HTTP) and reports
missing security headers and server version disclosure.  This is a passive
check: one GET request, no payloads.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from domainrecon.clients.web import WebFetcher, WebPage
from domainrecon.config import Settings
from domainrecon.modules.base import BaseReconModule, ModuleResult
from domainrecon.modules.registry import ModuleRegistry

logger = logging.getLogger(__name__)

# Required headers: (header_name, title, severity, description, recommendation)
SECURITY_HEADERS: list[tuple[str, str, str, str, str]] = [
    (
        "Strict-Transport-Security",
        "Missing HSTS Header",
        "medium",
        "The Strict-Transport-Security header is not set, which could allow "
        "man-in-the-middle attacks.",
        "Add the Strict-Transport-Security header to enforce HTTPS connections.",
    ),
    (
        "X-Content-Type-Options",
        "Missing X-Content-Type-Options Header",
        "low",
        "The X-Content-Type-Options header is not set.",
        "Add 'X-Content-Type-Options: nosniff' to prevent MIME-sniffing attacks.",
    ),
    (
        "X-XSS-Protection",
        "Missing XSS Protection Header",
        "low",
        "The X-XSS-Protection header is not set.",
        "Add 'X-XSS-Protection: 1; mode=block' or rely on a Content-Security-Policy.",
    ),
]


def audit_headers(page: WebPage) -> list[dict[str, Any]]:
    """Return vulnerability dicts for the weaknesses visible in *page*.

    Findings point at the URL that was requested, not wherever redirects
    ended up.
    """
    findings: list[dict[str, Any]] = []
    affected_url: str = page.requested_url or page.url

    def _add(title: str, severity: str, description: str, recommendation: str) -> None:
        findings.append({
            "title": title,
            "severity": severity,
            "description": description,
            "recommendation": recommendation,
            "affected_url": affected_url,
        })

    for header_name, title, severity, description, recommendation in SECURITY_HEADERS:
        if not page.header(header_name):
            _add(title, severity, description, recommendation)

    if not page.header("X-Frame-Options") and not page.header("Content-Security-Policy"):
        _add(
            "Missing Clickjacking Protection",
            "medium",
            "Neither X-Frame-Options nor a CSP frame-ancestors directive is set.",
            "Add 'X-Frame-Options: DENY' or 'SAMEORIGIN' to prevent clickjacking attacks.",
        )

    server = page.header("Server")
    if server and "/" in server:
        _add(
            "Server Version Disclosure",
            "low",
            f"Server version is disclosed: {server}",
            "Configure the server to hide version information.",
        )

    return findings


@ModuleRegistry.register
class HeaderAuditModule(BaseReconModule):
    """HTTP security header analysis of the target's front page."""

    name: str = "headeraudit"
    description: str = "HTTP Security Header Analysis"
    order: int = 7
    checkpoint: int = 95

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fetcher: Optional[WebFetcher] = None,
    ) -> None:
        super().__init__(settings)
        self.fetcher = fetcher or WebFetcher(timeout=self.settings.HTTP_TIMEOUT)

    async def execute(self, target: str, context: dict[str, Any]) -> ModuleResult:
        """Check *target* for missing security headers.

        Returns:
            A :class:`ModuleResult` with ``data["vulnerabilities"]``.
        """
        start: float = time.monotonic()

        page = await self.fetcher.fetch_first([f"https://{target}", f"http://{target}"])
        if page is None:
            logger.info("%s did not answer over HTTP(S); no header audit", target)
            vulnerabilities: list[dict[str, Any]] = []
        else:
            vulnerabilities = audit_headers(page)

        duration: float = time.monotonic() - start
        logger.info(
            "Header audit of %s produced %d findings in %.1fs",
            target,
            len(vulnerabilities),
            duration,
        )

        return ModuleResult(
            module_name=self.name,
            success=True,
            data={"vulnerabilities": vulnerabilities},
            duration_seconds=round(duration, 3),
        )
