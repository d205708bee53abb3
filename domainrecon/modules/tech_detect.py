"""
Technology fingerprinting stage.

Inspects the response headers, cookies and HTML of the target's front page
(HTTPS first, then HTTP) against signature patterns for web servers,
languages, frameworks, CMS platforms and CDNs.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Optional

from domainrecon.clients.web import WebFetcher, WebPage
from domainrecon.config import Settings
from domainrecon.modules.base import BaseReconModule, ModuleResult
from domainrecon.modules.registry import ModuleRegistry

logger = logging.getLogger(__name__)

_BODY_LIMIT: int = 200_000

# ---------------------------------------------------------------------------
# Signature database
# ---------------------------------------------------------------------------
# If a regex has a capture group, group(1) is used as the version string.

HEADER_SIGNATURES: list[tuple[str, str, str, str]] = [
    # (header_name, regex, tech_name, category)
    ("Server", r"nginx(?:/([\d.]+))?", "Nginx", "web_server"),
    ("Server", r"Apache(?:/([\d.]+))?", "Apache", "web_server"),
    ("Server", r"Microsoft-IIS/([\d.]+)", "IIS", "web_server"),
    ("Server", r"LiteSpeed(?:/([\d.]+))?", "LiteSpeed", "web_server"),
    ("Server", r"openresty/([\d.]+)", "OpenResty", "web_server"),
    ("Server", r"gunicorn/([\d.]+)", "Gunicorn", "web_server"),
    ("Server", r"Caddy", "Caddy", "web_server"),
    ("Server", r"cloudflare", "Cloudflare", "cdn"),
    ("Server", r"AmazonS3", "Amazon S3", "cdn"),
    ("X-Powered-By", r"PHP/([\d.]+)", "PHP", "language"),
    ("X-Powered-By", r"Express", "Express.js", "framework"),
    ("X-Powered-By", r"ASP\.NET", "ASP.NET", "framework"),
    ("X-Powered-By", r"Next\.js\s*([\d.]*)", "Next.js", "framework"),
    ("X-AspNet-Version", r"([\d.]+)", "ASP.NET", "framework"),
    ("X-Generator", r"Drupal\s*([\d.]*)", "Drupal", "cms"),
    ("X-Generator", r"WordPress\s*([\d.]*)", "WordPress", "cms"),
    ("X-Drupal-Cache", r".", "Drupal", "cms"),
    ("X-Varnish", r".", "Varnish", "cache"),
    ("Via", r"cloudfront", "CloudFront", "cdn"),
    ("CF-RAY", r".", "Cloudflare", "cdn"),
    ("X-Vercel-Id", r".", "Vercel", "hosting"),
]

COOKIE_SIGNATURES: list[tuple[str, str, str]] = [
    # (cookie_name_pattern, tech_name, category)
    (r"PHPSESSID", "PHP", "language"),
    (r"JSESSIONID", "Java", "language"),
    (r"csrftoken", "Django", "framework"),
    (r"laravel_session", "Laravel", "framework"),
    (r"_rails_session", "Ruby on Rails", "framework"),
    (r"connect\.sid", "Express.js", "framework"),
    (r"wordpress_", "WordPress", "cms"),
    (r"ASP\.NET_SessionId", "ASP.NET", "framework"),
]

BODY_SIGNATURES: list[tuple[str, str, str, int]] = [
    # (regex, tech_name, category, confidence)
    (r'name="generator"\s+content="WordPress\s*([\d.]*)"', "WordPress", "cms", 100),
    (r"/wp-content/|/wp-includes/", "WordPress", "cms", 90),
    (r'name="generator"\s+content="Joomla', "Joomla", "cms", 100),
    (r"Joomla", "Joomla", "cms", 90),
    (r'name="generator"\s+content="Drupal\s*([\d.]*)"', "Drupal", "cms", 100),
    (r"Drupal|sites/default/files", "Drupal", "cms", 90),
    (r"cdn\.shopify\.com", "Shopify", "ecommerce", 90),
    (r"__NEXT_DATA__|/_next/static/", "Next.js", "framework", 95),
    (r"__NUXT__|/_nuxt/", "Nuxt.js", "framework", 95),
    (r'ng-version="([\d.]+)"', "Angular", "framework", 95),
    (r"angular", "Angular", "framework", 80),
    (r"data-reactroot|react", "React", "framework", 80),
    (r"__VUE__|vue", "Vue.js", "framework", 80),
    (r"jquery(?:[.-]([\d.]+))?(?:\.min)?\.js", "jQuery", "javascript_library", 70),
    (r"bootstrap(?:\.min)?\.(?:css|js)", "Bootstrap", "css_framework", 70),
    (r"googletagmanager\.com", "Google Tag Manager", "analytics", 95),
]


def _version(match: re.Match[str]) -> Optional[str]:
    if match.lastindex and match.group(1):
        return match.group(1).rstrip(".")
    return None


def detect_technologies(page: WebPage) -> list[dict[str, Any]]:
    """Match *page* against every signature.

    Each technology is reported once, keeping its highest-confidence match.
    """
    techs: list[dict[str, Any]] = []

    for header_name, regex, tech_name, category in HEADER_SIGNATURES:
        value = page.header(header_name)
        if not value:
            continue
        match = re.search(regex, value, re.IGNORECASE)
        if match:
            techs.append({
                "name": tech_name,
                "version": _version(match),
                "category": category,
                "confidence": 100,
            })

    cookies = page.header("Set-Cookie") or ""
    if cookies:
        for pattern, tech_name, category in COOKIE_SIGNATURES:
            if re.search(pattern, cookies, re.IGNORECASE):
                techs.append({
                    "name": tech_name,
                    "version": None,
                    "category": category,
                    "confidence": 75,
                })

    body = page.text[:_BODY_LIMIT]
    for pattern, tech_name, category, confidence in BODY_SIGNATURES:
        match = re.search(pattern, body, re.IGNORECASE)
        if match:
            techs.append({
                "name": tech_name,
                "version": _version(match),
                "category": category,
                "confidence": confidence,
            })

    # Server software without a signature is recorded verbatim.
    server = page.header("Server")
    if server and not any(t["category"] in ("web_server", "cdn") for t in techs):
        name, _, version = server.partition("/")
        techs.append({
            "name": name.strip(),
            "version": version.split()[0] if version.strip() else None,
            "category": "web_server",
            "confidence": 100,
        })

    seen: dict[str, dict[str, Any]] = {}
    for tech in techs:
        existing = seen.setdefault(tech["name"], tech)
        if existing is tech:
            continue
        if tech["confidence"] > existing["confidence"]:
            tech["version"] = tech["version"] or existing["version"]
            seen[tech["name"]] = tech
        elif not existing["version"]:
            existing["version"] = tech["version"]
    return list(seen.values())


@ModuleRegistry.register
class TechDetectModule(BaseReconModule):
    """Technology fingerprinting of the target's front page."""

    name: str = "techdetect"
    description: str = "Technology Fingerprinting via HTTP Headers, Body & Cookie Analysis"
    order: int = 5
    checkpoint: int = 80

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fetcher: Optional[WebFetcher] = None,
    ) -> None:
        super().__init__(settings)
        self.fetcher = fetcher or WebFetcher(timeout=self.settings.HTTP_TIMEOUT)

    async def execute(self, target: str, context: dict[str, Any]) -> ModuleResult:
        """Fingerprint *target*.

        Returns:
            A :class:`ModuleResult` whose ``data["technologies"]`` list
            contains dicts with keys ``name``, ``version``, ``category`` and
            ``confidence``.
        """
        start: float = time.monotonic()

        page = await self.fetcher.fetch_first([f"https://{target}", f"http://{target}"])
        technologies = detect_technologies(page) if page is not None else []

        duration: float = time.monotonic() - start
        logger.info(
            "Detected %d technologies on %s in %.1fs",
            len(technologies),
            target,
            duration,
        )

        return ModuleResult(
            module_name=self.name,
            success=True,
            data={"technologies": technologies},
            duration_seconds=round(duration, 3),
        )
