"""
Tests for technology fingerprinting and the header audit.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from domainrecon.clients.web import WebPage
from domainrecon.config import Settings
from domainrecon.modules.headeraudit import HeaderAuditModule, audit_headers
from domainrecon.modules.tech_detect import TechDetectModule, detect_technologies


def _page(headers: dict[str, str], text: str = "") -> WebPage:
    return WebPage(
        url="https://example.com/",
        status_code=200,
        headers={k.lower(): v for k, v in headers.items()},
        text=text,
    )


def test_detect_from_headers_cookies_and_body() -> None:
    page = _page(
        {
            "Server": "nginx/1.24.0",
            "X-Powered-By": "PHP/8.2.1",
            "Set-Cookie": "PHPSESSID=abc; path=/",
        },
        '<meta name="generator" content="WordPress 6.4.2">'
        '<script src="/wp-includes/js/jquery/jquery.min.js"></script>',
    )

    techs = {t["name"]: t for t in detect_technologies(page)}

    assert techs["Nginx"]["version"] == "1.24.0"
    assert techs["Nginx"]["category"] == "web_server"
    assert techs["PHP"]["version"] == "8.2.1"
    assert techs["PHP"]["confidence"] == 100
    assert techs["WordPress"]["version"] == "6.4.2"
    assert techs["WordPress"]["confidence"] == 100
    assert "jQuery" in techs


def test_unknown_server_recorded_verbatim() -> None:
    techs = detect_technologies(_page({"Server": "Kestrel/7.0 extra"}))
    assert techs == [{"name": "Kestrel", "version": "7.0", "category": "web_server", "confidence": 100}]


def test_each_technology_reported_once() -> None:
    page = _page({"X-Powered-By": "Next.js 14.1"}, '<script id="__NEXT_DATA__"></script>')
    names = [t["name"] for t in detect_technologies(page)]
    assert names.count("Next.js") == 1


@pytest.mark.asyncio
async def test_techdetect_without_response(settings: Settings) -> None:
    fetcher = AsyncMock()
    fetcher.fetch_first.return_value = None

    result = await TechDetectModule(settings, fetcher=fetcher).execute("example.com", {})

    assert result.data == {"technologies": []}
    fetcher.fetch_first.assert_awaited_once_with(["https://example.com", "http://example.com"])


def test_audit_reports_missing_headers_and_version_disclosure() -> None:
    findings = audit_headers(_page({"Server": "Apache/2.4.58", "X-Content-Type-Options": "nosniff"}))
    titles = {f["title"]: f["severity"] for f in findings}

    assert titles == {
        "Missing HSTS Header": "medium",
        "Missing XSS Protection Header": "low",
        "Missing Clickjacking Protection": "medium",
        "Server Version Disclosure": "low",
    }
    assert all(f["affected_url"] == "https://example.com/" for f in findings)


def test_audit_clean_page() -> None:
    page = _page({
        "Strict-Transport-Security": "max-age=63072000",
        "X-Content-Type-Options": "nosniff",
        "X-XSS-Protection": "1; mode=block",
        "Content-Security-Policy": "frame-ancestors 'none'",
        "Server": "cloudflare",
    })
    assert audit_headers(page) == []


@pytest.mark.asyncio
async def test_headeraudit_stage(settings: Settings) -> None:
    fetcher = AsyncMock()
    fetcher.fetch_first.return_value = _page({})

    result = await HeaderAuditModule(settings, fetcher=fetcher).execute("example.com", {})

    assert len(result.data["vulnerabilities"]) == 4


def test_audit_reports_requested_url_not_redirect_target() -> None:
    page = WebPage(
        url="https://sso.example.com/login?continue=" + "x" * 600,
        status_code=200,
        headers={},
        requested_url="https://example.com",
    )

    findings = audit_headers(page)

    assert findings
    assert {f["affected_url"] for f in findings} == {"https://example.com"}
