"""
Banner-to-version extraction.

A pure mapping from ``(banner, service label)`` to an optional version
string.  Unmatched or empty banners yield ``None``; matches are cut to
:data:`MAX_VERSION_LENGTH` characters.
"""

from __future__ import annotations

import re
from typing import Optional

_SSH_REGEX = re.compile(r"SSH-[\d.]+-(.+)")
_GREETING_REGEX = re.compile(r"220[- ](.+)")
_SERVER_HEADER_REGEX = re.compile(r"Server:\s*(.+)", re.IGNORECASE)
_DOTTED_VERSION_REGEX = re.compile(r"(\d+\.\d+\.\d+)")
_REDIS_VERSION_REGEX = re.compile(r"redis_version:(\S+)")

_GREETING_SERVICES: frozenset[str] = frozenset({"FTP", "SMTP", "SMTP (Submission)"})

# Greeting lines are server-controlled and may run to the full banner size.
MAX_VERSION_LENGTH: int = 100


def extract_version(banner: Optional[str], service: str) -> Optional[str]:
    """Infer a software version from a service banner.

    Args:
        banner: Raw banner text, possibly ``None``.
        service: Service label from the static port table.

    Returns:
        The version string, or ``None`` when no rule matches.
    """
    version = _match_version(banner, service) if banner else None
    return version[:MAX_VERSION_LENGTH] if version else None


def _match_version(banner: str, service: str) -> Optional[str]:
    first_line = banner.split("\n")[0].strip()

    if service == "SSH" and first_line.startswith("SSH"):
        match = _SSH_REGEX.search(first_line)
        return match.group(1).strip() if match else first_line

    if service in _GREETING_SERVICES:
        match = _GREETING_REGEX.search(first_line)
        return match.group(1).strip() if match else None

    if "HTTP" in service:
        match = _SERVER_HEADER_REGEX.search(banner)
        return match.group(1).strip() if match else None

    if service == "MySQL":
        match = _DOTTED_VERSION_REGEX.search(banner)
        return f"MySQL {match.group(1)}" if match else None

    if service == "Redis":
        match = _REDIS_VERSION_REGEX.search(banner)
        return f"Redis {match.group(1)}" if match else None

    return None
