"""
Hostname validation helpers.

Provides:
- ``validate_domain``   -- validates and normalises a scan target domain.
- ``is_valid_hostname`` -- RFC 1123 check for discovered host names.
"""

from __future__ import annotations

import re

from domainrecon.core.exceptions import InvalidDomainError

# ── Constants ────────────────────────────────────────────────────────────────

# RFC 1123 label: letters, digits and hyphens, starting and ending with a
# letter or digit (``3m.com`` is valid).
_HOST_LABEL_REGEX: re.Pattern[str] = re.compile(
    r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$"
)
# The top-level label is never all digits, which keeps IPv4 literals out.
_TLD_REGEX: re.Pattern[str] = re.compile(r"[a-z]")
_MAX_DOMAIN_LENGTH: int = 253


def _has_valid_labels(name: str) -> bool:
    labels = name.split(".")
    if len(labels) < 2:
        return False
    return all(_HOST_LABEL_REGEX.match(label) for label in labels)


# ── Domain Validation ────────────────────────────────────────────────────────

def validate_domain(domain: str) -> str:
    """Validate and normalise a domain name.

    The domain is stripped of whitespace, lowered, and trailing dots are
    removed.  It must then have at least two RFC 1123 labels and a
    top-level label that is not purely numeric.

    Args:
        domain: The raw domain string supplied by the caller.

    Returns:
        The cleaned, normalised domain string.

    Raises:
        InvalidDomainError: If the domain is empty, too long, or does not
            match the allowed pattern.
    """
    if not domain or not domain.strip():
        raise InvalidDomainError("Domain must not be empty.")

    cleaned: str = domain.strip().lower().rstrip(".")

    if len(cleaned) > _MAX_DOMAIN_LENGTH:
        raise InvalidDomainError(
            f"Domain exceeds maximum length of {_MAX_DOMAIN_LENGTH} characters."
        )

    if not _has_valid_labels(cleaned) or not _TLD_REGEX.search(cleaned.rsplit(".", 1)[-1]):
        raise InvalidDomainError(
            f"Invalid domain format: '{cleaned}'. "
            "A valid domain consists of labels separated by dots "
            "(e.g. 'example.com')."
        )

    return cleaned


def is_valid_hostname(name: str) -> bool:
    """Return ``True`` when *name* is a syntactically valid host name.

    Expects an already lower-cased name.  Rejects wildcards, e-mail
    addresses, embedded whitespace, empty labels and over-long names.
    """
    if not name or len(name) > _MAX_DOMAIN_LENGTH:
        return False
    if name.startswith("*") or "@" in name or any(ch.isspace() for ch in name):
        return False
    return _has_valid_labels(name)
