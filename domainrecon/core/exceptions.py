"""
Exception hierarchy for domainrecon.

Transport failures inside stages never surface as exceptions; these types
cover the faults that are allowed to cross a stage boundary.
"""

from __future__ import annotations


class DomainReconError(Exception):
    """Base class for all domainrecon errors."""


class InvalidDomainError(DomainReconError, ValueError):
    """A submitted target domain failed validation."""


class ScanNotFoundError(DomainReconError, LookupError):
    """No scan record exists for the requested identifier."""

    def __init__(self, scan_id: object) -> None:
        super().__init__(f"Scan {scan_id} not found")
        self.scan_id = scan_id


class ScanStateError(DomainReconError):
    """An illegal scan status transition was attempted."""

    def __init__(self, current: object, requested: object) -> None:
        super().__init__(f"Cannot move scan from {current} to {requested}")
        self.current = current
        self.requested = requested
