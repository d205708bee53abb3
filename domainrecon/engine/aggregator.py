"""
Multi-source subdomain merge.

Candidates from independent sources (wordlist brute force, certificate
transparency, scraped finders, passive history) are normalised, validated
against the target suffix, deduplicated and sorted.  The aggregator never
checks liveness itself: a name is alive only when a resolved address was
attached through :meth:`SubdomainAggregator.annotate`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from domainrecon.core.security import is_valid_hostname


@dataclass(frozen=True)
class SubdomainFinding:
    """A discovered subdomain."""

    name: str
    ip_address: Optional[str] = None
    is_alive: bool = False
    source: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "ip_address": self.ip_address,
            "is_alive": self.is_alive,
            "source": self.source,
        }


def normalise(name: str) -> str:
    return name.strip().lower()


class SubdomainAggregator:
    """Collect subdomain candidates for one target domain.

    The first source that produces a name becomes its origin tag.

    Example::

        agg = SubdomainAggregator("example.com")
        agg.add("crtsh", ["WWW.example.com", "other.org"])
        agg.names()   # ["www.example.com"]
    """

    def __init__(self, target: str) -> None:
        self.target: str = normalise(target).rstrip(".")
        self._suffix: str = f".{self.target}"
        self._sources: dict[str, str] = {}
        self._addresses: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalise(name) in self._sources

    def accepts(self, name: str) -> bool:
        """Whether an already-normalised *name* is a valid subdomain of the target."""
        return name.endswith(self._suffix) and is_valid_hostname(name)

    def add(self, source: str, candidates: Iterable[str]) -> int:
        """Merge *candidates* from *source*; returns how many names were new."""
        added = 0
        for candidate in candidates:
            if not isinstance(candidate, str):
                continue
            name = normalise(candidate)
            if name in self._sources or not self.accepts(name):
                continue
            self._sources[name] = source
            added += 1
        return added

    def annotate(self, name: str, ip_address: str) -> bool:
        """Attach a resolved address to a known name.

        Returns ``False`` when *name* was never accepted.
        """
        name = normalise(name)
        if name not in self._sources:
            return False
        self._addresses[name] = ip_address
        return True

    def names(self) -> list[str]:
        return sorted(self._sources)

    def findings(self, exclude: Iterable[str] = ()) -> list[SubdomainFinding]:
        """Return findings sorted by name, skipping names in *exclude*."""
        excluded = {normalise(name) for name in exclude}
        results: list[SubdomainFinding] = []
        for name in self.names():
            if name in excluded:
                continue
            address = self._addresses.get(name)
            results.append(SubdomainFinding(
                name=name,
                ip_address=address,
                is_alive=address is not None,
                source=self._sources[name],
            ))
        return results


def merge_subdomains(target: str, *candidate_lists: Iterable[str]) -> list[str]:
    """Merge several candidate lists into one sorted, validated list."""
    aggregator = SubdomainAggregator(target)
    for candidates in candidate_lists:
        aggregator.add("merge", candidates)
    return aggregator.names()
