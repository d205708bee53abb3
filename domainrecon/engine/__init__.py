"""domainrecon engine -- subdomain merging, passive-first port discovery,
scan persistence and orchestration.

Only the dependency-free pieces are re-exported here; import
:mod:`domainrecon.engine.orchestrator` and
:mod:`domainrecon.engine.repository` directly.
"""

from domainrecon.engine.aggregator import SubdomainAggregator, SubdomainFinding, merge_subdomains
from domainrecon.engine.fallback import FallbackResult, HostIntelFallback

__all__ = [
    "SubdomainAggregator",
    "SubdomainFinding",
    "merge_subdomains",
    "FallbackResult",
    "HostIntelFallback",
]
