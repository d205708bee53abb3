"""
Pipeline stages -- import all stages for auto-registration.

Importing this package causes every concrete stage class to be loaded
and, through the :func:`@ModuleRegistry.register <ModuleRegistry.register>`
decorator, registered in the central registry.  Downstream code (e.g. the
scan orchestrator) only needs to ``import domainrecon.modules`` to have the
full pipeline available.
"""

from domainrecon.modules.base import START_CHECKPOINT, BaseReconModule, ModuleResult, StageOutcome
from domainrecon.modules.registry import ModuleRegistry
from domainrecon.modules.whois_lookup import WhoisModule
from domainrecon.modules.dns_enum import DnsEnumModule
from domainrecon.modules.subdomains import SubdomainModule

# Active stages
from domainrecon.modules.portscan import PortScanModule
from domainrecon.modules.tech_detect import TechDetectModule
from domainrecon.modules.sslcert import SSLCertModule
from domainrecon.modules.headeraudit import HeaderAuditModule

from domainrecon.modules.historical import HistoricalModule

__all__: list[str] = [
    "START_CHECKPOINT",
    "BaseReconModule",
    "ModuleResult",
    "StageOutcome",
    "ModuleRegistry",
    "WhoisModule",
    "DnsEnumModule",
    "SubdomainModule",
    # Active stages
    "PortScanModule",
    "TechDetectModule",
    "SSLCertModule",
    "HeaderAuditModule",
    "HistoricalModule",
]
