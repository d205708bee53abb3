"""
domainrecon ORM models package.

Re-exports every model class so that consumers can import directly from
``domainrecon.models`` instead of reaching into individual submodules::

    from domainrecon.models import Scan, ScanStatus, Subdomain
"""

from domainrecon.models.scan import ALLOWED_TRANSITIONS, Scan, ScanStatus
from domainrecon.models.subdomain import Subdomain
from domainrecon.models.port import Port
from domainrecon.models.dns_record import DnsRecord
from domainrecon.models.whois import WhoisRecord
from domainrecon.models.certificate import SslCertificate
from domainrecon.models.technology import Technology
from domainrecon.models.vulnerability import SEVERITIES, Vulnerability
from domainrecon.models.historical import HistoricalDns, HistoricalIp, HistoricalWhois
from domainrecon.models.wayback import WaybackSnapshot

# Every table that holds findings owned by a scan.
FINDING_MODELS: tuple[type, ...] = (
    Subdomain,
    Port,
    DnsRecord,
    WhoisRecord,
    SslCertificate,
    Technology,
    Vulnerability,
    HistoricalDns,
    HistoricalWhois,
    HistoricalIp,
    WaybackSnapshot,
)

__all__: list[str] = [
    "ALLOWED_TRANSITIONS",
    "Scan",
    "ScanStatus",
    "Subdomain",
    "Port",
    "DnsRecord",
    "WhoisRecord",
    "SslCertificate",
    "Technology",
    "SEVERITIES",
    "Vulnerability",
    "HistoricalDns",
    "HistoricalWhois",
    "HistoricalIp",
    "WaybackSnapshot",
    "FINDING_MODELS",
]
