"""
Active probing primitives: TCP reachability, banner capture and version
extraction.
"""

from domainrecon.probing.banner import BannerReader, BannerSample
from domainrecon.probing.ports import PortFinding, PortProber
from domainrecon.probing.services import COMMON_PORTS, SERVICE_NAMES, service_name
from domainrecon.probing.version import extract_version

__all__: list[str] = [
    "BannerReader",
    "BannerSample",
    "COMMON_PORTS",
    "PortFinding",
    "PortProber",
    "SERVICE_NAMES",
    "extract_version",
    "service_name",
]
