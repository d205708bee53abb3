"""
Collaborator clients.

Thin async adapters around the outside world: registration and name
lookups, web fetches, certificate reads and third-party intelligence APIs.
Each receives its configuration through the constructor.
"""

from domainrecon.clients.c99 import C99Client
from domainrecon.clients.certificate import CertificateInspector
from domainrecon.clients.crtsh import CrtshClient
from domainrecon.clients.resolver import NameResolver
from domainrecon.clients.securitytrails import SecurityTrailsClient
from domainrecon.clients.shodan import HostIntel, ShodanClient
from domainrecon.clients.wayback import WaybackClient, format_wayback_timestamp
from domainrecon.clients.web import WebFetcher, WebPage
from domainrecon.clients.whois import WhoisClient, WhoisData, parse_whois_text

__all__: list[str] = [
    "C99Client",
    "CertificateInspector",
    "CrtshClient",
    "HostIntel",
    "NameResolver",
    "SecurityTrailsClient",
    "ShodanClient",
    "WaybackClient",
    "WebFetcher",
    "WebPage",
    "WhoisClient",
    "WhoisData",
    "format_wayback_timestamp",
    "parse_whois_text",
]
