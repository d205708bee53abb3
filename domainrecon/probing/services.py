"""
Static port-to-service table.

Built once at import time and shared by the prober, the banner reader and
the passive host-intelligence path.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

SERVICE_NAMES: Mapping[int, str] = MappingProxyType({
    21: "FTP",
    22: "SSH",
    23: "Telnet",
    25: "SMTP",
    53: "DNS",
    80: "HTTP",
    110: "POP3",
    143: "IMAP",
    443: "HTTPS",
    465: "SMTPS",
    587: "SMTP (Submission)",
    993: "IMAPS",
    995: "POP3S",
    1433: "MSSQL",
    3306: "MySQL",
    3389: "RDP",
    5432: "PostgreSQL",
    5900: "VNC",
    6379: "Redis",
    8000: "HTTP-Alt",
    8080: "HTTP-Proxy",
    8443: "HTTPS-Alt",
    8888: "HTTP-Alt",
    9000: "SonarQube",
    27017: "MongoDB",
})

# Candidate ports for active probing, in ascending order.
COMMON_PORTS: tuple[int, ...] = tuple(sorted(SERVICE_NAMES))

UNKNOWN_SERVICE: str = "Unknown"


def service_name(port: int) -> str:
    """Return the service label for *port*, or ``"Unknown"``."""
    return SERVICE_NAMES.get(port, UNKNOWN_SERVICE)
