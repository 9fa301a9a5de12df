import re

from .vrp import VrpStyleParser
from ..models.device import Vendor


class H3CComwareParser(VrpStyleParser):
    """Parser for H3C Comware v5/v7 switches."""

    VENDOR = Vendor.H3C

    SVI_RE = re.compile(r'^Vlan-interface(\d+)$', re.IGNORECASE)
    AGGREGATE_PREFIX = "Bridge-Aggregation"
    MEMBER_RE = re.compile(r'^port\s+link-aggregation\s+group\s+(\d+)')
    DHCP_POOL_RE = re.compile(r'^dhcp\s+server\s+ip-pool\s+(\S+)')

    SECURITY_CHECKS = [
        ("SSH Enabled", lambda s: s.has_line(r'^ssh server enable$')),
        ("Telnet Disabled", lambda s: s.has_line(r'^undo telnet server enable$')),
        ("HTTP Server Disabled", lambda s: s.has_line(r'^undo ip http enable$')),
        ("Password Control Enabled", lambda s: s.has_line(r'^password-control enable$')),
        ("BPDU Protection", lambda s: s.has_line(r'^stp bpdu-protection$')),
        ("DHCP Snooping", lambda s: s.has_line(r'^dhcp snooping enable')),
        ("Port Security", lambda s: s.has_line(r'^port-security (enable|port-mode)')),
        ("ARP Detection", lambda s: s.has_line(r'^arp detection enable')),
    ]
    SECURITY_CHECKLIST = [
        "SSH Enabled",
        "Telnet Disabled",
        "HTTP Server Disabled",
        "Password Control Enabled",
        "BPDU Protection",
        "DHCP Snooping",
        "Port Security",
        "ARP Detection",
    ]
