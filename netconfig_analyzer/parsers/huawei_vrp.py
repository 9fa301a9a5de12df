import re

from .vrp import VrpStyleParser
from ..models.device import Vendor


class HuaweiVRPParser(VrpStyleParser):
    """Parser for Huawei VRP (S-series switches, AR routers)."""

    VENDOR = Vendor.HUAWEI

    SVI_RE = re.compile(r'^[Vv]lanif(\d+)$')
    AGGREGATE_PREFIX = "Eth-Trunk"
    MEMBER_RE = re.compile(r'^eth-trunk\s+(\d+)')
    DHCP_POOL_RE = re.compile(r'^ip\s+pool\s+(\S+)')

    SECURITY_CHECKS = [
        ("SSH Enabled", lambda s: s.has_line(r'^stelnet server enable$')),
        ("Telnet Disabled", lambda s: s.has_line(r'^undo telnet server enable$')),
        ("HTTP Server Disabled", lambda s: s.has_line(r'^undo http server enable$')),
        ("Password Policy Enabled",
         lambda s: s.has_line(r'^(password-policy enable|local-aaa-user password policy)')),
        ("BPDU Protection", lambda s: s.has_line(r'^stp bpdu-protection$')),
        ("DHCP Snooping", lambda s: s.has_line(r'^dhcp snooping enable')),
        ("Port Security", lambda s: s.any_port_line(r'^port-security enable')),
        ("ARP Anti-Attack", lambda s: s.has_line(r'^arp anti-attack\b')),
    ]
    SECURITY_CHECKLIST = [
        "SSH Enabled",
        "Telnet Disabled",
        "HTTP Server Disabled",
        "Password Policy Enabled",
        "BPDU Protection",
        "DHCP Snooping",
        "Port Security",
        "ARP Anti-Attack",
    ]
