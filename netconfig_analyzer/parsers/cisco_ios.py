import re
import logging
from typing import List, Optional, Union

from .base import LineParser, ParseState, vlan_id_range
from ..core.context import Context, ContextKind
from ..models.config import SviInfo, DhcpPoolInfo, ConnectionInfo, SnmpCommunity, OspfNetwork
from ..models.device import Vendor, AdminStatus, LinkType

logger = logging.getLogger(__name__)

# Standard numbered ACL ranges
_STANDARD_ACL_NUMBERS = (range(1, 100), range(1300, 2000))

# Global statements that open a block we keep but do not structure
_OPAQUE_BLOCKS = re.compile(
    r'^(ip access-list extended|ipv6 access-list|class-map|policy-map|crypto|'
    r'control-plane|redundancy|archive|key chain|track|event manager|'
    r'vrf definition|ip vrf|flow|spanning-tree mst configuration|call-home|'
    r'ip sla|object-group|parameter-map|template|router)\b'
)


def _vtp_mode(state: ParseState) -> Union[bool, str]:
    match = state.find_line(r'^vtp mode (\S+)')
    return f"VTP Mode: {match.group(1)}" if match else False


def _http_disabled(state: ParseState) -> bool:
    return (state.has_line(r'^no ip http server$')
            and state.has_line(r'^no ip http secure-server$'))


def _bpdu_guard(state: ParseState) -> bool:
    return (state.any_port_line(r'^spanning-tree bpduguard enable')
            or state.has_line(r'^spanning-tree portfast (edge )?bpduguard default'))


class CiscoParseState(ParseState):

    def __init__(self, raw_config: str):
        super().__init__(raw_config)
        self.banner_delimiter: Optional[str] = None


class CiscoIOSParser(LineParser):
    """Parser for Cisco IOS / IOS-XE running configurations."""

    VENDOR = Vendor.CISCO

    SEPARATOR_RE = re.compile(r'^(!.*|end)$')
    TOP_LEVEL_RE = re.compile(
        r'^(interface|vlan|router|line|hostname|version|banner|snmp-server|aaa|'
        r'username|service|vtp|ntp|enable|boot|switch\s+\d|access-list|crypto|'
        r'clock|errdisable|monitor|control-plane|license|archive|redundancy|'
        r'class-map|policy-map|key|tacacs|radius|tacacs-server|radius-server|'
        r'cdp\s+run|lldp\s+run|mac\s+address-table|udld\s+(enable|aggressive)|'
        r'logging\s+(host|buffered|console|monitor|trap|facility|source-interface|on|\d+)|'
        r'port-channel\s+load-balance|ipv6\s+(route|unicast-routing)|'
        r'spanning-tree\s+(mode|extend|vlan|loopguard|portfast\s+(default|edge|bpduguard))|'
        r'ip\s+(route|default-gateway|access-list|domain|domain-name|name-server|'
        r'http|ssh|routing|forward-protocol|classless|cef|scp|tftp|ftp|'
        r'arp\s+inspection\s+vlan|dhcp\s+(pool|excluded-address|'
        r'snooping\s+(vlan|information|database|verify)|snooping$))|'
        r'no\s+(ip\s+(http|domain|source-route|routing|cef|ftp|bootp|finger|'
        r'gratuitous-arps)|service|cdp\s+run|snmp-server|aaa|vtp))\b'
    )

    SECURITY_CHECKS = [
        ("Password Encryption", lambda s: s.has_line(r'^service password-encryption$')),
        ("VTP Mode", _vtp_mode),
        ("SSH Enabled", lambda s: s.has_line(r'^ip ssh\b')),
        ("HTTP/HTTPS Server Disabled", _http_disabled),
        ("Port Security on Access Ports", lambda s: s.any_port_line(r'^switchport port-security')),
        ("BPDU Guard", _bpdu_guard),
        ("DHCP Snooping", lambda s: s.has_line(r'^ip dhcp snooping(\s+vlan\b.*)?$')),
        ("Dynamic ARP Inspection", lambda s: s.has_line(r'^ip arp inspection vlan\b')),
        ("AAA Authentication", lambda s: s.has_line(r'^aaa new-model$')),
    ]
    SECURITY_CHECKLIST = [
        "Password Encryption",
        "VTP Mode: off",
        "SSH Enabled",
        "HTTP/HTTPS Server Disabled",
        "Port Security on Access Ports",
        "BPDU Guard",
        "DHCP Snooping",
        "Dynamic ARP Inspection",
        "AAA Authentication",
    ]

    def create_state(self, raw_config: str) -> CiscoParseState:
        return CiscoParseState(raw_config)

    def skip_line(self, state: CiscoParseState, line: str) -> bool:
        """Banner bodies are free text and never parsed."""
        if state.banner_delimiter:
            if state.banner_delimiter in line:
                state.banner_delimiter = None
            return True
        if not line:
            return True

        match = re.match(r'^banner\s+\S+\s+(\^C|\S)(.*)$', line)
        if match:
            self.close_all(state)
            delimiter, rest = match.groups()
            if delimiter not in rest:
                state.banner_delimiter = delimiter
            return True
        return False

    def handle_global(self, state: CiscoParseState, line: str, indent: int) -> None:
        data = state.data

        if re.match(r'^hostname\s+(\S+)', line):
            data.hostname = re.match(r'^hostname\s+(\S+)', line).group(1)
        elif re.match(r'^version\s+(\S+)', line):
            data.os_version = re.match(r'^version\s+(\S+)', line).group(1)
        elif re.match(r'^Cisco IOS.*Version\s+([^\s,]+)', line):
            if not data.os_version:
                data.os_version = re.match(r'^Cisco IOS.*Version\s+([^\s,]+)', line).group(1)
        elif re.match(r'^switch\s+\d+\s+provision\s+(\S+)', line):
            data.model = re.match(r'^switch\s+\d+\s+provision\s+(\S+)', line).group(1)
        elif re.match(r'^[Mm]odel [Nn]umber\s*:\s*(\S+)', line):
            data.model = re.match(r'^[Mm]odel [Nn]umber\s*:\s*(\S+)', line).group(1)
        elif re.match(r'^[Cc]isco\s+(\S+)\s+.*processor', line):
            if not data.model:
                data.model = re.match(r'^[Cc]isco\s+(\S+)', line).group(1)
        elif re.match(r'^vlan\s+[\d,\-\s]+$', line):
            self._start_vlan(state, line, indent)
        elif re.match(r'^interface\s+(.+)$', line):
            self._start_interface(state, line, indent)
        elif re.match(r'^router\s+ospf\s+(\d+)', line):
            self._start_ospf(state, line, indent)
        elif re.match(r'^snmp-server\s+(.+)', line):
            self._snmp_server(state, line)
        elif re.match(r'^ip\s+access-list\s+standard\s+(\S+)', line):
            name = re.match(r'^ip\s+access-list\s+standard\s+(\S+)', line).group(1)
            state.stack.push(ContextKind.ACL, name, self.get_acl(state, name), indent)
        elif re.match(r'^access-list\s+(\d+)\s+((?:permit|deny|remark)\b.*)$', line):
            number, rule = re.match(r'^access-list\s+(\d+)\s+(.+)$', line).groups()
            if any(int(number) in numbers for numbers in _STANDARD_ACL_NUMBERS):
                self.get_acl(state, number).rules.append(rule)
        elif re.match(r'^ip\s+dhcp\s+pool\s+(\S+)', line):
            pool = DhcpPoolInfo(name=re.match(r'^ip\s+dhcp\s+pool\s+(\S+)', line).group(1),
                                config=[line])
            data.dhcp_pools.append(pool)
            state.stack.push(ContextKind.DHCP_POOL, pool.name, pool, indent)
        elif re.match(r'^aaa\s+', line):
            self._aaa(state, line, indent)
        elif re.match(r'^(tacacs|radius)\s+server\s+(\S+)', line):
            kind, name = re.match(r'^(tacacs|radius)\s+server\s+(\S+)', line).groups()
            data.aaa.details.append(f"{'TACACS+' if kind == 'tacacs' else 'RADIUS'} server: {name}")
            state.stack.push(ContextKind.AAA, name, data.aaa, indent)
        elif re.match(r'^(tacacs-server|radius-server)\s+host\s+(\S+)', line):
            kind, host = re.match(r'^(tacacs-server|radius-server)\s+host\s+(\S+)', line).groups()
            data.aaa.details.append(f"{'TACACS+' if kind == 'tacacs-server' else 'RADIUS'} host: {host}")
        elif re.match(r'^username\s+(\S+)', line):
            name = re.match(r'^username\s+(\S+)', line).group(1)
            privilege = re.search(r'\bprivilege\s+(\d+)', line)
            self.add_username(state, name, line, int(privilege.group(1)) if privilege else None)
        elif re.match(r'^line\s+(con|console|vty|aux)\s+(\d+(?:\s+\d+)?)', line):
            kind, span = re.match(r'^line\s+(con|console|vty|aux)\s+(\d+(?:\s+\d+)?)', line).groups()
            connection = ConnectionInfo(type='con' if kind == 'console' else kind,
                                        range=span, config=[line])
            data.connections.append(connection)
            state.stack.push(ContextKind.LINE, f"{kind} {span}", connection, indent)
        elif re.match(r'^ip\s+default-gateway\s+(\S+)', line):
            data.routing.default_gateway = re.match(r'^ip\s+default-gateway\s+(\S+)', line).group(1)
        elif re.match(r'^ip\s+route\s+(?:vrf\s+\S+\s+)?(\S+)\s+(\S+)\s+(\S+)', line):
            network, mask, next_hop = re.match(
                r'^ip\s+route\s+(?:vrf\s+\S+\s+)?(\S+)\s+(\S+)\s+(\S+)', line).groups()
            self.add_static_route(state, network, mask, next_hop)
        elif re.match(r'^ip\s+name-server\s+(.+)', line):
            servers = re.match(r'^ip\s+name-server\s+(.+)', line).group(1).strip()
            data.other.dns_servers = f"{data.other.dns_servers} {servers}".strip()
        elif re.match(r'^ip\s+domain[\s-]name\s+(\S+)', line):
            data.other.domain = re.match(r'^ip\s+domain[\s-]name\s+(\S+)', line).group(1)
        elif _OPAQUE_BLOCKS.match(line):
            state.stack.push(ContextKind.BLOCK, line, indent=indent)

    def handle_block(self, state: CiscoParseState, context: Context, line: str,
                     indent: int) -> None:
        if context.kind == ContextKind.INTERFACE:
            self._interface_line(state, context, line)
        elif context.kind == ContextKind.SVI:
            self._svi_line(state, context, line)
        elif context.kind == ContextKind.VLAN:
            for vlan_id in context.extra["ids"]:
                vlan = state.vlans[vlan_id]
                vlan.raw_config.append(line)
                if re.match(r'^name\s+(.+)', line):
                    vlan.name = re.match(r'^name\s+(.+)', line).group(1).strip()
        elif context.kind == ContextKind.OSPF:
            self._ospf_line(state, context, line)
        elif context.kind == ContextKind.ACL:
            if re.match(r'^(\d+\s+)?(permit|deny|remark)\b', line):
                context.record.rules.append(line)
            else:
                context.record.details.append(line)
        elif context.kind == ContextKind.DHCP_POOL:
            self._dhcp_line(context.record, line)
        elif context.kind == ContextKind.AAA:
            state.data.aaa.details.append(line)
        elif context.kind == ContextKind.LINE:
            connection = context.record
            connection.config.append(line)
            if re.match(r'^description\s+(.+)', line):
                connection.description = re.match(r'^description\s+(.+)', line).group(1)
            elif line == 'login local' and connection not in state.local_login_lines:
                state.local_login_lines.append(connection)

    # Block openers

    def _start_vlan(self, state: CiscoParseState, line: str, indent: int) -> None:
        ids = self._expand_vlan_list(re.match(r'^vlan\s+(.+)$', line).group(1))
        for vlan_id in ids:
            self.add_vlan(state, vlan_id, line=line)
        if ids:
            context = state.stack.push(ContextKind.VLAN, ",".join(ids), indent=indent)
            context.extra["ids"] = ids

    @staticmethod
    def _expand_vlan_list(text: str) -> List[str]:
        """Expand '10,20-22' into ['10', '20', '21', '22']."""
        ids: List[str] = []
        for part in re.split(r'\s*,\s*', text.strip()):
            bounds = re.match(r'^(\d+)\s*-\s*(\d+)$', part)
            if bounds:
                start, end = int(bounds.group(1)), int(bounds.group(2))
                ids.extend(vlan_id_range(start, end))
            elif part.isdigit():
                ids.extend(vlan_id_range(int(part), int(part)))
            else:
                logger.debug("Skipping malformed VLAN list entry %r", part)
        return ids

    def _start_interface(self, state: CiscoParseState, line: str, indent: int) -> None:
        name = re.sub(r'\s+', '', re.match(r'^interface\s+(.+)$', line).group(1))
        svi_match = re.match(r'^[Vv]lan(\d+)$', name)
        if svi_match:
            vlan_id = svi_match.group(1)
            svi = SviInfo(svi=f"Vlan{vlan_id}", vlan_id=vlan_id, raw_config=[line])
            state.data.svis.append(svi)
            state.stack.push(ContextKind.SVI, svi.svi, svi, indent)
            return

        port = self.add_port(state, name, line)
        if name.lower().startswith('port-channel'):
            self.register_port_channel(state, name)
        state.stack.push(ContextKind.INTERFACE, name, port, indent)

    def _start_ospf(self, state: CiscoParseState, line: str, indent: int) -> None:
        ospf = state.data.ospf
        process_id = re.match(r'^router\s+ospf\s+(\d+)', line).group(1)
        ospf.status = "Configured"
        ospf.raw_config.append(line)
        if ospf.process_id is None:
            ospf.process_id = process_id
        else:
            ospf.details.append(f"Additional process {process_id}")
        state.stack.push(ContextKind.OSPF, process_id, ospf, indent)

    def _snmp_server(self, state: CiscoParseState, line: str) -> None:
        snmp = state.data.snmp
        rest = re.match(r'^snmp-server\s+(.+)', line).group(1)
        snmp.status = "Configured"
        snmp.details.append(rest)

        tokens = rest.split()
        if tokens[0] != 'community' or len(tokens) < 2:
            return
        community = SnmpCommunity(name=tokens[1])
        remaining = tokens[2:]
        while remaining:
            token = remaining.pop(0)
            if token in ('view', 'ipv6') and remaining:
                remaining.pop(0)
            elif token.upper() in ('RO', 'RW'):
                community.access = token.upper()
            else:
                community.acl = token
        snmp.communities.append(community)
        self.reference_snmp_acl(state, community.acl)

    def _aaa(self, state: CiscoParseState, line: str, indent: int) -> None:
        aaa = state.data.aaa
        aaa.status = "Configured"
        if line == 'aaa new-model':
            aaa.details.append("AAA Enabled")
            return

        match = re.match(r'^aaa\s+(authentication|authorization|accounting)\s+(.+)', line)
        if match:
            aaa.details.append(f"{match.group(1).capitalize()}: {match.group(2)}")
            return

        match = re.match(r'^aaa\s+group\s+server\s+(\S+)\s+(\S+)', line)
        if match:
            aaa.details.append(f"Server group: {match.group(1)} {match.group(2)}")
            state.stack.push(ContextKind.AAA, match.group(2), aaa, indent)
            return
        aaa.details.append(line)

    # Block bodies

    def _interface_line(self, state: CiscoParseState, context: Context, line: str) -> None:
        port = context.record
        port.config.append(line)

        if re.match(r'^description\s+(.+)', line):
            self.set_port_description(state, port, re.match(r'^description\s+(.+)', line).group(1))
        elif line == 'shutdown':
            port.status = AdminStatus.DISABLED
        elif line == 'no shutdown':
            port.status = AdminStatus.ENABLED
        elif re.match(r'^switchport\s+mode\s+(\S+)', line):
            port.type = LinkType.from_mode(re.match(r'^switchport\s+mode\s+(\S+)', line).group(1))
        elif line == 'no switchport':
            port.type = LinkType.ROUTED
        elif re.match(r'^channel-group\s+(\d+)', line):
            match = re.match(r'^channel-group\s+(\d+)(?:\s+mode\s+(\S+))?', line)
            aggregate = f"Port-channel{match.group(1)}"
            label = f"{aggregate} ({match.group(2)})" if match.group(2) else aggregate
            self.add_member(state, port, aggregate, label)
        elif re.match(r'^ip\s+address\s+(\d\S*)\s+(\S+)', line):
            ip, mask = re.match(r'^ip\s+address\s+(\d\S*)\s+(\S+)', line).groups()
            context.extra.setdefault("addresses", []).append((ip, mask))

    def _svi_line(self, state: CiscoParseState, context: Context, line: str) -> None:
        svi = context.record
        svi.raw_config.append(line)

        address = re.match(r'^ip\s+address\s+(\d\S*)\s+(\S+)(\s+secondary)?', line)
        if address:
            ip, mask, secondary = address.groups()
            if secondary:
                self._add_info(svi, f"Secondary: {ip} {mask}")
            else:
                svi.ip_address, svi.subnet_mask = ip, mask
            context.extra.setdefault("addresses", []).append((ip, mask))
        elif line == 'ip address dhcp':
            svi.ip_address = "dhcp"
        elif re.match(r'^ip\s+helper-address\s+(\S+)', line):
            helper = re.match(r'^ip\s+helper-address\s+(\S+)', line).group(1)
            svi.ip_helper_address = helper if svi.ip_helper_address == "N/A" \
                else f"{svi.ip_helper_address}, {helper}"
        elif line == 'shutdown':
            svi.status = AdminStatus.DISABLED
            self._add_info(svi, "shutdown")
        elif line == 'no shutdown':
            svi.status = AdminStatus.ENABLED
        elif re.match(r'^description\s+(.+)', line):
            description = re.match(r'^description\s+(.+)', line).group(1)
            self._add_info(svi, f"Description: {description}")

    @staticmethod
    def _add_info(svi: SviInfo, text: str) -> None:
        svi.additional_info = f"{svi.additional_info}, {text}" if svi.additional_info else text

    def _ospf_line(self, state: CiscoParseState, context: Context, line: str) -> None:
        ospf = state.data.ospf
        ospf.raw_config.append(line)
        primary = context.name == ospf.process_id

        router_id = re.match(r'^router-id\s+(\S+)', line)
        network = re.match(r'^network\s+(\S+)\s+(\S+)\s+area\s+(\S+)', line)
        passive = re.match(r'^passive-interface\s+(\S+)$', line)

        if router_id and primary:
            ospf.router_id = router_id.group(1)
        elif network:
            network_id, wildcard, area = network.groups()
            ospf.networks.append(OspfNetwork(network=network_id, wildcard=wildcard, area=area))
        elif passive and passive.group(1) != 'default':
            ospf.passive_interfaces.append(passive.group(1))
        else:
            ospf.details.append(line if primary else f"[{context.name}] {line}")

    @staticmethod
    def _dhcp_line(pool: DhcpPoolInfo, line: str) -> None:
        pool.config.append(line)
        if re.match(r'^network\s+(\S+)(?:\s+(\S+))?', line):
            pool.network, pool.subnet_mask = re.match(r'^network\s+(\S+)(?:\s+(\S+))?', line).groups()
        elif re.match(r'^default-router\s+(\S+)', line):
            pool.default_router = re.match(r'^default-router\s+(\S+)', line).group(1)
        elif re.match(r'^dns-server\s+(.+)', line):
            pool.dns_servers.extend(re.match(r'^dns-server\s+(.+)', line).group(1).split())
