import re
import logging
from typing import Dict, List, Set, Tuple

from .base import BaseParser, ParseState
from ..core.context import Context, ContextKind
from ..models.config import (
    SviInfo, ConnectionInfo, SnmpCommunity, DhcpPoolInfo, OspfNetwork,
)
from ..models.device import Vendor, AdminStatus, LinkType

logger = logging.getLogger(__name__)

# Logical containers whose units are VLAN-bound L3 interfaces
L3_CONTAINERS = ('irb', 'vlan')

_ANNOTATION_RE = re.compile(r'^(?:inactive|protect|replace):\s*')
_TRAILING_COMMENT_RE = re.compile(r'\s*##.*$')


class JuniperParseState(ParseState):

    def __init__(self, raw_config: str):
        super().__init__(raw_config)
        # Flattened "path ... statement" strings for the security table
        self.flat: List[str] = []
        self.in_comment = False
        self.l3_interfaces: Dict[str, str] = {}   # irb.10 -> vlan name
        self.vlan_ids: Dict[str, str] = {}        # vlan name -> vlan-id
        self.svis_by_name: Dict[str, SviInfo] = {}
        self.pending_svis: List[Tuple[SviInfo, str, str]] = []
        self.disabled_units: Set[str] = set()

    def has_path(self, pattern: str) -> bool:
        regex = re.compile(pattern)
        return any(regex.search(statement) for statement in self.flat)


def _services_without(service: str):
    def check(state: JuniperParseState) -> bool:
        return (state.has_path(r'^system services\b')
                and not state.has_path(rf'^system services {service}\b'))
    return check


class JuniperJunosParser(BaseParser):
    """Parser for Junos hierarchical (curly-brace) configurations."""

    VENDOR = Vendor.JUNIPER

    SECURITY_CHECKS = [
        ("SSH Enabled", lambda s: s.has_path(r'^system services ssh\b')),
        ("Root SSH Login Denied", lambda s: s.has_path(r'^system services ssh root-login deny\b')),
        ("Telnet Disabled", _services_without('telnet')),
        ("HTTP Web Management Disabled", _services_without(r'web-management http\b')),
        ("BPDU Protection", lambda s: s.has_path(r'\bbpdu-block')),
        ("DHCP Snooping", lambda s: s.has_path(r'\b(examine-dhcp|dhcp-security)\b')),
        ("Dynamic ARP Inspection", lambda s: s.has_path(r'\barp-inspection\b')),
    ]
    SECURITY_CHECKLIST = [
        "SSH Enabled",
        "Root SSH Login Denied",
        "Telnet Disabled",
        "HTTP Web Management Disabled",
        "BPDU Protection",
        "DHCP Snooping",
        "Dynamic ARP Inspection",
    ]

    def create_state(self, raw_config: str) -> JuniperParseState:
        return JuniperParseState(raw_config)

    def parse_lines(self, state: JuniperParseState) -> None:
        """
        Track the hierarchy by braces: '{' opens a block, '}' closes the
        innermost one and ';' terminates a statement.
        """
        for raw in state.lines:
            line = self._clean(state, raw)
            if not line:
                continue

            banner = re.match(r'^(Model|Junos):\s*(\S+)', line)
            if banner:
                if banner.group(1) == 'Model':
                    state.data.model = banner.group(2)
                else:
                    state.data.os_version = banner.group(2)
            elif line.endswith('{'):
                self._open_block(state, line[:-1].strip(), line)
            elif line.startswith('}'):
                context = state.stack.current
                interface = state.stack.find(ContextKind.INTERFACE)
                if interface is not None and interface is not context:
                    interface.record.config.append(line)
                self.pop_context(state)
            elif line.endswith(';'):
                self._statement(state, line[:-1].strip(), line)
            else:
                logger.debug("Skipping unrecognized Junos line %r", line)

    @staticmethod
    def _clean(state: JuniperParseState, raw: str) -> str:
        line = raw.strip()
        if state.in_comment:
            if '*/' in line:
                state.in_comment = False
            return ''
        if line.startswith('/*'):
            state.in_comment = '*/' not in line
            return ''
        if line.startswith('#'):
            return ''
        line = _TRAILING_COMMENT_RE.sub('', line)
        return _ANNOTATION_RE.sub('', line)

    def finalize(self, state: JuniperParseState) -> None:
        self.close_all(state)

        # l3-interface bindings may appear before or after the interfaces
        for svi in state.data.svis:
            vlan_name = state.l3_interfaces.get(svi.svi)
            if vlan_name:
                svi.vlan_id = state.vlan_ids.get(vlan_name, svi.vlan_id)
                svi.additional_info = f"VLAN: {vlan_name}" if not svi.additional_info \
                    else f"VLAN: {vlan_name}, {svi.additional_info}"
            if svi.svi in state.disabled_units:
                svi.status = AdminStatus.DISABLED
        for svi, ip, prefix in state.pending_svis:
            self.add_ip_range(state, svi.vlan_id, svi.svi, ip, prefix, svi.status)

        super().finalize(state)

    def close_context(self, state: JuniperParseState, context: Context) -> None:
        if context.kind == ContextKind.VLAN:
            vlan_id = context.extra.get("id")
            if vlan_id is None:
                logger.debug("VLAN %s has no vlan-id, skipping", context.name)
                return
            vlan = self.add_vlan(state, vlan_id, name=context.name)
            vlan.raw_config.extend(context.lines)
            state.vlan_ids[context.name] = vlan_id
            return
        super().close_context(state, context)

    # Blocks

    def _open_block(self, state: JuniperParseState, name: str, line: str) -> None:
        data = state.data
        path = state.stack.path()
        full = path + [name]
        state.flat.append(" ".join(full))

        interface = state.stack.find(ContextKind.INTERFACE)
        if interface is not None:
            interface.record.config.append(line)
        service = state.stack.find(ContextKind.LINE)
        if service is not None:
            service.record.config.append(line)
        if full[:2] == ['protocols', 'ospf']:
            data.ospf.raw_config.append(line)

        kind, record = ContextKind.BLOCK, None
        if not name:
            logger.debug("Unnamed block under %r", " ".join(path))
        elif len(full) == 2 and full[0] == 'interfaces' \
                and name not in L3_CONTAINERS and not name.startswith('interface-range'):
            record = self.add_port(state, name, line)
            kind = ContextKind.INTERFACE
            if re.match(r'^ae\d+$', name):
                self.register_port_channel(state, name)
        elif len(full) == 2 and full[0] == 'vlans':
            kind = ContextKind.VLAN
        elif full == ['protocols', 'ospf']:
            data.ospf.status = "Configured"
            kind = ContextKind.OSPF
        elif len(full) == 3 and full[:2] == ['protocols', 'ospf'] and name.startswith('area '):
            kind = ContextKind.OSPF_AREA
        elif len(full) == 4 and full[:2] == ['protocols', 'ospf'] \
                and full[2].startswith('area ') and name.startswith('interface '):
            data.ospf.networks.append(OspfNetwork(
                network=name.split()[1], wildcard="N/A", area=full[2].split()[1]))
        elif full == ['system', 'services']:
            kind = ContextKind.SERVICES
        elif len(full) == 3 and full[:2] == ['system', 'services']:
            record = self._add_service(state, name, line)
            kind = ContextKind.LINE
        elif len(full) == 3 and full[:2] == ['system', 'login'] and name.startswith('user '):
            record = self.add_username(state, name.split()[1], line)
            kind = ContextKind.LOCAL_USER
        elif len(full) == 3 and full[:2] in (['system', 'radius-server'], ['system', 'tacplus-server']):
            label = "RADIUS" if full[1] == 'radius-server' else "TACACS+"
            data.aaa.status = "Configured"
            data.aaa.details.append(f"{label} server: {name}")
        elif full == ['snmp']:
            data.snmp.status = "Configured"
            kind = ContextKind.SNMP
        elif len(full) == 2 and full[0] == 'snmp' and name.startswith('community '):
            record = SnmpCommunity(name=name.split(None, 1)[1].replace('"', ''))
            data.snmp.communities.append(record)
            kind = ContextKind.SNMP
        elif len(full) == 2 and full[0] == 'snmp' and name.startswith('client-list '):
            acl_name = name.split(None, 1)[1]
            record = self.get_acl(state, acl_name)
            self.reference_snmp_acl(state, acl_name)
            kind = ContextKind.ACL
        elif len(full) == 3 and full[:2] == ['access', 'address-assignment'] and name.startswith('pool '):
            record = DhcpPoolInfo(name=name.split()[1], config=[line])
            data.dhcp_pools.append(record)
            kind = ContextKind.DHCP_POOL
        elif name.startswith('address ') and 'family inet' in path:
            self._address(state, path, name.split()[1])

        context = state.stack.push(kind, name, record)
        context.lines.append(line)

    def _add_service(self, state: JuniperParseState, name: str, line: str) -> ConnectionInfo:
        connection = ConnectionInfo(type=name.split()[0], config=[line])
        state.data.connections.append(connection)
        return connection

    # Statements

    def _statement(self, state: JuniperParseState, statement: str, line: str) -> None:
        path = state.stack.path()
        state.flat.append(" ".join(path + [statement]))
        state.stack.current.lines.append(line)

        interface = state.stack.find(ContextKind.INTERFACE)
        if interface is not None:
            interface.record.config.append(line)

        key, _, rest = statement.partition(' ')
        value = rest.replace('"', '').strip()
        handlers = {
            'system': self._system_statement,
            'interfaces': self._interface_statement,
            'vlans': self._vlan_statement,
            'protocols': self._protocol_statement,
            'routing-options': self._routing_statement,
            'snmp': self._snmp_statement,
            'access': self._access_statement,
        }
        if not path:
            if key == 'version' and not state.data.os_version:
                state.data.os_version = value
            return
        handler = handlers.get(path[0])
        if handler:
            handler(state, path, key, value, line)

    def _system_statement(self, state: JuniperParseState, path: List[str], key: str,
                          value: str, line: str) -> None:
        data = state.data
        if path == ['system']:
            if key == 'host-name':
                data.hostname = value
            elif key == 'domain-name':
                data.other.domain = value
            elif key == 'name-server':
                data.other.dns_servers = f"{data.other.dns_servers} {value}".strip()
            elif key == 'authentication-order':
                data.aaa.status = "Configured"
                data.aaa.details.append(f"Order: {value}")
        elif path == ['system', 'name-server']:
            data.other.dns_servers = f"{data.other.dns_servers} {key}".strip()
        elif path == ['system', 'services'] and key:
            self._add_service(state, f"{key} {value}".strip(), line)
        elif path[:2] == ['system', 'services']:
            service = state.stack.find(ContextKind.LINE)
            if service is not None:
                service.record.config.append(line)
        elif path[:2] == ['system', 'login']:
            user = state.stack.find(ContextKind.LOCAL_USER)
            if user is not None and key == 'class':
                user.record.config = f"class {value}"
            elif user is not None:
                user.record.details.append(" ".join(path[3:] + [f"{key} {value}".strip()]))
        elif path[:2] in (['system', 'radius-server'], ['system', 'tacplus-server']):
            data.aaa.details.append(f"{path[-1]}: {key} {value}".strip())

    def _interface_statement(self, state: JuniperParseState, path: List[str], key: str,
                             value: str, line: str) -> None:
        context = state.stack.find(ContextKind.INTERFACE)
        port = context.record if context is not None else None

        if key == 'address' and 'family inet' in path:
            if value:
                self._address(state, path, value.split()[0])
        elif port is None:
            # irb / vlan containers
            if key == 'disable' and len(path) == 3 and path[2].startswith('unit '):
                state.disabled_units.add(f"{path[1]}.{path[2].split()[1]}")
        elif len(path) == 2 and key == 'description':
            self.set_port_description(state, port, value)
        elif len(path) == 2 and key == 'disable':
            port.status = AdminStatus.DISABLED
        elif key == '802.3ad' and path[-1] in ('ether-options', 'gigether-options') and value:
            self.add_member(state, port, value.split()[-1])
        elif key == 'bundle' and path[-1] == '802.3ad' and value:
            self.add_member(state, port, value)
        elif key in ('interface-mode', 'port-mode'):
            port.type = LinkType.from_mode(value)

    def _address(self, state: JuniperParseState, path: List[str], value: str) -> None:
        ip, _, prefix = value.partition('/')
        container = path[1]
        unit = next((part.split()[1] for part in path if part.startswith('unit ')), '0')

        if container not in L3_CONTAINERS:
            interface = state.stack.find(ContextKind.INTERFACE)
            if interface is not None:
                interface.extra.setdefault("addresses", []).append((ip, prefix))
            return

        name = f"{container}.{unit}"
        svi = state.svis_by_name.get(name)
        if svi is None:
            svi = SviInfo(svi=name, vlan_id=unit, ip_address=ip, subnet_mask=f"/{prefix}",
                          raw_config=[f"address {value}"])
            state.svis_by_name[name] = svi
            state.data.svis.append(svi)
        else:
            svi.additional_info = f"{svi.additional_info}, Secondary: {value}" \
                if svi.additional_info else f"Secondary: {value}"
        state.pending_svis.append((svi, ip, prefix))

    def _vlan_statement(self, state: JuniperParseState, path: List[str], key: str,
                        value: str, line: str) -> None:
        context = state.stack.find(ContextKind.VLAN)
        if context is None or len(path) != 2:
            return
        if key == 'vlan-id' and value:
            context.extra["id"] = value
        elif key == 'l3-interface':
            state.l3_interfaces[value] = path[1]

    def _protocol_statement(self, state: JuniperParseState, path: List[str], key: str,
                            value: str, line: str) -> None:
        if path[:2] != ['protocols', 'ospf']:
            return
        ospf = state.data.ospf
        ospf.raw_config.append(line)
        statement = f"{key} {value}".strip()

        tokens = value.split()
        if len(path) == 3 and path[2].startswith('area ') and key == 'interface' and tokens:
            ospf.networks.append(OspfNetwork(
                network=tokens[0], wildcard="N/A", area=path[2].split()[1]))
            if 'passive' in tokens[1:]:
                ospf.passive_interfaces.append(tokens[0])
        elif len(path) == 4 and path[3].startswith('interface ') and key == 'passive':
            iface = path[3].split()[1]
            if iface not in ospf.passive_interfaces:
                ospf.passive_interfaces.append(iface)
        else:
            ospf.details.append(statement)

    def _routing_statement(self, state: JuniperParseState, path: List[str], key: str,
                           value: str, line: str) -> None:
        if path == ['routing-options'] and key == 'router-id':
            if state.data.ospf.router_id is None:
                state.data.ospf.router_id = value
        elif path == ['routing-options', 'static'] and key == 'route':
            tokens = value.split()
            if len(tokens) >= 2:
                next_hop = tokens[tokens.index('next-hop') + 1] \
                    if 'next-hop' in tokens[:-1] else tokens[1]
                self._static_route(state, tokens[0], next_hop)
        elif len(path) == 3 and path[:2] == ['routing-options', 'static'] \
                and path[2].startswith('route ') and key == 'next-hop':
            self._static_route(state, path[2].split()[1], value)

    def _static_route(self, state: JuniperParseState, prefix: str, next_hop: str) -> None:
        network, _, length = prefix.partition('/')
        self.add_static_route(state, network, length or '32', next_hop)

    def _snmp_statement(self, state: JuniperParseState, path: List[str], key: str,
                        value: str, line: str) -> None:
        snmp = state.data.snmp
        statement = f"{key} {value}".strip()
        snmp.status = "Configured"
        snmp.details.append(" ".join(path[1:] + [statement]))

        context = state.stack.find(ContextKind.SNMP)
        community = context.record if context is not None else None
        if isinstance(community, SnmpCommunity):
            if key == 'authorization':
                community.access = 'RO' if value == 'read-only' else 'RW'
            elif key == 'client-list-name':
                community.acl = value
                self.reference_snmp_acl(state, value)
            elif path[-1] == 'clients':
                acl_name = f"{community.name}-clients"
                self.get_acl(state, acl_name).rules.append(statement)
                if community.acl is None:
                    community.acl = acl_name
                self.reference_snmp_acl(state, acl_name)
        elif state.stack.current.kind == ContextKind.ACL:
            state.stack.current.record.rules.append(statement)

    def _access_statement(self, state: JuniperParseState, path: List[str], key: str,
                          value: str, line: str) -> None:
        context = state.stack.find(ContextKind.DHCP_POOL)
        if context is None:
            return
        pool = context.record
        pool.config.append(line)
        if key == 'network':
            pool.network, _, length = value.partition('/')
            pool.subnet_mask = f"/{length}" if length else None
        elif key == 'router' and value:
            pool.default_router = value.split()[0]
        elif path[-1] == 'router':
            pool.default_router = key
        elif key == 'name-server' and value:
            pool.dns_servers.extend(value.split())
        elif path[-1] == 'name-server':
            pool.dns_servers.append(key)
