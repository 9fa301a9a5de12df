import re
import logging
from typing import List, Optional, Pattern

from .base import LineParser, ParseState, vlan_id_range
from ..core.context import Context, ContextKind
from ..models.config import SviInfo, DhcpPoolInfo, ConnectionInfo, SnmpCommunity, OspfNetwork
from ..models.device import AdminStatus, LinkType

logger = logging.getLogger(__name__)


class VrpStyleParser(LineParser):
    """
    Shared grammar for the '#'-separated dialects (Huawei VRP, H3C Comware).

    Subclasses only name the interface prefixes, aggregation syntax and the
    handful of commands that differ between the two.
    """

    SEPARATOR_RE = re.compile(r'^(#.*|return|)$')
    TOP_LEVEL_RE = re.compile(
        r'^(interface|vlan|ospf|aaa|user-interface|line|snmp-agent|sysname|'
        r'version|acl|local-user|domain|radius|hwtacacs|radius-server|'
        r'hwtacacs-server|ip\s+(route-static|pool|vpn-instance|http|https)|'
        r'dhcp\s+(enable|server\s+ip-pool)|dns|stelnet|telnet|ssh\s+(server|user|client)|'
        r'http|ftp|sftp|undo\s+(http|telnet|ssh|stelnet|ftp|info-center|ip\s+http)|'
        r'password-control|password-policy|ntp-service|'
        r'ntp|info-center|clock|header|port-group|lldp|bgp|rip|isis|'
        r'stp\s+(enable|mode|bpdu-protection|instance|region-configuration)|'
        r'traffic|qos|drop-profile|mac-address|system|irf|public-key|rsa|'
        r'sflow|nqa|cpu-defend|igmp-snooping|role)\b'
    )

    SVI_RE: Pattern = re.compile(r'^[Vv]lanif(\d+)$')
    AGGREGATE_PREFIX = "Eth-Trunk"
    MEMBER_RE: Pattern = re.compile(r'^eth-trunk\s+(\d+)')
    DHCP_POOL_RE: Pattern = re.compile(r'^ip\s+pool\s+(\S+)')
    ROUTED_MARKERS = ('undo portswitch', 'port link-mode route')
    VERSION_PATTERNS = [
        re.compile(r'^!Software Version\s+(.+)$'),
        re.compile(r'^VRP(?: \(R\))? software, Version\s+(.+)$'),
        re.compile(r'^Comware Software, Version\s+(.+)$'),
        re.compile(r'^version\s+(.+)$'),
    ]
    MODEL_RE: Pattern = re.compile(r'^(?:HUAWEI|Huawei|H3C)\s+(\S+)\b.*\buptime is')

    # Blocks whose bodies are recorded under AAA details
    _AAA_BLOCKS = re.compile(
        r'^(radius scheme|hwtacacs scheme|radius-server template|'
        r'hwtacacs-server template|domain)\s+(\S+)'
    )
    _OPAQUE_BLOCKS = re.compile(
        r'^(stp region-configuration|traffic\s+(classifier|behavior|policy)|bgp|rip|'
        r'isis|nqa|port-group|ssh user|public-key|rsa|role name|drop-profile|'
        r'qos|ip vpn-instance|cpu-defend|sflow|igmp-snooping)\b'
    )

    def handle_global(self, state: ParseState, line: str, indent: int) -> None:
        data = state.data

        if re.match(r'^sysname\s+(\S+)', line):
            data.hostname = re.match(r'^sysname\s+(\S+)', line).group(1)
            return
        for pattern in self.VERSION_PATTERNS:
            match = pattern.match(line)
            if match:
                if not data.os_version:
                    data.os_version = match.group(1).strip()
                return
        if self.MODEL_RE.match(line):
            data.model = self.MODEL_RE.match(line).group(1)
        elif re.match(r'^vlan\s+batch\s+(.+)', line):
            for vlan_id in self._expand_vlan_batch(re.match(r'^vlan\s+batch\s+(.+)', line).group(1)):
                self.add_vlan(state, vlan_id)
        elif re.match(r'^vlan\s+(\d+)(?:\s+to\s+(\d+))?$', line):
            start, end = re.match(r'^vlan\s+(\d+)(?:\s+to\s+(\d+))?$', line).groups()
            ids = vlan_id_range(int(start), int(end or start))
            for vlan_id in ids:
                self.add_vlan(state, vlan_id, line=line)
            context = state.stack.push(ContextKind.VLAN, line, indent=indent)
            context.extra["ids"] = ids
        elif re.match(r'^interface\s+(\S+)', line):
            self._start_interface(state, line, indent)
        elif re.match(r'^ospf(\s|$)', line):
            self._start_ospf(state, line, indent)
        elif re.match(r'^snmp-agent\b', line):
            self._snmp_agent(state, line)
        elif re.match(r'^acl\s+', line):
            name = self._acl_name(line)
            if name:
                state.stack.push(ContextKind.ACL, name, self.get_acl(state, name), indent)
        elif self.DHCP_POOL_RE.match(line):
            pool = DhcpPoolInfo(name=self.DHCP_POOL_RE.match(line).group(1), config=[line])
            data.dhcp_pools.append(pool)
            state.stack.push(ContextKind.DHCP_POOL, pool.name, pool, indent)
        elif line == 'aaa':
            data.aaa.status = "Configured"
            data.aaa.details.append("AAA Enabled")
            state.stack.push(ContextKind.AAA, 'aaa', data.aaa, indent)
        elif self._AAA_BLOCKS.match(line):
            self._start_aaa_block(state, line, indent)
        elif re.match(r'^local-user\s+(\S+)', line):
            self._local_user(state, line, indent)
        elif re.match(r'^(?:user-interface|line)\s+(?:class\s+)?(con|console|vty|aux)\s+(\d+(?:\s+\d+)?)', line):
            kind, span = re.match(
                r'^(?:user-interface|line)\s+(?:class\s+)?(con|console|vty|aux)\s+(\d+(?:\s+\d+)?)',
                line).groups()
            connection = ConnectionInfo(type='con' if kind == 'console' else kind,
                                        range=span, config=[line])
            data.connections.append(connection)
            state.stack.push(ContextKind.LINE, f"{kind} {span}", connection, indent)
        elif re.match(r'^ip\s+route-static\s+(?:vpn-instance\s+\S+\s+)?(\S+)\s+(\S+)\s+(\S+)', line):
            network, mask, next_hop = re.match(
                r'^ip\s+route-static\s+(?:vpn-instance\s+\S+\s+)?(\S+)\s+(\S+)\s+(\S+)', line).groups()
            self.add_static_route(state, network, mask, next_hop)
        elif re.match(r'^dns\s+server\s+(\S+)', line):
            server = re.match(r'^dns\s+server\s+(\S+)', line).group(1)
            data.other.dns_servers = f"{data.other.dns_servers} {server}".strip()
        elif re.match(r'^dns\s+domain\s+(\S+)', line):
            data.other.domain = re.match(r'^dns\s+domain\s+(\S+)', line).group(1)
        elif self._OPAQUE_BLOCKS.match(line):
            state.stack.push(ContextKind.BLOCK, line, indent=indent)

    def handle_block(self, state: ParseState, context: Context, line: str,
                     indent: int) -> None:
        if context.kind == ContextKind.INTERFACE:
            self._interface_line(state, context, line)
        elif context.kind == ContextKind.SVI:
            self._svi_line(context, line)
        elif context.kind == ContextKind.VLAN:
            match = re.match(r'^(?:description|name)\s+(.+)', line)
            for vlan_id in context.extra["ids"]:
                vlan = state.vlans[vlan_id]
                vlan.raw_config.append(line)
                if match:
                    vlan.name = match.group(1).strip()
        elif context.kind in (ContextKind.OSPF, ContextKind.OSPF_AREA):
            self._ospf_line(state, context, line, indent)
        elif context.kind == ContextKind.ACL:
            if re.match(r'^rule\b', line):
                context.record.rules.append(line)
            else:
                context.record.details.append(line)
        elif context.kind == ContextKind.DHCP_POOL:
            self._dhcp_line(context.record, line)
        elif context.kind == ContextKind.AAA:
            if re.match(r'^local-user\s+(\S+)', line):
                self._local_user(state, line, indent, allow_block=False)
            else:
                state.data.aaa.details.append(line)
        elif context.kind == ContextKind.LOCAL_USER:
            context.record.details.append(line)
            self._local_user_attribute(context.record, line)
        elif context.kind == ContextKind.LINE:
            connection = context.record
            connection.config.append(line)
            if re.match(r'^description\s+(.+)', line):
                connection.description = re.match(r'^description\s+(.+)', line).group(1)
            elif re.match(r'^authentication-mode\s+(aaa|scheme)$', line):
                if connection not in state.local_login_lines:
                    state.local_login_lines.append(connection)

    # Helpers

    @staticmethod
    def _expand_vlan_batch(text: str) -> List[str]:
        """Expand '10 20 to 22 30' into ['10', '20', '21', '22', '30']."""
        ids: List[str] = []
        tokens = text.split()
        i = 0
        while i < len(tokens):
            token = tokens[i]
            if not token.isdigit():
                logger.debug("Skipping malformed vlan batch token %r", token)
                i += 1
                continue
            if i + 2 < len(tokens) and tokens[i + 1] == 'to' and tokens[i + 2].isdigit():
                ids.extend(vlan_id_range(int(token), int(tokens[i + 2])))
                i += 3
            else:
                ids.extend(vlan_id_range(int(token), int(token)))
                i += 1
        return ids

    @staticmethod
    def _acl_name(line: str) -> Optional[str]:
        match = re.match(
            r'^acl\s+(?:number\s+(\d+)|(?:basic|advanced|mac|ipv6\s+\S+)\s+(?:name\s+)?(\S+)|name\s+(\S+))',
            line,
        )
        if not match:
            return None
        return next(group for group in match.groups() if group)

    def _start_interface(self, state: ParseState, line: str, indent: int) -> None:
        name = re.match(r'^interface\s+(\S+)', line).group(1)
        svi_match = self.SVI_RE.match(name)
        if svi_match:
            svi = SviInfo(svi=name, vlan_id=svi_match.group(1), raw_config=[line])
            state.data.svis.append(svi)
            state.stack.push(ContextKind.SVI, name, svi, indent)
            return

        port = self.add_port(state, name, line)
        if name.lower().startswith(self.AGGREGATE_PREFIX.lower()):
            self.register_port_channel(state, name)
        state.stack.push(ContextKind.INTERFACE, name, port, indent)

    def _start_ospf(self, state: ParseState, line: str, indent: int) -> None:
        ospf = state.data.ospf
        match = re.match(r'^ospf(?:\s+(\d+))?(?:.*\brouter-id\s+(\S+))?', line)
        process_id = match.group(1) or '1'
        ospf.status = "Configured"
        ospf.raw_config.append(line)
        if ospf.process_id is None:
            ospf.process_id = process_id
            ospf.router_id = match.group(2)
        else:
            ospf.details.append(f"Additional process {process_id}")
        state.stack.push(ContextKind.OSPF, process_id, ospf, indent)

    def _start_aaa_block(self, state: ParseState, line: str, indent: int) -> None:
        kind, name = self._AAA_BLOCKS.match(line).groups()
        aaa = state.data.aaa
        aaa.status = "Configured"
        aaa.details.append(f"{kind}: {name}")
        state.stack.push(ContextKind.AAA, name, aaa, indent)

    def _snmp_agent(self, state: ParseState, line: str) -> None:
        snmp = state.data.snmp
        snmp.status = "Configured"
        rest = re.sub(r'^snmp-agent\s*', '', line)
        if rest:
            snmp.details.append(rest)

        acl = re.search(r'\bacl\s+(?:name\s+)?(\S+)', rest)
        community = re.match(
            r'^community\s+(read|write)\s+(?:(?:cipher|simple)\s+)?(\S+)', rest)
        if community:
            snmp.communities.append(SnmpCommunity(
                name=community.group(2),
                access='RO' if community.group(1) == 'read' else 'RW',
                acl=acl.group(1) if acl else None,
            ))
        if acl:
            self.reference_snmp_acl(state, acl.group(1))

    def _local_user(self, state: ParseState, line: str, indent: int,
                    allow_block: bool = True) -> None:
        """Handle both 'local-user NAME <attribute>' and the block form."""
        match = re.match(r'^local-user\s+(\S+)(?:\s+(.*))?$', line)
        name, attributes = match.group(1), (match.group(2) or '')
        user = self.add_username(state, name, line)
        if attributes and not re.match(r'^class\s+\S+$', attributes):
            self._local_user_attribute(user, attributes)
        elif allow_block:
            state.stack.push(ContextKind.LOCAL_USER, name, user, indent)

    @staticmethod
    def _local_user_attribute(user, text: str) -> None:
        level = re.search(r'\blevel[\s-](\d+)', text)
        if level:
            user.privilege = int(level.group(1))
        services = re.match(r'^service-type\s+(.+)', text)
        if services:
            for service in services.group(1).split():
                if service not in user.service_types:
                    user.service_types.append(service)

    def _interface_line(self, state: ParseState, context: Context, line: str) -> None:
        port = context.record
        port.config.append(line)

        if re.match(r'^description\s+(.+)', line):
            self.set_port_description(state, port, re.match(r'^description\s+(.+)', line).group(1))
        elif line == 'shutdown':
            port.status = AdminStatus.DISABLED
        elif line == 'undo shutdown':
            port.status = AdminStatus.ENABLED
        elif re.match(r'^port\s+link-type\s+(\S+)', line):
            port.type = LinkType.from_mode(re.match(r'^port\s+link-type\s+(\S+)', line).group(1))
        elif line in self.ROUTED_MARKERS:
            port.type = LinkType.ROUTED
        elif self.MEMBER_RE.match(line):
            aggregate = f"{self.AGGREGATE_PREFIX}{self.MEMBER_RE.match(line).group(1)}"
            self.add_member(state, port, aggregate)
        elif re.match(r'^ip\s+address\s+(\d\S*)\s+(\S+)', line):
            ip, mask = re.match(r'^ip\s+address\s+(\d\S*)\s+(\S+)', line).groups()
            context.extra.setdefault("addresses", []).append((ip, mask))

    def _svi_line(self, context: Context, line: str) -> None:
        svi = context.record
        svi.raw_config.append(line)

        address = re.match(r'^ip\s+address\s+(\d\S*)\s+(\S+)(\s+sub)?', line)
        if address:
            ip, mask, secondary = address.groups()
            if secondary:
                self._add_info(svi, f"Secondary: {ip} {mask}")
            else:
                svi.ip_address, svi.subnet_mask = ip, mask
            context.extra.setdefault("addresses", []).append((ip, mask))
        elif re.match(r'^ip\s+address\s+dhcp-alloc', line):
            svi.ip_address = "dhcp"
        elif re.match(r'^dhcp\s+relay\s+server-(?:ip|address)\s+(\S+)', line):
            relay = re.match(r'^dhcp\s+relay\s+server-(?:ip|address)\s+(\S+)', line).group(1)
            svi.ip_helper_address = relay if svi.ip_helper_address == "N/A" \
                else f"{svi.ip_helper_address}, {relay}"
        elif line == 'shutdown':
            svi.status = AdminStatus.DISABLED
            self._add_info(svi, "shutdown")
        elif line == 'undo shutdown':
            svi.status = AdminStatus.ENABLED
        elif re.match(r'^description\s+(.+)', line):
            description = re.match(r'^description\s+(.+)', line).group(1)
            self._add_info(svi, f"Description: {description}")

    @staticmethod
    def _add_info(svi: SviInfo, text: str) -> None:
        svi.additional_info = f"{svi.additional_info}, {text}" if svi.additional_info else text

    def _ospf_line(self, state: ParseState, context: Context, line: str, indent: int) -> None:
        ospf = state.data.ospf
        ospf.raw_config.append(line)

        area = re.match(r'^area\s+(\S+)', line)
        if area:
            if context.kind == ContextKind.OSPF_AREA:
                self.pop_context(state)
            state.stack.push(ContextKind.OSPF_AREA, area.group(1), ospf, indent)
            return

        network = re.match(r'^network\s+(\S+)\s+(\S+)', line)
        passive = re.match(r'^silent-interface\s+(\S+)$', line)
        if network and context.kind == ContextKind.OSPF_AREA:
            ospf.networks.append(OspfNetwork(
                network=network.group(1), wildcard=network.group(2), area=context.name))
        elif passive and passive.group(1) != 'all':
            ospf.passive_interfaces.append(passive.group(1))
        elif re.match(r'^router-id\s+(\S+)', line) and ospf.router_id is None:
            ospf.router_id = re.match(r'^router-id\s+(\S+)', line).group(1)
        else:
            ospf.details.append(line)

    @staticmethod
    def _dhcp_line(pool: DhcpPoolInfo, line: str) -> None:
        pool.config.append(line)
        if re.match(r'^network\s+(\S+)(?:\s+mask)?\s+(\S+)', line):
            pool.network, pool.subnet_mask = re.match(
                r'^network\s+(\S+)(?:\s+mask)?\s+(\S+)', line).groups()
        elif re.match(r'^gateway-list\s+(\S+)', line):
            pool.default_router = re.match(r'^gateway-list\s+(\S+)', line).group(1)
        elif re.match(r'^dns-list\s+(.+)', line):
            pool.dns_servers.extend(re.match(r'^dns-list\s+(.+)', line).group(1).split())
