import re
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Pattern, Tuple, Union

from ..core.context import Context, ContextKind, ContextStack
from ..core.port_ranges import consolidate_ports
from ..models.config import (
    ParsedConfig, PortConfig, VlanInfo, IpRangeInfo, UsernameInfo,
    ConnectionInfo, SnmpAcl, StaticRoute,
)
from ..models.device import Vendor, AdminStatus, LinkType
from ..utils.ip_utils import subnet_info

logger = logging.getLogger(__name__)

MAX_VLAN_ID = 4094


def vlan_id_range(start: int, end: int) -> List[str]:
    """Return the ids from start to end inclusive, limited to 1-4094."""
    low, high = max(start, 1), min(end, MAX_VLAN_ID)
    if (low, high) != (start, end):
        logger.debug("VLAN range %d-%d clipped to %d-%d", start, end, low, high)
    return [str(n) for n in range(low, high + 1)]


class ParseState:
    """Everything a single parse call owns. Discarded once parse() returns."""

    def __init__(self, raw_config: str):
        self.data = ParsedConfig(raw_config=raw_config)
        self.lines: List[str] = raw_config.splitlines()
        self.stripped: List[str] = [line.strip() for line in self.lines]
        self.stack = ContextStack()
        self.ports: Dict[str, PortConfig] = {}
        self.vlans: Dict[str, VlanInfo] = {}
        self.users: Dict[str, UsernameInfo] = {}
        self.acls: Dict[str, SnmpAcl] = {}
        self.snmp_acl_refs: List[str] = []
        # Terminal lines that authenticate against local accounts
        self.local_login_lines: List[ConnectionInfo] = []

    def has_line(self, pattern: str, flags: int = 0) -> bool:
        regex = re.compile(pattern, flags)
        return any(regex.search(line) for line in self.stripped)

    def find_line(self, pattern: str, flags: int = 0) -> Optional["re.Match"]:
        regex = re.compile(pattern, flags)
        for line in self.stripped:
            match = regex.search(line)
            if match:
                return match
        return None

    def any_port_line(self, pattern: str) -> bool:
        regex = re.compile(pattern)
        return any(
            regex.search(line)
            for port in self.ports.values()
            for line in port.config
        )


SecurityCheck = Tuple[str, Callable[[ParseState], Union[bool, str]]]


class BaseParser(ABC):
    """Abstract base class for vendor configuration parsers."""

    VENDOR: Vendor = None
    # (label, predicate) pairs; a predicate may return a refined label
    SECURITY_CHECKS: List[SecurityCheck] = []
    SECURITY_CHECKLIST: List[str] = []

    def parse(self, raw_config: str) -> ParsedConfig:
        """
        Parse a configuration dump into the normalized record.

        Unrecognized lines never raise; fields the dump does not mention stay
        at their defaults.

        Args:
            raw_config: Complete configuration text (LF or CRLF line endings)

        Returns:
            ParsedConfig owned by the caller
        """
        if raw_config is None:
            raise TypeError("raw_config must be a string, got None")
        if not isinstance(raw_config, str):
            raise TypeError(f"raw_config must be a string, got {type(raw_config).__name__}")

        state = self.create_state(raw_config)
        state.data.vendor = self.VENDOR
        self.parse_lines(state)
        self.finalize(state)
        return state.data

    def create_state(self, raw_config: str) -> ParseState:
        return ParseState(raw_config)

    @abstractmethod
    def parse_lines(self, state: ParseState) -> None:
        """Walk the input and populate state.data."""
        pass

    def finalize(self, state: ParseState) -> None:
        """Close open blocks and derive the views that need the whole input."""
        self.close_all(state)
        self.resolve_snmp_acls(state)
        self.resolve_login_users(state)
        state.data.security.present, state.data.security.missing = self.evaluate_security(state)
        state.data.ports = consolidate_ports(list(state.ports.values()))

    # Context handling

    def pop_context(self, state: ParseState) -> None:
        context = state.stack.pop()
        if context is not None:
            self.close_context(state, context)

    def close_all(self, state: ParseState) -> None:
        for context in state.stack.clear():
            self.close_context(state, context)

    def close_context(self, state: ParseState, context: Context) -> None:
        """Flush the record of a block that just ended."""
        if context.kind == ContextKind.INTERFACE:
            port = context.record
            if port.status == AdminStatus.UNKNOWN:
                port.status = AdminStatus.ENABLED
            addresses = context.extra.get("addresses", [])
            if addresses and port.type == LinkType.PHYSICAL:
                port.type = LinkType.ROUTED
            for ip, mask in addresses:
                self.add_ip_range(state, "N/A", port.port, ip, mask, port.status)
        elif context.kind == ContextKind.SVI:
            svi = context.record
            for ip, mask in context.extra.get("addresses", []):
                self.add_ip_range(state, svi.vlan_id, svi.svi, ip, mask, svi.status)

    # Record helpers

    def add_port(self, state: ParseState, name: str, line: str) -> PortConfig:
        port = state.ports.get(name)
        if port is None:
            port = PortConfig(port=name, config=[line])
            state.ports[name] = port
        else:
            logger.debug("Interface %s declared more than once, merging blocks", name)
        return port

    def register_port_channel(self, state: ParseState, name: str) -> None:
        if name not in state.data.port_channels:
            state.data.port_channels.append(name)

    def set_port_description(self, state: ParseState, port: PortConfig, text: str) -> None:
        port.description = text
        if 'uplink' in text.lower() and port.port not in state.data.uplinks:
            state.data.uplinks.append(port.port)

    def add_member(self, state: ParseState, port: PortConfig, aggregate: str,
                   label: Optional[str] = None) -> None:
        member = label or aggregate
        if member not in port.members:
            port.members.append(member)
        self.register_port_channel(state, aggregate)

    def add_vlan(self, state: ParseState, vlan_id: str, name: Optional[str] = None,
                 line: Optional[str] = None) -> VlanInfo:
        vlan = state.vlans.get(vlan_id)
        if vlan is None:
            vlan = VlanInfo(id=vlan_id, name=name or f"VLAN{vlan_id}")
            state.vlans[vlan_id] = vlan
            state.data.vlans.append(vlan)
        elif name:
            vlan.name = name
        if line:
            vlan.raw_config.append(line)
        return vlan

    def add_ip_range(self, state: ParseState, vlan_id: str, svi: str, ip: str,
                     mask, status: AdminStatus) -> IpRangeInfo:
        info = subnet_info(ip, mask)
        ip_range = IpRangeInfo(
            vlan_id=vlan_id,
            svi=svi,
            status=status,
            ip_address=info.ip_address,
            network=info.network,
            usable_range=info.usable_range,
            broadcast=info.broadcast,
            subnet_mask=info.subnet_mask,
            prefix_length=info.prefix_length,
            total_addresses=info.total_addresses,
            usable_addresses=info.usable_addresses,
            gateway=info.ip_address,
        )
        state.data.ip_ranges.append(ip_range)
        return ip_range

    def add_username(self, state: ParseState, name: str, line: str,
                     privilege: Optional[int] = None) -> UsernameInfo:
        user = state.users.get(name)
        if user is None:
            user = UsernameInfo(name=name, config=line)
            state.users[name] = user
            state.data.usernames.append(user)
        elif line != user.config:
            user.details.append(line)
        if privilege is not None:
            user.privilege = privilege
        return user

    def add_static_route(self, state: ParseState, network: str, mask: str,
                         next_hop: str) -> None:
        state.data.routing.static_routes.append(
            StaticRoute(network=network, mask=mask, next_hop=next_hop)
        )
        if network == "0.0.0.0" and mask in ("0.0.0.0", "0", "/0"):
            if not state.data.routing.default_route:
                state.data.routing.default_route = next_hop

    def get_acl(self, state: ParseState, name: str) -> SnmpAcl:
        acl = state.acls.get(name)
        if acl is None:
            acl = SnmpAcl(name=name)
            state.acls[name] = acl
        return acl

    def reference_snmp_acl(self, state: ParseState, name: Optional[str]) -> None:
        if name and name not in state.snmp_acl_refs:
            state.snmp_acl_refs.append(name)

    # Post-pass

    def resolve_snmp_acls(self, state: ParseState) -> None:
        """SNMP ACLs are the ones SNMP references, or named after SNMP."""
        for name, acl in state.acls.items():
            if name in state.snmp_acl_refs or 'snmp' in name.lower():
                state.data.snmp.acls.append(acl)
                state.data.snmp.status = "Configured"

    def resolve_login_users(self, state: ParseState) -> None:
        names = [user.name for user in state.data.usernames]
        for connection in state.local_login_lines:
            connection.usernames = list(names)

    def evaluate_security(self, state: ParseState) -> Tuple[List[str], List[str]]:
        """
        Evaluate the vendor marker table over the whole device.

        Returns:
            (present, missing) where missing is the checklist minus present,
            compared on the label text before any ':'
        """
        present: List[str] = []
        for label, check in self.SECURITY_CHECKS:
            result = check(state)
            if isinstance(result, str):
                present.append(result)
            elif result:
                present.append(label)

        present_keys = {label.split(':')[0].strip() for label in present}
        missing = [
            item for item in self.SECURITY_CHECKLIST
            if item.split(':')[0].strip() not in present_keys
        ]
        return present, missing


class LineParser(BaseParser):
    """
    Base for line-oriented dialects.

    A block ends at a separator line, or when a line at the block's own
    indentation looks like a top-level statement.
    """

    SEPARATOR_RE: Pattern = re.compile(r'^$')
    TOP_LEVEL_RE: Pattern = re.compile(r'^$')

    def parse_lines(self, state: ParseState) -> None:
        for raw in state.lines:
            line = raw.strip()
            if self.skip_line(state, line):
                continue
            if self.SEPARATOR_RE.match(line):
                self.close_all(state)
                continue

            indent = len(raw) - len(raw.lstrip())
            while not state.stack.in_global():
                if self.belongs_to(state.stack.current, line, indent):
                    break
                self.pop_context(state)

            if state.stack.in_global():
                self.handle_global(state, line, indent)
            else:
                context = state.stack.current
                context.lines.append(line)
                self.handle_block(state, context, line, indent)

    def skip_line(self, state: ParseState, line: str) -> bool:
        return False

    def belongs_to(self, context: Context, line: str, indent: int) -> bool:
        if indent > context.indent:
            return True
        if indent < context.indent:
            return False
        return not self.TOP_LEVEL_RE.match(line)

    @abstractmethod
    def handle_global(self, state: ParseState, line: str, indent: int) -> None:
        """Handle a line outside any block."""
        pass

    @abstractmethod
    def handle_block(self, state: ParseState, context: Context, line: str,
                     indent: int) -> None:
        """Handle a line inside the innermost open block."""
        pass
