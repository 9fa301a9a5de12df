from typing import Optional, Dict, Any, List
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .device import Vendor, AdminStatus, LinkType


class ConfigModel(BaseModel):
    """Base for parsed records: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


class PortConfig(ConfigModel):
    port: str
    type: str = LinkType.PHYSICAL
    config: List[str] = []
    description: str = ""
    status: AdminStatus = AdminStatus.UNKNOWN
    members: List[str] = []
    # Set by the port-range consolidator
    range_start: Optional[str] = None
    range_end: Optional[str] = None


class VlanInfo(ConfigModel):
    id: str
    name: str
    raw_config: List[str] = []


class SviInfo(ConfigModel):
    svi: str
    vlan_id: str
    ip_address: str = "unassigned"
    subnet_mask: str = ""
    ip_helper_address: str = "N/A"
    status: AdminStatus = AdminStatus.ENABLED
    additional_info: str = ""
    raw_config: List[str] = []


class IpRangeInfo(ConfigModel):
    vlan_id: str
    svi: str
    status: AdminStatus = AdminStatus.ENABLED
    ip_address: str
    network: str
    usable_range: str
    broadcast: str
    subnet_mask: str
    prefix_length: Optional[int] = None
    total_addresses: int = 0
    usable_addresses: int = 0
    gateway: str


class OspfNetwork(ConfigModel):
    network: str
    wildcard: str
    area: str


class OspfInfo(ConfigModel):
    status: str = "Not configured"
    process_id: Optional[str] = None
    router_id: Optional[str] = None
    networks: List[OspfNetwork] = []
    passive_interfaces: List[str] = []
    # Lines the grammar does not structure are kept verbatim
    details: List[str] = []
    raw_config: List[str] = []


class SnmpAcl(ConfigModel):
    name: str
    rules: List[str] = []
    details: List[str] = []


class SnmpCommunity(ConfigModel):
    name: str
    access: str = ""
    acl: Optional[str] = None


class SnmpInfo(ConfigModel):
    status: str = "Not configured"
    details: List[str] = []
    communities: List[SnmpCommunity] = []
    acls: List[SnmpAcl] = []


class DhcpPoolInfo(ConfigModel):
    name: str
    config: List[str] = []
    network: Optional[str] = None
    subnet_mask: Optional[str] = None
    default_router: Optional[str] = None
    dns_servers: List[str] = []


class AaaInfo(ConfigModel):
    status: str = "Not configured"
    details: List[str] = []


class ConnectionInfo(ConfigModel):
    type: str
    range: str = ""
    config: List[str] = []
    usernames: List[str] = []
    description: Optional[str] = None


class UsernameInfo(ConfigModel):
    name: str
    config: str = ""
    privilege: Optional[int] = None
    service_types: List[str] = []
    details: List[str] = []


class StaticRoute(ConfigModel):
    network: str
    mask: str
    next_hop: str


class RoutingInfo(ConfigModel):
    default_gateway: str = ""
    default_route: str = ""
    static_routes: List[StaticRoute] = []


class OtherInfo(ConfigModel):
    dns_servers: str = ""
    domain: str = ""


class SecurityCompliance(ConfigModel):
    present: List[str] = []
    missing: List[str] = []


class ParsedConfig(ConfigModel):
    file_name: Optional[str] = None
    vendor: Optional[Vendor] = None
    raw_config: str = ""

    hostname: str = ""
    os_version: str = ""
    model: str = ""
    vlans: List[VlanInfo] = []
    svis: List[SviInfo] = []
    ip_ranges: List[IpRangeInfo] = []
    ospf: OspfInfo = Field(default_factory=OspfInfo)
    snmp: SnmpInfo = Field(default_factory=SnmpInfo)
    dhcp_pools: List[DhcpPoolInfo] = []
    aaa: AaaInfo = Field(default_factory=AaaInfo)
    other: OtherInfo = Field(default_factory=OtherInfo)
    connections: List[ConnectionInfo] = []
    usernames: List[UsernameInfo] = []
    ports: List[PortConfig] = []
    uplinks: List[str] = []
    port_channels: List[str] = []
    routing: RoutingInfo = Field(default_factory=RoutingInfo)
    security: SecurityCompliance = Field(default_factory=SecurityCompliance)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase interchange shape."""
        return self.model_dump(by_alias=True, mode="json")


class RemediationCommand(ConfigModel):
    command: str
    context: str


class Finding(ConfigModel):
    id: str
    type: str
    severity: str
    description: str
    devices_involved: List[str] = []
    details: Dict[str, Any] = {}
    recommendation: str = ""
    remediation_commands: List[RemediationCommand] = []
