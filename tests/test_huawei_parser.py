"""Tests for the Huawei VRP parser."""

import pytest

from netconfig_analyzer.models.device import LinkType
from netconfig_analyzer.parsers.huawei_vrp import HuaweiVRPParser


@pytest.fixture
def parsed(huawei_config):
    return HuaweiVRPParser().parse(huawei_config)


def test_identity(parsed) -> None:
    assert parsed.hostname == "HW-ACC-01"
    assert parsed.os_version == "V200R019C10SPC500"
    assert parsed.vendor == "huawei"


def test_vlan_batch_and_vlan_block(parsed) -> None:
    assert [(v.id, v.name) for v in parsed.vlans] == [
        ("10", "Staff"), ("20", "VLAN20"), ("21", "VLAN21"), ("22", "VLAN22"),
    ]


def test_vlanif_and_ranges(parsed) -> None:
    svi = parsed.svis[0]
    assert (svi.svi, svi.vlan_id, svi.ip_address) == ("Vlanif10", "10", "10.10.10.1")
    assert svi.ip_helper_address == "10.0.0.5"
    assert svi.additional_info == "Description: Staff-GW"

    ranges = {r.svi: r for r in parsed.ip_ranges}
    assert ranges["Vlanif10"].network == "10.10.10.0"
    assert ranges["Vlanif10"].vlan_id == "10"
    routed = ranges["GigabitEthernet0/0/23"]
    assert routed.vlan_id == "N/A"
    assert routed.subnet_mask == "255.255.255.252"
    assert routed.prefix_length == 30


def test_interfaces(parsed) -> None:
    assert [p.port for p in parsed.ports] == [
        "Eth-Trunk1",
        "GigabitEthernet0/0/1 - GigabitEthernet0/0/2",
        "GigabitEthernet0/0/23",
        "GigabitEthernet0/0/24",
    ]
    ports = {p.port: p for p in parsed.ports}
    assert ports["GigabitEthernet0/0/23"].type == "routed"
    assert ports["GigabitEthernet0/0/24"].members == ["Eth-Trunk1"]
    assert ports["Eth-Trunk1"].type == "trunk"
    assert parsed.port_channels == ["Eth-Trunk1"]
    assert parsed.uplinks == ["Eth-Trunk1"]


def test_ospf_areas(parsed) -> None:
    ospf = parsed.ospf
    assert (ospf.process_id, ospf.router_id) == ("1", "2.2.2.2")
    assert [(n.network, n.wildcard, n.area) for n in ospf.networks] == [
        ("10.10.10.0", "0.0.0.255", "0.0.0.0"),
    ]
    assert ospf.passive_interfaces == ["Vlanif10"]


def test_snmp_and_acl(parsed) -> None:
    snmp = parsed.snmp
    assert [(c.name, c.access, c.acl) for c in snmp.communities] == [("public123", "RO", "2000")]
    assert [a.name for a in snmp.acls] == ["2000"]
    assert snmp.acls[0].rules == ["rule 5 permit source 10.0.0.0 0.0.0.255"]
    assert snmp.details == ["community read cipher public123 acl 2000", "sys-info version v2c"]


def test_local_users_inside_aaa(parsed) -> None:
    user = parsed.usernames[0]
    assert user.name == "admin"
    assert user.privilege == 15
    assert user.service_types == ["ssh", "terminal"]
    assert parsed.aaa.details[0] == "AAA Enabled"

    vty = parsed.connections[0]
    assert (vty.type, vty.range) == ("vty", "0 4")
    assert vty.usernames == ["admin"]


def test_dhcp_pool_routes(parsed) -> None:
    pool = parsed.dhcp_pools[0]
    assert pool.name == "STAFF"
    assert (pool.network, pool.subnet_mask) == ("10.10.10.0", "255.255.255.0")
    assert pool.default_router == "10.10.10.1"
    assert pool.dns_servers == ["8.8.8.8"]
    assert parsed.routing.default_route == "10.255.1.2"


def test_security_summary(parsed) -> None:
    assert parsed.security.present == [
        "SSH Enabled",
        "Telnet Disabled",
        "HTTP Server Disabled",
        "DHCP Snooping",
        "Port Security",
    ]
    assert parsed.security.missing == [
        "Password Policy Enabled",
        "BPDU Protection",
        "ARP Anti-Attack",
    ]


def test_unrecognized_lines_do_not_disturb_vlans() -> None:
    lines = []
    for vlan_id in range(10):
        lines.append(f"vlan {200 + vlan_id}")
        lines.extend(f" mystery-command {n} option" for n in range(25))
        lines.extend(f"undocumented feature {n}" for n in range(25))

    parsed = HuaweiVRPParser().parse("\n".join(lines))

    assert len(parsed.vlans) == 10


def test_password_login_does_not_bind_local_users() -> None:
    config = "\n".join([
        "aaa",
        " local-user netops password irreversible-cipher abc",
        " local-user netops privilege level 3",
        "#",
        "user-interface con 0",
        " authentication-mode password",
    ])

    parsed = HuaweiVRPParser().parse(config)

    assert parsed.usernames[0].privilege == 3
    assert parsed.connections[0].type == "con"
    assert parsed.connections[0].usernames == []


def test_https_off_alone_leaves_http_enabled() -> None:
    parsed = HuaweiVRPParser().parse("undo http secure-server enable\n#\n")

    assert "HTTP Server Disabled" in parsed.security.missing
    assert "HTTP Server Disabled" not in parsed.security.present


def test_vlan_ranges_are_limited_to_valid_ids() -> None:
    config = "\n".join([
        "vlan batch 4093 to 300000 0 12",
        "#",
        "vlan 5000",
        " description ghost",
        "#",
        "vlan 30 to 31",
        "#",
    ])

    parsed = HuaweiVRPParser().parse(config)

    assert [v.id for v in parsed.vlans] == ["4093", "4094", "12", "30", "31"]


def test_acl_and_local_user_bodies_are_kept() -> None:
    config = "\n".join([
        "acl number 2001",
        " description snmp managers",
        " rule 5 permit source 10.1.1.0 0.0.0.255",
        "#",
        "snmp-agent community read cipher public acl 2001",
        "#",
        "local-user ops",
        " password irreversible-cipher abc",
        " service-type ssh",
        "#",
    ])

    parsed = HuaweiVRPParser().parse(config)

    acl = parsed.snmp.acls[0]
    assert acl.rules == ["rule 5 permit source 10.1.1.0 0.0.0.255"]
    assert acl.details == ["description snmp managers"]
    user = parsed.usernames[0]
    assert user.details == ["password irreversible-cipher abc", "service-type ssh"]
    assert user.service_types == ["ssh"]


def test_link_types_are_normalized() -> None:
    config = "\n".join([
        "interface GigabitEthernet0/0/5",
        " port link-type hybrid",
        "#",
        "interface GigabitEthernet0/0/7",
        " port link-type Trunk",
        "#",
    ])

    ports = HuaweiVRPParser().parse(config).ports

    assert [p.type for p in ports] == [LinkType.HYBRID, LinkType.TRUNK]
