"""Tests for the Cisco IOS parser."""

import random

import pytest

from netconfig_analyzer.parsers.cisco_ios import CiscoIOSParser


@pytest.fixture
def parsed(cisco_config):
    return CiscoIOSParser().parse(cisco_config)


def test_minimal_switch_scenario() -> None:
    config = "\n".join([
        "hostname SW1",
        "vlan 10",
        " name SERVERS",
        "interface Vlan10",
        " ip address 10.1.10.1 255.255.255.0",
    ])

    parsed = CiscoIOSParser().parse(config)

    assert parsed.hostname == "SW1"
    assert [(v.id, v.name) for v in parsed.vlans] == [("10", "SERVERS")]
    assert len(parsed.svis) == 1
    assert parsed.svis[0].svi == "Vlan10"
    assert parsed.svis[0].ip_address == "10.1.10.1"
    assert len(parsed.ip_ranges) == 1
    ip_range = parsed.ip_ranges[0]
    assert ip_range.network == "10.1.10.0"
    assert ip_range.broadcast == "10.1.10.255"
    assert ip_range.usable_addresses == 254
    assert ip_range.vlan_id == "10"


def test_identity(parsed) -> None:
    assert parsed.hostname == "CORE-SW1"
    assert parsed.os_version == "15.2"
    assert parsed.model == "ws-c2960x-48fps-l"
    assert parsed.vendor == "cisco"


def test_vlan_lists_expand_with_default_names(parsed) -> None:
    assert [(v.id, v.name) for v in parsed.vlans] == [
        ("10", "USERS"), ("20", "VLAN20"), ("30", "VLAN30"), ("31", "VLAN31"),
    ]


def test_svis_and_ip_ranges(parsed) -> None:
    vlan10, vlan20 = parsed.svis
    assert vlan10.ip_helper_address == "10.0.0.5"
    assert vlan10.subnet_mask == "255.255.255.0"
    assert vlan10.additional_info == "Description: Users, Secondary: 192.168.11.1 255.255.255.0"
    assert vlan20.status == "Disabled"

    ranges = {(r.svi, r.network): r for r in parsed.ip_ranges}
    assert ("Vlan10", "192.168.10.0") in ranges
    assert ("Vlan10", "192.168.11.0") in ranges
    assert ranges[("Vlan20", "192.168.20.0")].status == "Disabled"

    routed = ranges[("GigabitEthernet1/0/25", "10.255.0.0")]
    assert routed.vlan_id == "N/A"
    assert routed.usable_range == "10.255.0.1 - 10.255.0.2"
    assert routed.gateway == "10.255.0.1"


def test_ports_are_consolidated(parsed) -> None:
    names = [p.port for p in parsed.ports]
    assert names == [
        "GigabitEthernet1/0/1 - GigabitEthernet1/0/3",
        "GigabitEthernet1/0/24",
        "GigabitEthernet1/0/25",
        "Port-channel1",
    ]
    ports = {p.port: p for p in parsed.ports}
    assert ports["GigabitEthernet1/0/1 - GigabitEthernet1/0/3"].type == "access"
    assert ports["GigabitEthernet1/0/24"].members == ["Port-channel1 (active)"]
    assert ports["GigabitEthernet1/0/25"].type == "routed"
    assert ports["GigabitEthernet1/0/25"].status == "Disabled"
    assert ports["Port-channel1"].status == "Enabled"


def test_port_channels_and_uplinks(parsed) -> None:
    assert parsed.port_channels == ["Port-channel1"]
    assert parsed.uplinks == ["Port-channel1", "GigabitEthernet1/0/24"]


def test_ospf(parsed) -> None:
    ospf = parsed.ospf
    assert ospf.status == "Configured"
    assert ospf.process_id == "1"
    assert ospf.router_id == "1.1.1.1"
    assert ospf.passive_interfaces == ["Vlan10"]
    assert [(n.network, n.wildcard, n.area) for n in ospf.networks] == [
        ("192.168.10.0", "0.0.0.255", "0"),
    ]
    assert ospf.details == ["log-adjacency-changes"]


def test_snmp_communities_and_referenced_acls(parsed) -> None:
    snmp = parsed.snmp
    assert snmp.status == "Configured"
    assert [(c.name, c.access, c.acl) for c in snmp.communities] == [("public", "RO", "SNMP-RO")]
    assert [a.name for a in snmp.acls] == ["SNMP-RO"]
    assert snmp.acls[0].rules == ["permit 10.0.0.0 0.0.0.255", "deny any"]
    assert "location DC1" in snmp.details


def test_dhcp_aaa_users_and_routing(parsed) -> None:
    pool = parsed.dhcp_pools[0]
    assert (pool.name, pool.network, pool.subnet_mask) == ("USERS", "192.168.10.0", "255.255.255.0")
    assert pool.default_router == "192.168.10.1"
    assert pool.dns_servers == ["8.8.8.8", "8.8.4.4"]

    assert parsed.aaa.status == "Configured"
    assert parsed.aaa.details == ["AAA Enabled", "Authentication: login default group tacacs+ local"]

    assert [(u.name, u.privilege) for u in parsed.usernames] == [("admin", 15), ("ops", 5)]

    assert parsed.routing.default_gateway == "10.0.0.1"
    assert parsed.routing.default_route == "10.255.0.2"
    assert len(parsed.routing.static_routes) == 2
    assert parsed.other.domain == "example.local"
    assert parsed.other.dns_servers == "8.8.8.8 8.8.4.4"


def test_lines_and_local_login(parsed) -> None:
    con, vty = parsed.connections
    assert (con.type, con.range) == ("con", "0")
    assert con.usernames == []
    assert (vty.type, vty.range) == ("vty", "0 4")
    assert vty.usernames == ["admin", "ops"]
    assert "transport input ssh" in vty.config


def test_banner_body_is_not_parsed(parsed) -> None:
    assert all("Fake" not in p.port for p in parsed.ports)


def test_security_summary(parsed) -> None:
    assert parsed.security.present == [
        "Password Encryption",
        "VTP Mode: transparent",
        "SSH Enabled",
        "HTTP/HTTPS Server Disabled",
        "BPDU Guard",
        "AAA Authentication",
    ]
    assert parsed.security.missing == [
        "Port Security on Access Ports",
        "DHCP Snooping",
        "Dynamic ARP Inspection",
    ]


def test_http_counts_as_disabled_only_with_both_servers_off() -> None:
    parsed = CiscoIOSParser().parse("no ip http server\n")

    assert "HTTP/HTTPS Server Disabled" in parsed.security.missing


def test_empty_input_yields_empty_record() -> None:
    parsed = CiscoIOSParser().parse("")

    assert parsed.hostname == ""
    assert parsed.vlans == []
    assert parsed.ports == []
    assert parsed.security.present == []
    assert parsed.security.missing == CiscoIOSParser.SECURITY_CHECKLIST


def test_crlf_line_endings() -> None:
    parsed = CiscoIOSParser().parse("hostname EDGE\r\nvlan 5\r\n name MGMT\r\n")

    assert parsed.hostname == "EDGE"
    assert [(v.id, v.name) for v in parsed.vlans] == [("5", "MGMT")]


def test_none_input_raises() -> None:
    with pytest.raises(TypeError):
        CiscoIOSParser().parse(None)


def test_unrecognized_lines_do_not_disturb_vlans() -> None:
    rng = random.Random(7)
    words = ["frobnicate", "qux", "zz-top", "~~~", "{", "}", ";", "12345", "x/y/z"]
    lines = []
    for vlan_id in range(100, 110):
        lines.append(f"vlan {vlan_id}")
        for _ in range(50):
            indent = " " * rng.randint(0, 3)
            lines.append(indent + " ".join(rng.choice(words) for _ in range(rng.randint(1, 5))))

    parsed = CiscoIOSParser().parse("\n".join(lines))

    assert [v.id for v in parsed.vlans] == [str(n) for n in range(100, 110)]


def test_vlan_ranges_are_limited_to_valid_ids() -> None:
    parsed = CiscoIOSParser().parse("vlan 4090-300000\nvlan 0,5000,7\n")

    assert [v.id for v in parsed.vlans] == ["4090", "4091", "4092", "4093", "4094", "7"]


def test_global_statements_end_interface_blocks_without_separators() -> None:
    config = "\n".join([
        "interface GigabitEthernet0/1",
        " switchport mode access",
        "logging host 10.0.0.1",
        "udld enable",
        "interface GigabitEthernet0/2",
        " switchport mode access",
        "ip dhcp snooping information option",
        "interface GigabitEthernet0/3",
        " switchport mode access",
    ])

    parsed = CiscoIOSParser().parse(config)

    assert [p.port for p in parsed.ports] == ["GigabitEthernet0/1 - GigabitEthernet0/3"]
    assert parsed.ports[0].config == ["interface GigabitEthernet0/1", "switchport mode access"]
    assert parsed.ports[0].type == "access"


def test_non_rule_acl_lines_are_kept() -> None:
    config = "\n".join([
        "ip access-list standard SNMP-MGMT",
        " permit 10.0.0.0 0.0.0.255",
        " statistics per-entry",
    ])

    acl = CiscoIOSParser().parse(config).snmp.acls[0]

    assert acl.rules == ["permit 10.0.0.0 0.0.0.255"]
    assert acl.details == ["statistics per-entry"]


def test_repeated_username_lines_are_kept() -> None:
    config = "\n".join([
        "username admin privilege 15 secret 5 $1$abc",
        "username admin autocommand show version",
    ])

    user = CiscoIOSParser().parse(config).usernames[0]

    assert user.config == "username admin privilege 15 secret 5 $1$abc"
    assert user.details == ["username admin autocommand show version"]
    assert user.privilege == 15
