"""Shared sample configurations for the parser, audit and API tests."""

import pytest


CISCO_CONFIG = """\
!
version 15.2
!
hostname CORE-SW1
!
service password-encryption
!
vtp mode transparent
!
ip domain-name example.local
ip name-server 8.8.8.8 8.8.4.4
!
username admin privilege 15 secret 5 $1$abc
username ops privilege 5 secret 5 $1$def
!
aaa new-model
aaa authentication login default group tacacs+ local
!
switch 1 provision ws-c2960x-48fps-l
!
ip ssh version 2
no ip http server
no ip http secure-server
!
vlan 10
 name USERS
!
vlan 20,30-31
!
interface Port-channel1
 description Uplink to DIST
 switchport mode trunk
!
interface GigabitEthernet1/0/1
 switchport mode access
 switchport access vlan 10
 spanning-tree bpduguard enable
!
interface GigabitEthernet1/0/2
 switchport mode access
 switchport access vlan 10
 spanning-tree bpduguard enable
!
interface GigabitEthernet1/0/3
 switchport mode access
 switchport access vlan 10
 spanning-tree bpduguard enable
!
interface GigabitEthernet1/0/24
 description uplink-core
 switchport mode trunk
 channel-group 1 mode active
!
interface GigabitEthernet1/0/25
 no switchport
 ip address 10.255.0.1 255.255.255.252
 shutdown
!
interface Vlan10
 description Users
 ip address 192.168.10.1 255.255.255.0
 ip address 192.168.11.1 255.255.255.0 secondary
 ip helper-address 10.0.0.5
!
interface Vlan20
 ip address 192.168.20.1 255.255.255.0
 shutdown
!
router ospf 1
 router-id 1.1.1.1
 passive-interface Vlan10
 network 192.168.10.0 0.0.0.255 area 0
 log-adjacency-changes
!
ip access-list standard SNMP-RO
 permit 10.0.0.0 0.0.0.255
 deny any
!
access-list 10 permit 10.1.1.1
!
snmp-server community public RO SNMP-RO
snmp-server location DC1
!
ip dhcp pool USERS
 network 192.168.10.0 255.255.255.0
 default-router 192.168.10.1
 dns-server 8.8.8.8 8.8.4.4
!
ip default-gateway 10.0.0.1
ip route 0.0.0.0 0.0.0.0 10.255.0.2
ip route 172.16.0.0 255.255.0.0 10.255.0.2
!
banner motd ^C
 Authorized access only
interface Fake0/1
^C
!
line con 0
 logging synchronous
line vty 0 4
 login local
 transport input ssh
!
end
"""

HUAWEI_CONFIG = """\
!Software Version V200R019C10SPC500
#
sysname HW-ACC-01
#
vlan batch 10 20 to 22
#
stelnet server enable
undo telnet server enable
undo http server enable
#
dhcp enable
dhcp snooping enable
#
vlan 10
 description Staff
#
aaa
 authentication-scheme default
 local-user admin password irreversible-cipher xxx
 local-user admin privilege level 15
 local-user admin service-type ssh terminal
#
interface Vlanif10
 description Staff-GW
 ip address 10.10.10.1 255.255.255.0
 dhcp select relay
 dhcp relay server-ip 10.0.0.5
#
interface Eth-Trunk1
 description Uplink-Core
 port link-type trunk
#
interface GigabitEthernet0/0/1
 port link-type access
 port default vlan 10
 port-security enable
#
interface GigabitEthernet0/0/2
 port link-type access
 port default vlan 10
 port-security enable
#
interface GigabitEthernet0/0/23
 undo portswitch
 ip address 10.255.1.1 30
#
interface GigabitEthernet0/0/24
 eth-trunk 1
#
ospf 1 router-id 2.2.2.2
 area 0.0.0.0
  network 10.10.10.0 0.0.0.255
 silent-interface Vlanif10
#
acl number 2000
 rule 5 permit source 10.0.0.0 0.0.0.255
#
snmp-agent
snmp-agent community read cipher public123 acl 2000
snmp-agent sys-info version v2c
#
ip pool STAFF
 gateway-list 10.10.10.1
 network 10.10.10.0 mask 255.255.255.0
 dns-list 8.8.8.8
#
ip route-static 0.0.0.0 0.0.0.0 10.255.1.2
#
user-interface vty 0 4
 authentication-mode aaa
 protocol inbound ssh
#
return
"""

H3C_CONFIG = """\
#
 version 7.1.064, Release 3208P10
#
 sysname H3C
#
 password-control enable
#
vlan 1
#
vlan 100
 name Servers
#
interface Bridge-Aggregation1
 description to-core
 port link-type trunk
#
interface Vlan-interface100
 ip address 172.16.100.1 255.255.255.0
#
interface GigabitEthernet1/0/1
 port access vlan 100
 port link-type access
#
interface GigabitEthernet1/0/2
 port link-mode route
 ip address 10.0.0.1 31
#
interface Ten-GigabitEthernet1/0/49
 port link-aggregation group 1
#
local-user admin class manage
 password hash $h$6$xyz
 service-type ssh terminal
 authorization-attribute user-role level-15
#
 ssh server enable
#
line vty 0 63
 authentication-mode scheme
 user-role network-operator
#
return
"""

JUNIPER_CONFIG = """\
## Last commit: 2024-01-01 10:00:00 UTC by admin
version 20.4R3.8;
system {
    host-name EX-ACC-01;
    domain-name example.net;
    authentication-order [ radius password ];
    name-server {
        8.8.8.8;
    }
    login {
        user admin {
            class super-user;
            authentication {
                encrypted-password "$6$abc";
            }
        }
    }
    services {
        ssh {
            root-login deny;
        }
        telnet;
        web-management {
            http;
        }
    }
    radius-server {
        10.0.0.10 secret "$9$xyz";
    }
}
interfaces {
    ge-0/0/0 {
        description "uplink to core";
        ether-options {
            802.3ad ae0;
        }
    }
    ge-0/0/1 {
        unit 0 {
            family ethernet-switching {
                interface-mode access;
                vlan {
                    members USERS;
                }
            }
        }
    }
    ge-0/0/2 {
        unit 0 {
            family ethernet-switching {
                interface-mode access;
                vlan {
                    members USERS;
                }
            }
        }
    }
    ge-0/0/10 {
        disable;
        unit 0 {
            family inet {
                address 10.255.2.1/30;
            }
        }
    }
    ae0 {
        unit 0 {
            family ethernet-switching {
                interface-mode trunk;
            }
        }
    }
    irb {
        unit 10 {
            family inet {
                address 10.20.10.1/24;
            }
        }
    }
}
snmp {
    community public {
        authorization read-only;
        clients {
            10.0.0.0/24;
        }
    }
}
routing-options {
    router-id 3.3.3.3;
    static {
        route 0.0.0.0/0 next-hop 10.255.2.2;
    }
}
protocols {
    ospf {
        area 0.0.0.0 {
            interface irb.10 {
                passive;
            }
            interface ge-0/0/10.0;
        }
    }
}
vlans {
    USERS {
        vlan-id 10;
        l3-interface irb.10;
    }
    NOID {
        description "no id";
    }
}
"""


@pytest.fixture
def cisco_config() -> str:
    return CISCO_CONFIG


@pytest.fixture
def huawei_config() -> str:
    return HUAWEI_CONFIG


@pytest.fixture
def h3c_config() -> str:
    return H3C_CONFIG


@pytest.fixture
def juniper_config() -> str:
    return JUNIPER_CONFIG
