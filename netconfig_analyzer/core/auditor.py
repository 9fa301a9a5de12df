import re
import logging
from typing import Dict, Any, List, Tuple

from .port_ranges import expand_range
from ..models.config import ParsedConfig, PortConfig, Finding, RemediationCommand
from ..models.device import Vendor, AdminStatus, LinkType

logger = logging.getLogger(__name__)

SECURITY_RISK = "Security Risk"
BEST_PRACTICE = "Best Practice"

# (command, context) wrappers around each remediation
_CONFIG_MODE = {
    Vendor.CISCO: (("configure terminal", "Enter global configuration mode."), None),
    Vendor.HUAWEI: (("system-view", "Enter system view."), None),
    Vendor.H3C: (("system-view", "Enter system view."), None),
    Vendor.JUNIPER: (("configure", "Enter configuration mode."),
                     ("commit", "Commit the configuration change.")),
}

_AGGREGATE_PREFIXES = {
    Vendor.CISCO: "port-channel",
    Vendor.HUAWEI: "eth-trunk",
    Vendor.H3C: "bridge-aggregation",
    Vendor.JUNIPER: "ae",
}

_DEFAULT_HOSTNAMES = {
    Vendor.CISCO: ("switch", "router"),
    Vendor.HUAWEI: ("huawei",),
    Vendor.H3C: ("h3c",),
    Vendor.JUNIPER: (),
}


class ConfigAuditor:
    """Rule-based, offline audit of a parsed configuration."""

    def run_local_analysis(self, parsed: ParsedConfig) -> List[Finding]:
        """
        Run the vendor's local checks against a parsed configuration.

        Args:
            parsed: Output of ConfigAnalyzer.analyze_config

        Returns:
            Findings in a deterministic order; an informational finding when
            the record carries no supported vendor
        """
        vendor = Vendor.from_value(parsed.vendor)
        checks = {
            Vendor.CISCO: self._cisco_checks,
            Vendor.HUAWEI: self._huawei_checks,
            Vendor.H3C: self._h3c_checks,
            Vendor.JUNIPER: self._juniper_checks,
        }.get(vendor)

        if checks is None:
            return [Finding(
                id='no-analyzer',
                type='Suggestion',
                severity='Info',
                description=f"Local analysis is not implemented for {parsed.vendor}.",
                devices_involved=[parsed.file_name or 'unknown'],
            )]

        findings = checks(parsed, vendor)
        findings.extend(self._description_findings(parsed, vendor))
        findings.extend(self._hostname_findings(parsed, vendor))
        logger.info("Audit of %s produced %d findings",
                    parsed.file_name or parsed.hostname or '<text>', len(findings))
        return findings

    # Vendor checks

    def _cisco_checks(self, parsed: ParsedConfig, vendor: Vendor) -> List[Finding]:
        findings = []
        present = parsed.security.present

        if 'Password Encryption' not in present:
            findings.append(self._finding(
                parsed, vendor, 'cisco_sec_no_password_encryption', SECURITY_RISK, 'Medium',
                'The "service password-encryption" command is missing.',
                {'check': 'Global Configuration'},
                'Enable password encryption to prevent casual viewing of clear-text '
                'passwords in the configuration file.',
                [('service password-encryption', 'Enable password encryption service.')],
            ))
        if 'HTTP/HTTPS Server Disabled' not in present:
            findings.append(self._finding(
                parsed, vendor, 'cisco_sec_http_server_enabled', SECURITY_RISK, 'High',
                'The insecure HTTP server is enabled.',
                {'check': 'Global Configuration'},
                'The HTTP server transmits data in clear text and should be disabled. '
                'Use the HTTPS server if web management is required.',
                [('no ip http server', 'Disable the insecure HTTP server.'),
                 ('no ip http secure-server', 'Disable the secure server if not used.')],
            ))
        if 'SSH Enabled' not in present:
            findings.append(self._finding(
                parsed, vendor, 'cisco_sec_ssh_disabled', SECURITY_RISK, 'High',
                'SSH is not configured for remote management.',
                {'check': 'Global Configuration'},
                'Configure SSH version 2 and restrict VTY lines to SSH.',
                [('crypto key generate rsa modulus 2048', 'Generate an RSA key pair.'),
                 ('ip ssh version 2', 'Use SSH version 2 only.')],
            ))
        if parsed.aaa.status != 'Configured':
            findings.append(self._finding(
                parsed, vendor, 'cisco_sec_no_aaa', SECURITY_RISK, 'Medium',
                'AAA is not enabled.',
                {'check': 'Global Configuration'},
                'Enable AAA to use centralized authentication servers.',
                [('aaa new-model', 'Enable AAA.'),
                 ('aaa authentication login default group tacacs+ local',
                  'Authenticate logins against TACACS+ with local fallback.')],
            ))

        findings.extend(self._access_port_findings(
            parsed, vendor, 'cisco_sec_missing_port_security', SECURITY_RISK,
            'port-security', r'^switchport port-security',
            'Enable port-security on all access ports to limit the MAC addresses '
            'allowed on each port.',
            ('switchport port-security', 'Enable port security.'),
        ))
        findings.extend(self._access_port_findings(
            parsed, vendor, 'cisco_bp_missing_bpduguard', BEST_PRACTICE,
            'BPDU Guard', r'^spanning-tree bpduguard enable',
            'Enable BPDU Guard on all access ports so unauthorized switches cannot '
            'join the spanning-tree topology.',
            ('spanning-tree bpduguard enable', 'Enable BPDU Guard.'),
        ))
        return findings

    def _huawei_checks(self, parsed: ParsedConfig, vendor: Vendor) -> List[Finding]:
        findings = self._vrp_common_checks(
            parsed, vendor, 'huawei',
            ssh_commands=[('stelnet server enable', 'Enable the SSH (Stelnet) server.'),
                          ('rsa local-key-pair create', 'Generate an RSA key pair.')],
            http_command=('undo http server enable', 'Disable the insecure HTTP server.'),
        )
        if 'Password Policy Enabled' not in parsed.security.present:
            findings.append(self._finding(
                parsed, vendor, 'huawei_sec_no_password_policy', SECURITY_RISK, 'Medium',
                'The global password complexity policy is not enabled.',
                {'check': 'Global Configuration'},
                'Enable the password policy to enforce complexity requirements for '
                'local user accounts.',
                [('password-policy enable', 'Enable the password policy feature.')],
            ))
        return findings

    def _h3c_checks(self, parsed: ParsedConfig, vendor: Vendor) -> List[Finding]:
        findings = self._vrp_common_checks(
            parsed, vendor, 'h3c',
            ssh_commands=[('public-key local create rsa', 'Generate an RSA key pair.'),
                          ('ssh server enable', 'Enable the SSH server.')],
            http_command=('undo ip http enable', 'Disable the insecure HTTP server.'),
        )
        if 'Password Control Enabled' not in parsed.security.present:
            findings.append(self._finding(
                parsed, vendor, 'h3c_sec_no_password_control', SECURITY_RISK, 'Medium',
                'Password control is not enabled.',
                {'check': 'Global Configuration'},
                'Enable password control to enforce complexity and aging of local '
                'passwords.',
                [('password-control enable', 'Enable password control.')],
            ))
        findings.extend(self._access_port_findings(
            parsed, vendor, 'h3c_sec_missing_port_security', SECURITY_RISK,
            'port-security', r'^port-security',
            'Enable port-security on all access-layer switch ports to prevent '
            'unauthorized devices from connecting to the network.',
            ('port-security enable', 'Enable port security.'),
        ))
        return findings

    def _vrp_common_checks(self, parsed: ParsedConfig, vendor: Vendor, prefix: str,
                           ssh_commands: List[Tuple[str, str]],
                           http_command: Tuple[str, str]) -> List[Finding]:
        findings = []
        present = parsed.security.present

        if 'SSH Enabled' not in present:
            findings.append(self._finding(
                parsed, vendor, f'{prefix}_sec_ssh_disabled', SECURITY_RISK, 'High',
                'The SSH server is not enabled.',
                {'check': 'Global Configuration'},
                'Enable the SSH server for secure remote management. Telnet is '
                'insecure and should be avoided.',
                ssh_commands,
            ))
        if 'HTTP Server Disabled' not in present:
            findings.append(self._finding(
                parsed, vendor, f'{prefix}_sec_http_server_enabled', SECURITY_RISK, 'High',
                'The insecure HTTP server is enabled.',
                {'check': 'Global Configuration'},
                'The HTTP server is insecure and should be disabled. Use HTTPS if '
                'web management is required.',
                [http_command],
            ))
        if 'Telnet Disabled' not in present:
            findings.append(self._finding(
                parsed, vendor, f'{prefix}_sec_telnet_enabled', SECURITY_RISK, 'Medium',
                'The Telnet server is not explicitly disabled.',
                {'check': 'Global Configuration'},
                'Disable Telnet so credentials are never sent in clear text.',
                [('undo telnet server enable', 'Disable the Telnet server.')],
            ))
        return findings

    def _juniper_checks(self, parsed: ParsedConfig, vendor: Vendor) -> List[Finding]:
        findings = []
        services = {connection.type: connection for connection in parsed.connections}

        if 'telnet' in services:
            findings.append(self._finding(
                parsed, vendor, 'juniper_sec_telnet_enabled', SECURITY_RISK, 'High',
                'The insecure Telnet service is enabled under [system services].',
                {'path': '[system services telnet]'},
                'Telnet transmits data in clear text. Disable it in favor of SSH.',
                [('delete system services telnet', 'Disable the insecure Telnet service.')],
            ))
        web = services.get('web-management')
        if web is not None and any(re.search(r'\bhttp\b(?!-)', line) for line in web.config):
            findings.append(self._finding(
                parsed, vendor, 'juniper_sec_http_enabled', SECURITY_RISK, 'High',
                'Insecure HTTP web management is enabled under [system services web-management].',
                {'path': '[system services web-management http]'},
                'HTTP web management is insecure. Use HTTPS if web management is required.',
                [('delete system services web-management http', 'Disable the insecure HTTP service.')],
            ))
        if 'SSH Enabled' in parsed.security.present \
                and 'Root SSH Login Denied' not in parsed.security.present:
            findings.append(self._finding(
                parsed, vendor, 'juniper_sec_root_ssh_login', SECURITY_RISK, 'Medium',
                'Root login over SSH is not denied.',
                {'path': '[system services ssh root-login]'},
                'Deny root logins over SSH and use named accounts instead.',
                [('set system services ssh root-login deny', 'Deny root login over SSH.')],
            ))
        if parsed.aaa.status != 'Configured':
            findings.append(self._finding(
                parsed, vendor, 'juniper_sec_no_aaa', SECURITY_RISK, 'Medium',
                'Centralized authentication (AAA) order is not configured.',
                {'path': '[system authentication-order]'},
                'Configure an authentication order (e.g., radius, tacplus, password) '
                'to use centralized authentication servers.',
                [('set system authentication-order [ radius tacplus password ]',
                  'Set the desired authentication order.')],
            ))
        return findings

    # Shared checks

    def _description_findings(self, parsed: ParsedConfig, vendor: Vendor) -> List[Finding]:
        findings = []
        aggregate = _AGGREGATE_PREFIXES[vendor]
        for port in parsed.ports:
            if port.status == AdminStatus.DISABLED or port.description:
                continue
            if port.port.lower().startswith(aggregate):
                continue
            findings.append(self._finding(
                parsed, vendor,
                f"{vendor.value}_bp_no_desc_{re.sub(r'[^a-zA-Z0-9]', '', port.port)}",
                BEST_PRACTICE, 'Low',
                f"Interface {port.port} is active but missing a description.",
                {'interface': port.port, 'status': port.status},
                'Add a descriptive label to all active interfaces to aid in network '
                'management and troubleshooting.',
                self._interface_commands(
                    vendor, port,
                    'description "YOUR_DESCRIPTION_HERE"' if vendor == Vendor.JUNIPER
                    else 'description YOUR_DESCRIPTION_HERE',
                    'Set a descriptive label.'),
            ))
        return findings

    def _hostname_findings(self, parsed: ParsedConfig, vendor: Vendor) -> List[Finding]:
        hostname = parsed.hostname or ''
        if hostname and hostname.lower() not in _DEFAULT_HOSTNAMES[vendor]:
            return []
        command = {
            Vendor.CISCO: 'hostname YOUR_HOSTNAME_HERE',
            Vendor.JUNIPER: 'set system host-name YOUR_HOSTNAME_HERE',
        }.get(vendor, 'sysname YOUR_HOSTNAME_HERE')
        return [self._finding(
            parsed, vendor, f'{vendor.value}_bp_default_hostname', BEST_PRACTICE, 'Low',
            'The device has a default or empty hostname.',
            {'currentHostname': hostname},
            'Assign a unique and descriptive hostname to the device for easier '
            'identification and management.',
            [(command, 'Set a unique hostname.')],
        )]

    def _access_port_findings(self, parsed: ParsedConfig, vendor: Vendor, finding_id: str,
                              finding_type: str, feature: str, pattern: str,
                              recommendation: str,
                              interface_command: Tuple[str, str]) -> List[Finding]:
        regex = re.compile(pattern)
        ports = [
            port for port in parsed.ports
            if port.type == LinkType.ACCESS
            and not any(regex.search(line) for line in port.config)
        ]
        if not ports:
            return []

        commands: List[Tuple[str, str]] = []
        for port in ports:
            commands.extend(self._interface_commands(vendor, port, *interface_command))
        return [self._finding(
            parsed, vendor, finding_id, finding_type, 'Medium',
            f"Found {len(ports)} access port(s) without {feature} enabled.",
            {'ports': ', '.join(port.port for port in ports)},
            recommendation,
            commands,
        )]

    @staticmethod
    def _interface_commands(vendor: Vendor, port: PortConfig, command: str,
                            context: str) -> List[Tuple[str, str]]:
        commands = []
        for name in expand_range(port):
            if vendor == Vendor.JUNIPER:
                commands.append((f"set interfaces {name} {command}", context))
            else:
                commands.append((f"interface {name}", f"Enter config for {name}."))
                commands.append((command, context))
        return commands

    @staticmethod
    def _finding(parsed: ParsedConfig, vendor: Vendor, finding_id: str, finding_type: str,
                 severity: str, description: str, details: Dict[str, Any],
                 recommendation: str, commands: List[Tuple[str, str]]) -> Finding:
        enter, leave = _CONFIG_MODE[vendor]
        remediation = [RemediationCommand(command=enter[0], context=enter[1])]
        remediation.extend(RemediationCommand(command=c, context=ctx) for c, ctx in commands)
        if leave is not None:
            remediation.append(RemediationCommand(command=leave[0], context=leave[1]))

        return Finding(
            id=finding_id,
            type=finding_type,
            severity=severity,
            description=description,
            devices_involved=[parsed.file_name or parsed.hostname or 'the device'],
            details=details,
            recommendation=recommendation,
            remediation_commands=remediation,
        )
