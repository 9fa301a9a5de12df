import logging
from typing import Dict, Any, Optional, Type, Union

from ..models.config import ParsedConfig
from ..models.device import Vendor
from ..parsers.base import BaseParser
from ..parsers.cisco_ios import CiscoIOSParser
from ..parsers.huawei_vrp import HuaweiVRPParser
from ..parsers.h3c_comware import H3CComwareParser
from ..parsers.juniper_junos import JuniperJunosParser

logger = logging.getLogger(__name__)


class ConfigAnalyzer:
    """Parses device configurations with the parser for their vendor."""

    PARSERS = {
        Vendor.CISCO: CiscoIOSParser,
        Vendor.HUAWEI: HuaweiVRPParser,
        Vendor.JUNIPER: JuniperJunosParser,
        Vendor.H3C: H3CComwareParser,
    }

    def get_parser_class(self, vendor: Union[Vendor, str]) -> Type[BaseParser]:
        """Get the parser class for a vendor."""
        parser_class = self.PARSERS.get(Vendor.from_value(vendor))
        if not parser_class:
            raise ValueError(f"No parser available for vendor: {vendor}")
        return parser_class

    def analyze_config(self, raw_config: str, vendor: Union[Vendor, str],
                       file_name: Optional[str] = None) -> ParsedConfig:
        """
        Analyze a raw configuration and extract structured data.

        Args:
            raw_config: Raw configuration text
            vendor: Device vendor ('cisco', 'huawei', 'juniper' or 'h3c')
            file_name: Optional name of the file the text came from

        Returns:
            ParsedConfig with extracted data

        Raises:
            TypeError: raw_config is None
            ValueError: vendor is not supported
        """
        if raw_config is None:
            raise TypeError("raw_config must be a string, got None")
        parser = self.get_parser_class(vendor)()

        parsed = parser.parse(raw_config)
        parsed.file_name = file_name
        parsed.vendor = parser.VENDOR
        parsed.raw_config = raw_config

        logger.info(
            "Parsed %s config %s: hostname=%r vlans=%d ports=%d svis=%d",
            parser.VENDOR.value, file_name or '<text>', parsed.hostname,
            len(parsed.vlans), len(parsed.ports), len(parsed.svis),
        )
        return parsed

    def get_config_summary(self, parsed: ParsedConfig) -> Dict[str, Any]:
        """Generate a summary of the configuration."""
        return {
            'hostname': parsed.hostname,
            'vendor': parsed.vendor,
            'vlan_count': len(parsed.vlans),
            'svi_count': len(parsed.svis),
            'ip_range_count': len(parsed.ip_ranges),
            'port_count': len(parsed.ports),
            'port_channel_count': len(parsed.port_channels),
            'uplink_count': len(parsed.uplinks),
            'user_count': len(parsed.usernames),
            'dhcp_pool_count': len(parsed.dhcp_pools),
            'has_ospf': parsed.ospf.status == "Configured",
            'has_snmp': parsed.snmp.status == "Configured",
            'has_aaa': parsed.aaa.status == "Configured",
            'security_present': len(parsed.security.present),
            'security_missing': len(parsed.security.missing),
        }


_analyzer = ConfigAnalyzer()


def parse_configuration(raw_config: str, vendor: Union[Vendor, str],
                        file_name: Optional[str] = None) -> ParsedConfig:
    """Parse one configuration dump into the normalized device record."""
    return _analyzer.analyze_config(raw_config, vendor, file_name)
