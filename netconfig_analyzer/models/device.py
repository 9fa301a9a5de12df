from enum import Enum
from typing import Optional, Union


class Vendor(str, Enum):
    CISCO = "cisco"      # IOS / IOS-XE, "!"-separated
    HUAWEI = "huawei"    # VRP, "#"-separated
    JUNIPER = "juniper"  # Junos, brace-delimited
    H3C = "h3c"          # Comware, "#"-separated

    @classmethod
    def from_value(cls, value: Union[str, "Vendor", None]) -> Optional["Vendor"]:
        """Case-insensitive lookup; returns None for unknown vendors."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        for vendor in cls:
            if vendor.value == normalized:
                return vendor
        return None


class AdminStatus(str, Enum):
    ENABLED = "Enabled"
    DISABLED = "Disabled"
    UNKNOWN = "N/A"


class LinkType:
    """Normalized link types used in PortConfig.type."""

    PHYSICAL = "physical"
    ACCESS = "access"
    TRUNK = "trunk"
    HYBRID = "hybrid"
    ROUTED = "routed"

    @classmethod
    def from_mode(cls, mode: str) -> str:
        """Map a vendor port-mode keyword ('access', 'Trunk', ...) onto a constant.

        Keywords outside the switched modes are kept as written, lower-cased.
        """
        normalized = mode.strip().lower()
        for known in (cls.ACCESS, cls.TRUNK, cls.HYBRID):
            if normalized == known:
                return known
        return normalized
