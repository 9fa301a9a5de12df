"""Multi-vendor network configuration parser and auditor."""

from .core.analyzer import ConfigAnalyzer, parse_configuration
from .core.auditor import ConfigAuditor
from .models.config import ParsedConfig
from .models.device import Vendor

__all__ = [
    "ConfigAnalyzer",
    "ConfigAuditor",
    "ParsedConfig",
    "Vendor",
    "parse_configuration",
]
