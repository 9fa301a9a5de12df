import re
import ipaddress
import logging
from dataclasses import dataclass
from typing import Optional, Union

logger = logging.getLogger(__name__)

INVALID = "Invalid"
SUBNET_TOO_SMALL = "None (subnet too small)"

_FULL_MASK = 0xFFFFFFFF
_DOTTED_RE = re.compile(r'^\d{1,3}(?:\.\d{1,3}){3}$')
_PREFIX_RE = re.compile(r'^/?(\d{1,2})$')


@dataclass(frozen=True)
class SubnetInfo:
    """Result of a subnet calculation, or an invalid sentinel."""

    ip_address: str
    network: str
    broadcast: str
    usable_range: str
    subnet_mask: str
    prefix_length: Optional[int]
    total_addresses: int
    usable_addresses: int
    valid: bool = True
    error: Optional[str] = None


def validate_ip(ip: str) -> bool:
    """Validate if a string is a valid dotted-decimal IPv4 address."""
    if not isinstance(ip, str) or not _DOTTED_RE.match(ip.strip()):
        return False
    try:
        ipaddress.IPv4Address(ip.strip())
        return True
    except (ipaddress.AddressValueError, ValueError):
        return False


def ip_to_int(ip: str) -> int:
    """Pack a dotted-decimal address into an unsigned 32-bit integer (big-endian)."""
    value = 0
    for octet in ip.strip().split('.'):
        value = (value << 8) | int(octet)
    return value & _FULL_MASK


def int_to_ip(value: int) -> str:
    """Unpack an unsigned 32-bit integer into dotted-decimal."""
    value &= _FULL_MASK
    return '.'.join(str((value >> shift) & 0xFF) for shift in (24, 16, 8, 0))


def prefix_to_mask(prefix: int) -> str:
    """Convert a prefix length (0-32) to a dotted-decimal mask."""
    if prefix < 0 or prefix > 32:
        raise ValueError(f"Prefix length out of range: {prefix}")
    return int_to_ip((_FULL_MASK << (32 - prefix)) & _FULL_MASK)


def mask_to_prefix(mask: str) -> Optional[int]:
    """
    Count the leading one-bits of a dotted-decimal mask.

    Returns None when the mask is malformed or its bits are not contiguous.
    """
    if not validate_ip(mask):
        return None
    value = ip_to_int(mask)
    inverted = ~value & _FULL_MASK
    # Contiguous masks invert to 2^n - 1
    if inverted & (inverted + 1):
        return None
    return 32 - inverted.bit_length()


def parse_mask_or_prefix(mask_or_prefix: Union[str, int, None]) -> Optional[int]:
    """
    Accept a dotted mask ("255.255.255.0"), an int prefix (24) or a
    prefix string ("24", "/24") and return the prefix length.
    """
    if mask_or_prefix is None or isinstance(mask_or_prefix, bool):
        return None
    if isinstance(mask_or_prefix, int):
        return mask_or_prefix if 0 <= mask_or_prefix <= 32 else None
    if not isinstance(mask_or_prefix, str):
        return None

    text = mask_or_prefix.strip()
    match = _PREFIX_RE.match(text)
    if match:
        prefix = int(match.group(1))
        return prefix if prefix <= 32 else None
    return mask_to_prefix(text)


def _invalid(ip_address: str, mask_or_prefix, reason: str) -> SubnetInfo:
    logger.debug("Invalid subnet %s %s: %s", ip_address, mask_or_prefix, reason)
    return SubnetInfo(
        ip_address=ip_address if isinstance(ip_address, str) else str(ip_address),
        network=INVALID,
        broadcast=INVALID,
        usable_range=INVALID,
        subnet_mask=str(mask_or_prefix) if mask_or_prefix not in (None, "") else "N/A",
        prefix_length=None,
        total_addresses=0,
        usable_addresses=0,
        valid=False,
        error=reason,
    )


def subnet_info(ip_address: str, mask_or_prefix: Union[str, int]) -> SubnetInfo:
    """
    Compute network, broadcast and usable range for an IPv4 address.

    Args:
        ip_address: Dotted-decimal interface address
        mask_or_prefix: Dotted mask, prefix length int, or "24" / "/24"

    Returns:
        SubnetInfo; an invalid sentinel (never an exception) on bad input
    """
    if not validate_ip(ip_address):
        return _invalid(ip_address, mask_or_prefix, "invalid IPv4 address")

    prefix = parse_mask_or_prefix(mask_or_prefix)
    if prefix is None:
        return _invalid(ip_address, mask_or_prefix, "invalid subnet mask")

    ip_address = ip_address.strip()
    address = ip_to_int(ip_address)
    mask = (_FULL_MASK << (32 - prefix)) & _FULL_MASK
    network = address & mask
    broadcast = network | (~mask & _FULL_MASK)

    # Python ints are unbounded, so /0 yields 2**32 without overflow
    total = 2 ** (32 - prefix)

    if prefix < 31:
        usable = total - 2 if total > 2 else 0
        if usable > 0:
            usable_range = f"{int_to_ip(network + 1)} - {int_to_ip(broadcast - 1)}"
        else:
            usable_range = SUBNET_TOO_SMALL
    elif prefix == 31:
        # RFC 3021 point-to-point: both addresses are usable
        usable = 2
        usable_range = f"{int_to_ip(network)} - {int_to_ip(broadcast)}"
    else:
        usable = 1
        usable_range = ip_address

    return SubnetInfo(
        ip_address=ip_address,
        network=int_to_ip(network),
        broadcast=int_to_ip(broadcast),
        usable_range=usable_range,
        subnet_mask=int_to_ip(mask),
        prefix_length=prefix,
        total_addresses=total,
        usable_addresses=usable,
    )
