"""
IPv4 CIDR containment.

Anything that does not parse as an IPv4 address or ``base/prefix`` range is
treated as "not in range" rather than an error. IPv6 is not supported and
never matches.
"""
import re
from typing import Iterable, Optional

FULL_MASK = 0xFFFFFFFF

OCTET_RE = re.compile(r"[0-9]{1,3}")
PREFIX_RE = re.compile(r"[0-9]{1,2}")


def ip_to_int(address: str) -> Optional[int]:
    """Convert dotted-quad IPv4 text to an integer, or None if malformed."""
    parts = address.strip().split(".")
    if len(parts) != 4:
        return None

    value = 0
    for part in parts:
        if not OCTET_RE.fullmatch(part):
            return None
        octet = int(part)
        if octet > 255:
            return None
        value = (value << 8) | octet
    return value


def prefix_mask(prefix: int) -> int:
    """Network mask for a prefix length in [0, 32]."""
    return (FULL_MASK << (32 - prefix)) & FULL_MASK


def ip_in_range(address: str, cidr: str) -> bool:
    """Check whether *address* lies inside *cidr*.

    Args:
        address: IPv4 address, e.g. "167.89.10.4"
        cidr: IPv4 range such as "167.89.0.0/17"; a bare address means /32

    Returns:
        True if contained; False on no match or on any malformed input
    """
    if not address or not cidr:
        return False

    base, sep, prefix_text = cidr.strip().partition("/")
    if sep:
        if not PREFIX_RE.fullmatch(prefix_text):
            return False
        prefix = int(prefix_text)
    else:
        prefix = 32

    if prefix < 0 or prefix > 32:
        return False

    ip_num = ip_to_int(address)
    base_num = ip_to_int(base)
    if ip_num is None or base_num is None:
        return False

    mask = prefix_mask(prefix)
    return (ip_num & mask) == (base_num & mask)


def ip_matches_any_range(address: str, ranges: Iterable[str]) -> bool:
    """True if *address* is inside at least one of *ranges*."""
    for cidr in ranges:
        if ip_in_range(address, cidr):
            return True
    return False
