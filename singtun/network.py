"""IP protocol numbers, network names and IPv4 broadcast addresses."""

from __future__ import annotations

import ipaddress
import re
from typing import Iterable, Optional, Union

PROTOCOL_ICMP = 1
PROTOCOL_TCP = 6
PROTOCOL_UDP = 17
PROTOCOL_ICMPV6 = 58

NETWORK_TCP = "tcp"
NETWORK_UDP = "udp"
NETWORK_ICMPV4 = "icmpv4"
NETWORK_ICMPV6 = "icmpv6"

_NAME_BY_PROTOCOL = {
    PROTOCOL_TCP: NETWORK_TCP,
    PROTOCOL_UDP: NETWORK_UDP,
    PROTOCOL_ICMP: NETWORK_ICMPV4,
    PROTOCOL_ICMPV6: NETWORK_ICMPV6,
}
_PROTOCOL_BY_NAME = {name: number for number, name in _NAME_BY_PROTOCOL.items()}

_UNSIGNED = re.compile(r"[0-9]+")

PrefixLike = Union[str, ipaddress.IPv4Interface, ipaddress.IPv4Network]


def network_name(network: int) -> str:
    """Return the network name of an IP protocol number."""
    if not 0 <= network <= 0xFF:
        raise ValueError(f"protocol number out of range: {network}")
    return _NAME_BY_PROTOCOL.get(network, str(network))


def network_from_name(name: str) -> int:
    """Return the IP protocol number for a network name, or 0 if unknown."""
    known = _PROTOCOL_BY_NAME.get(name)
    if known is not None:
        return known
    if not _UNSIGNED.fullmatch(name):
        return 0
    value = int(name)
    return value if value <= 0xFF else 0


def broadcast_addr(inet4_address: Iterable[PrefixLike]) -> Optional[ipaddress.IPv4Address]:
    """Return the broadcast address of the first IPv4 prefix, or None if there is none."""
    for prefix in inet4_address:
        interface = ipaddress.ip_interface(str(prefix))
        if interface.version != 4:
            raise ValueError(f"not an IPv4 prefix: {prefix}")
        return interface.network.broadcast_address
    return None