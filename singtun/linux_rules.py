"""Policy routing rules and routes that steer traffic into a Linux TUN device."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from .uidrange import UIDRange

FAMILY_V4 = 2
FAMILY_V6 = 10

RULE_START = 9000
RULE_END = RULE_START + 10

RT_TABLE_MAIN = 254
FR_ACT_UNREACHABLE = 7
IPPROTO_ICMP = 1
IPPROTO_ICMPV6 = 58
PROTECTED_FROM_VPN = 0x20000

Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

_ANY4_HOST = ipaddress.ip_network("0.0.0.0/32")
_LOW6_HALF = ipaddress.ip_network("::/1")
_HIGH6_HALF = ipaddress.ip_network("8000::/1")


@dataclass(kw_only=True)
class Rule:
    """A routing policy rule; fields left as None are not matched or set."""

    family: int
    priority: int
    table: Optional[int] = None
    mark: Optional[int] = None
    mask: Optional[int] = None
    goto: Optional[int] = None
    iif_name: Optional[str] = None
    oif_name: Optional[str] = None
    src: Optional[Network] = None
    dst: Optional[Network] = None
    invert: bool = False
    dport: Optional[Tuple[int, int]] = None
    ip_proto: Optional[int] = None
    suppress_prefixlen: Optional[int] = None
    uid_range: Optional[UIDRange] = None
    type: Optional[int] = None


@dataclass(frozen=True)
class Route:
    """A route for a destination network through the TUN link in a table."""

    dst: Network
    link_index: int
    table: int


def _masked(address) -> Network:
    return ipaddress.ip_interface(str(address)).network


def _next_index6(existing_priorities6: Iterable[int]) -> int:
    positive = [priority for priority in existing_priorities6 if priority > 0]
    return (min(positive) if positive else 0) - 1


def build_rules(
    options,
    existing_priorities6: Iterable[int] = (),
    android: bool = False,
    android_vpn_enabled: bool = False,
    override_android_vpn: bool = False,
) -> List[Rule]:
    """Return the policy rules for the options.

    ``existing_priorities6`` are the priorities of the IPv6 rules already
    installed; without auto-route a single IPv6 rule is placed just before
    the lowest of them.
    """
    table = options.table_index
    inet4 = list(options.inet4_address)
    inet6 = list(options.inet6_address)
    strict = options.strict_route

    if not options.auto_route:
        if inet6:
            return [Rule(
                family=FAMILY_V6,
                priority=_next_index6(existing_priorities6),
                table=table,
                oif_name=options.name,
            )]
        return []

    p4, p6 = bool(inet4), bool(inet6)
    if not p4 and not p6:
        return []

    rules: List[Rule] = []
    excluded = list(options.excluded_ranges())
    priority = RULE_START
    priority6 = priority
    nop = RULE_END

    for uid_range in excluded:
        if p4:
            rules.append(Rule(family=FAMILY_V4, priority=priority, uid_range=uid_range, goto=nop))
        if p6:
            rules.append(Rule(family=FAMILY_V6, priority=priority6, uid_range=uid_range, goto=nop))
    if excluded:
        if p4:
            priority += 1
        if p6:
            priority6 += 1

    include_interface = list(options.include_interface)
    exclude_interface = list(options.exclude_interface)
    if include_interface:
        match_priority = priority + 2 * len(include_interface) + 1
        for name in include_interface:
            if p4:
                rules.append(Rule(family=FAMILY_V4, priority=priority, iif_name=name, goto=match_priority))
                priority += 1
            if p6:
                rules.append(Rule(family=FAMILY_V6, priority=priority6, iif_name=name, goto=match_priority))
                priority6 += 1
        if p4:
            rules.append(Rule(family=FAMILY_V4, priority=priority, goto=nop))
            priority += 1
            rules.append(Rule(family=FAMILY_V4, priority=match_priority))
            priority += 1
        if p6:
            rules.append(Rule(family=FAMILY_V6, priority=priority6, goto=nop))
            priority6 += 1
            rules.append(Rule(family=FAMILY_V6, priority=match_priority))
            priority6 += 1
    elif exclude_interface:
        for name in exclude_interface:
            if p4:
                rules.append(Rule(family=FAMILY_V4, priority=priority, iif_name=name, goto=nop))
                priority += 1
            if p6:
                rules.append(Rule(family=FAMILY_V6, priority=priority6, iif_name=name, goto=nop))
                priority6 += 1

    if android and android_vpn_enabled:
        mark = PROTECTED_FROM_VPN if override_android_vpn else None
        if p4 or strict:
            rules.append(Rule(family=FAMILY_V4, priority=priority, mark=mark,
                              mask=PROTECTED_FROM_VPN, goto=nop))
            priority += 1
        if p6 or strict:
            rules.append(Rule(family=FAMILY_V6, priority=priority6, mark=mark,
                              mask=PROTECTED_FROM_VPN, goto=nop))
            priority6 += 1

    if strict:
        if not p4:
            rules.append(Rule(family=FAMILY_V4, priority=priority, type=FR_ACT_UNREACHABLE))
            priority += 1
        if not p6:
            rules.append(Rule(family=FAMILY_V6, priority=priority6, type=FR_ACT_UNREACHABLE))
            priority6 += 1

    if not android:
        if p4:
            for address in inet4:
                rules.append(Rule(family=FAMILY_V4, priority=priority, dst=_masked(address), table=table))
            priority += 1
            rules.append(Rule(family=FAMILY_V4, priority=priority, table=table, suppress_prefixlen=0))
            priority += 1
        if p6:
            rules.append(Rule(family=FAMILY_V6, priority=priority6, table=table, suppress_prefixlen=0))
            priority6 += 1
        if p4 and not strict:
            rules.append(Rule(family=FAMILY_V4, priority=priority, invert=True, dport=(53, 53),
                              table=RT_TABLE_MAIN, suppress_prefixlen=0))
            rules.append(Rule(family=FAMILY_V4, priority=priority, ip_proto=IPPROTO_ICMP, goto=nop))
            priority += 1
        if p6 and not strict:
            rules.append(Rule(family=FAMILY_V6, priority=priority6, invert=True, dport=(53, 53),
                              table=RT_TABLE_MAIN, suppress_prefixlen=0))
            rules.append(Rule(family=FAMILY_V6, priority=priority6, ip_proto=IPPROTO_ICMPV6, goto=nop))
            priority6 += 1

    if p4:
        if strict:
            rules.append(Rule(family=FAMILY_V4, priority=priority, table=table))
        else:
            rules.append(Rule(family=FAMILY_V4, priority=priority, invert=True, iif_name="lo", table=table))
            rules.append(Rule(family=FAMILY_V4, priority=priority, iif_name="lo", src=_ANY4_HOST, table=table))
            for address in inet4:
                rules.append(Rule(family=FAMILY_V4, priority=priority, iif_name="lo",
                                  src=_masked(address), table=table))
        priority += 1
    if p6:
        if not strict:
            for address in inet6:
                rules.append(Rule(family=FAMILY_V6, priority=priority6, iif_name="lo",
                                  src=_masked(address), table=table))
            priority6 += 1
            rules.append(Rule(family=FAMILY_V6, priority=priority6, iif_name="lo", src=_LOW6_HALF, goto=nop))
            rules.append(Rule(family=FAMILY_V6, priority=priority6, iif_name="lo", src=_HIGH6_HALF, goto=nop))
            priority6 += 1
        rules.append(Rule(family=FAMILY_V6, priority=priority6, table=table))
        priority6 += 1

    if p4:
        rules.append(Rule(family=FAMILY_V4, priority=nop))
    if p6:
        rules.append(Rule(family=FAMILY_V6, priority=nop))
    return rules


def build_routes(options, link_index: int) -> List[Route]:
    """Return one route per auto-route range, through the link in the options' table."""
    return [
        Route(dst=ipaddress.ip_network(prefix), link_index=link_index, table=options.table_index)
        for prefix in options.build_auto_route_ranges(False)
    ]