"""IP address and network types.

Addresses are the stdlib ``ipaddress`` values, a closed pair of
families (v4 / v6).  Nothing here normalizes IPv4-mapped IPv6
addresses: ``::ffff:1.2.3.4`` and ``1.2.3.4`` are different hops.
"""

from __future__ import annotations

from ipaddress import (
    IPv4Address,
    IPv4Network,
    IPv6Address,
    IPv6Network,
    ip_address,
    ip_network,
)
from typing import Union

IPAddress = Union[IPv4Address, IPv6Address]
IPNetwork = Union[IPv4Network, IPv6Network]


def parse_ip(value: str) -> IPAddress | None:
    """Parse *value* as an IP address, ``None`` when it is not one."""
    try:
        return ip_address(value)
    except ValueError:
        return None


def host_network(address: IPAddress) -> IPNetwork:
    """Single-address network (/32 or /128) for *address*."""
    if isinstance(address, IPv4Address):
        return IPv4Network(address)
    return IPv6Network(address)


def parse_network(value: str) -> IPNetwork:
    """Parse a CIDR range or a bare address.

    Host bits are ignored (``10.0.0.1/8`` means ``10.0.0.0/8``).

    Raises:
        ValueError: when *value* is neither.
    """
    return ip_network(value.strip(), strict=False)
