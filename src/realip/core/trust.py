"""Trusted proxy networks."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from ipaddress import IPv4Address, IPv6Address

from .address import IPAddress, IPNetwork, host_network, parse_network


@dataclass(frozen=True, init=False)
class TrustedNetworks:
    """Immutable set of networks whose forwarding headers are believed.

    Built once at startup and shared read-only by every request.
    IPv4 networks never match IPv6 addresses and vice versa.
    """

    networks: tuple[IPNetwork, ...] = ()

    def __init__(self, networks: Iterable[IPNetwork] = ()) -> None:
        object.__setattr__(self, "networks", tuple(networks))

    @classmethod
    def from_addresses(cls, addresses: Iterable[IPAddress]) -> TrustedNetworks:
        """Trust each address as a host-only network."""
        return cls(host_network(address) for address in addresses)

    @classmethod
    def parse(cls, entries: Iterable[str]) -> TrustedNetworks:
        """Build from CIDR ranges or plain addresses, e.g. ``["10.0.0.0/8", "::1"]``.

        Raises:
            ValueError: on the first entry that is neither.
        """
        return cls(parse_network(entry) for entry in entries)

    def contains(self, address: IPAddress) -> bool:
        return any(
            network.version == address.version and address in network
            for network in self.networks
        )

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, (IPv4Address, IPv6Address)):
            return False
        return self.contains(address)

    def __len__(self) -> int:
        return len(self.networks)
