"""Client address resolution over a chain of proxy hops.

The chain is walked from the socket peer outward.  A header claim is
only believed while every hop that relayed it is trusted, so the first
untrusted hop is the client.  A forged prefix added by the client is
therefore never reached unless the operator trusts the client itself.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from ipaddress import IPv4Address, IPv6Address
from typing import Union

from .address import IPAddress, parse_ip
from .headers import extract_hops
from .trust import TrustedNetworks

PeerAddress = Union[IPAddress, str, tuple[str, int], None]


def _peer_ip(peer: PeerAddress) -> IPAddress | None:
    if peer is None or isinstance(peer, (IPv4Address, IPv6Address)):
        return peer
    if isinstance(peer, (tuple, list)):
        peer = peer[0]
    return parse_ip(peer)


def resolve_client_ip(
    peer: IPAddress | None,
    hops: Sequence[IPAddress],
    trusted: TrustedNetworks,
) -> IPAddress | None:
    """Resolve the client address.

    Args:
        peer: Socket peer address, ``None`` when the transport has none.
        hops: Header-declared hops, furthest first.
        trusted: Proxies allowed to vouch for the hop before them.

    Returns:
        The nearest untrusted hop.  When every hop is trusted, the
        furthest declared hop, or *peer* if nothing was declared.
        ``None`` only when *peer* is ``None``.
    """
    if peer is None:
        return None

    if not trusted.contains(peer):
        return peer
    for hop in reversed(hops):
        if not trusted.contains(hop):
            return hop

    # Everything is trusted.
    return hops[0] if hops else peer


def real_ip(
    headers: Mapping[str, str],
    peer: PeerAddress,
    trusted: TrustedNetworks,
) -> IPAddress | None:
    """Resolve the client address of one request.

    *peer* may be an address, an address string or a ``(host, port)``
    pair.  A peer that is not an IP address (a unix socket path, a test
    client name) counts as absent.
    """
    peer_ip = _peer_ip(peer)
    if peer_ip is None:
        return None
    return resolve_client_ip(peer_ip, extract_hops(headers), trusted)
