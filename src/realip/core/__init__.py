"""Proxy-aware client address resolution.

Three pieces, composed per request:

1. ``extract_hops`` -- reads one forwarding header family into an
   ordered hop list (furthest first).
2. ``TrustedNetworks`` -- the operator's trusted proxies.
3. ``resolve_client_ip`` -- walks the hops from the socket peer outward
   and returns the first one no trusted proxy vouches for.

``real_ip`` runs the whole pipeline.  Everything here is synchronous,
side-effect free and never raises on header content.
"""

from .address import IPAddress, IPNetwork
from .forwarded import (
    ForwardedElement,
    ForwardedParseError,
    NodeIdentifier,
    forwarded_for_addresses,
    parse_forwarded,
)
from .headers import extract_hops
from .resolver import real_ip, resolve_client_ip
from .tokenizer import split_comma_list, unquote, unwrap_brackets
from .trust import TrustedNetworks

__all__ = [
    "ForwardedElement",
    "ForwardedParseError",
    "IPAddress",
    "IPNetwork",
    "NodeIdentifier",
    "TrustedNetworks",
    "extract_hops",
    "forwarded_for_addresses",
    "parse_forwarded",
    "real_ip",
    "resolve_client_ip",
    "split_comma_list",
    "unquote",
    "unwrap_brackets",
]
