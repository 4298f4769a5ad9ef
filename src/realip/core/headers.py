"""Hop extraction from proxy forwarding headers.

Exactly one header family is read per request, first present wins:

1. ``X-Forwarded-For`` -- comma-separated list, furthest hop first
2. ``X-Real-IP`` -- a single address
3. ``Forwarded`` -- RFC 7239 elements, ``for=`` nodes only

Malformed list entries are dropped and the remaining entries kept in
order.  An unparsable ``X-Real-IP`` contributes no hops.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .address import IPAddress, parse_ip
from .forwarded import forwarded_for_addresses
from .tokenizer import split_comma_list, unquote, unwrap_brackets

logger = logging.getLogger(__name__)

X_FORWARDED_FOR = "x-forwarded-for"
X_REAL_IP = "x-real-ip"
FORWARDED = "forwarded"


def _list_header(headers: Mapping[str, str], name: str) -> str | None:
    # Repeated header lines form one comma-separated list.
    getlist = getattr(headers, "getlist", None)
    if getlist is None:
        return headers.get(name)
    values = getlist(name)
    return ",".join(values) if values else None


def parse_ip_token(token: str) -> IPAddress | None:
    """Normalize one list entry (``"10.0.0.1"``, ``[::1]``, ...) to an address."""
    text = unwrap_brackets(unquote(token.strip()).strip())
    return parse_ip(text)


def parse_ip_list(value: str) -> list[IPAddress]:
    hops: list[IPAddress] = []
    for token in split_comma_list(value):
        address = parse_ip_token(token)
        if address is None:
            logger.debug("Dropping non-IP forwarding entry %r", token)
            continue
        hops.append(address)
    return hops


def extract_hops(headers: Mapping[str, str]) -> list[IPAddress]:
    """Proxy hops declared by the request headers, furthest first.

    ``headers`` must look names up case-insensitively (Starlette
    ``Headers``) or be keyed by lowercase names.  The socket peer is not
    included.
    """
    value = _list_header(headers, X_FORWARDED_FOR)
    if value is not None:
        return parse_ip_list(value)

    value = headers.get(X_REAL_IP)
    if value is not None:
        address = parse_ip_token(value)
        if address is None:
            logger.debug("Ignoring non-IP %s value %r", X_REAL_IP, value)
            return []
        return [address]

    value = _list_header(headers, FORWARDED)
    if value is not None:
        return forwarded_for_addresses(value)

    return []
