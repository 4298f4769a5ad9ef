"""Parser for the standardized ``Forwarded`` header (RFC 7239).

A header value is a comma-separated list of elements, one per proxy
hop, each a ``;``-separated list of ``key=value`` pairs::

    Forwarded: for=192.0.2.60;proto=http;by=203.0.113.43, for="[2001:db8::1]:4711"

Values are tokens or quoted strings; delimiters inside quotes do not
split.  Malformed elements are skipped one at a time, so a single bad
hop never hides the rest of the header.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from ipaddress import IPv4Address, IPv6Address

from .address import IPAddress, parse_ip
from .tokenizer import unquote

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"

_KEY_RE = re.compile(r"[!#$%&'*+.^_`|~0-9A-Za-z-]+")
_TOKEN_VALUE_RE = re.compile(r'[^\s";,]+')
_QUOTED_VALUE_RE = re.compile(r'"(?:[^"\\]|\\.)*"')
_OBFUSCATED_RE = re.compile(r"_[A-Za-z0-9._-]+")
_PORT_RE = re.compile(r"[0-9]{1,5}")
_MAX_PORT = 65535


class ForwardedParseError(ValueError):
    """Raised when a ``Forwarded`` element or node does not follow the grammar."""


@dataclass(frozen=True)
class NodeIdentifier:
    """A ``for``/``by`` node: IP, ``unknown`` or obfuscated ``_name``."""

    name: IPAddress | str
    port: int | str | None = None

    @property
    def ip(self) -> IPAddress | None:
        if isinstance(self.name, (IPv4Address, IPv6Address)):
            return self.name
        return None


@dataclass(frozen=True)
class ForwardedElement:
    """One comma-separated element of a ``Forwarded`` header."""

    forwarded_for: NodeIdentifier | None = None
    forwarded_by: NodeIdentifier | None = None
    host: str | None = None
    proto: str | None = None
    extensions: tuple[tuple[str, str], ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Splitting
# ---------------------------------------------------------------------------


def _split_outside_quotes(text: str, delimiter: str) -> Iterator[str]:
    start = 0
    quoted = False
    escaped = False
    for index, char in enumerate(text):
        if escaped:
            escaped = False
        elif quoted and char == "\\":
            escaped = True
        elif char == '"':
            quoted = not quoted
        elif char == delimiter and not quoted:
            yield text[start:index]
            start = index + 1
    yield text[start:]


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


def _parse_port(text: str) -> int | str:
    if _PORT_RE.fullmatch(text):
        port = int(text)
        if port <= _MAX_PORT:
            return port
    elif _OBFUSCATED_RE.fullmatch(text):
        return text
    raise ForwardedParseError(f"Invalid node port: {text!r}")


def _parse_name(text: str) -> IPAddress | str:
    if text.lower() == UNKNOWN:
        return UNKNOWN
    if _OBFUSCATED_RE.fullmatch(text):
        return text
    try:
        return IPv4Address(text)
    except ValueError:
        raise ForwardedParseError(f"Invalid node name: {text!r}") from None


def parse_node(value: str) -> NodeIdentifier:
    """Parse a ``for``/``by`` value (already unquoted).

    Accepts ``IPv4[:port]``, ``[IPv6][:port]``, ``unknown`` and
    ``_obfuscated`` names.  A bare IPv6 address without brackets is
    tolerated even though the RFC requires them.

    Raises:
        ForwardedParseError: for anything else.
    """
    if value.startswith("["):
        end = value.find("]")
        if end < 0:
            raise ForwardedParseError(f"Unterminated IPv6 literal: {value!r}")
        try:
            address = IPv6Address(value[1:end])
        except ValueError:
            raise ForwardedParseError(
                f"Invalid IPv6 literal: {value[1:end]!r}"
            ) from None
        rest = value[end + 1 :]
        if not rest:
            return NodeIdentifier(address)
        if not rest.startswith(":"):
            raise ForwardedParseError(f"Unexpected text after IPv6 literal: {rest!r}")
        return NodeIdentifier(address, _parse_port(rest[1:]))

    bare = parse_ip(value)
    if bare is not None:
        return NodeIdentifier(bare)

    name, sep, port = value.rpartition(":")
    if not sep:
        return NodeIdentifier(_parse_name(value))
    return NodeIdentifier(_parse_name(name), _parse_port(port))


# ---------------------------------------------------------------------------
# Elements
# ---------------------------------------------------------------------------


def _parse_value(raw: str) -> str:
    if raw.startswith('"'):
        if not _QUOTED_VALUE_RE.fullmatch(raw):
            raise ForwardedParseError(f"Malformed quoted string: {raw!r}")
        return unquote(raw)
    if not _TOKEN_VALUE_RE.fullmatch(raw):
        raise ForwardedParseError(f"Malformed value: {raw!r}")
    return raw


def parse_forwarded_element(text: str) -> ForwardedElement:
    """Parse one element such as ``for=192.0.2.60;proto=http``.

    Keys are case-insensitive and must not repeat.  Empty pairs
    (``for=a;;proto=b``) are ignored.

    Raises:
        ForwardedParseError: on a malformed pair, duplicated key or
            invalid ``for``/``by`` node.
    """
    pairs: dict[str, str] = {}
    for raw_pair in _split_outside_quotes(text, ";"):
        pair = raw_pair.strip()
        if not pair:
            continue
        key, sep, raw_value = pair.partition("=")
        key = key.strip().lower()
        if not sep or not _KEY_RE.fullmatch(key):
            raise ForwardedParseError(f"Malformed pair: {pair!r}")
        if key in pairs:
            raise ForwardedParseError(f"Duplicate parameter: {key!r}")
        pairs[key] = _parse_value(raw_value.strip())

    forwarded_for = pairs.pop("for", None)
    forwarded_by = pairs.pop("by", None)
    return ForwardedElement(
        forwarded_for=parse_node(forwarded_for) if forwarded_for is not None else None,
        forwarded_by=parse_node(forwarded_by) if forwarded_by is not None else None,
        host=pairs.pop("host", None),
        proto=pairs.pop("proto", None),
        extensions=tuple(pairs.items()),
    )


def parse_forwarded(value: str) -> Iterator[ForwardedElement]:
    """Yield the well-formed elements of a ``Forwarded`` header value."""
    for raw_element in _split_outside_quotes(value, ","):
        text = raw_element.strip()
        if not text:
            continue
        try:
            yield parse_forwarded_element(text)
        except ForwardedParseError as exc:
            logger.debug("Skipping malformed Forwarded element %r: %s", text, exc)


def forwarded_for_addresses(value: str) -> list[IPAddress]:
    """IP addresses of the ``for`` nodes, in header order.

    Elements without ``for``, or whose ``for`` is ``unknown`` or
    obfuscated, contribute nothing.
    """
    addresses: list[IPAddress] = []
    for element in parse_forwarded(value):
        node = element.forwarded_for
        if node is not None and node.ip is not None:
            addresses.append(node.ip)
    return addresses
