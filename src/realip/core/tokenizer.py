"""Comma-separated header list scanning.

``split_comma_list`` is a single-pass state machine over a header value:

* ``DEFAULT`` -- between entries; skips whitespace and empty entries.
* ``TOKEN`` -- plain entry, runs up to the next comma.
* ``QUOTED`` -- inside ``"..."``; commas are content.
* ``QUOTED_PAIR`` -- the character after ``\\`` inside quotes.
* ``POST_QUOTE`` -- after the closing quote; discards up to the next comma.

Quoted entries are yielded with their quote marks.  ``unquote`` and
``unwrap_brackets`` are applied separately by callers.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum, auto

_WHITESPACE = " \t"
_DELIMITER = ","
_QUOTE = '"'
_ESCAPE = "\\"


class _State(Enum):
    DEFAULT = auto()
    TOKEN = auto()
    QUOTED = auto()
    QUOTED_PAIR = auto()
    POST_QUOTE = auto()


def split_comma_list(value: str) -> Iterator[str]:
    """Yield the entries of a comma-separated header value.

    >>> list(split_comma_list('a, "b, c" , d'))
    ['a', '"b, c"', 'd']
    """
    state = _State.DEFAULT
    start = 0

    for index, char in enumerate(value):
        if state is _State.DEFAULT:
            if char == _QUOTE:
                start = index
                state = _State.QUOTED
            elif char != _DELIMITER and char not in _WHITESPACE:
                start = index
                state = _State.TOKEN
        elif state is _State.TOKEN:
            if char == _DELIMITER:
                yield value[start:index].rstrip(_WHITESPACE)
                state = _State.DEFAULT
        elif state is _State.QUOTED:
            if char == _ESCAPE:
                state = _State.QUOTED_PAIR
            elif char == _QUOTE:
                yield value[start : index + 1]
                state = _State.POST_QUOTE
        elif state is _State.QUOTED_PAIR:
            state = _State.QUOTED
        elif state is _State.POST_QUOTE and char == _DELIMITER:
            state = _State.DEFAULT

    # Flush whatever is still open at end of input.
    if state is _State.TOKEN:
        yield value[start:].rstrip(_WHITESPACE)
    elif state in (_State.QUOTED, _State.QUOTED_PAIR):
        yield value[start:]


def unwrap_brackets(token: str) -> str:
    """Strip one ``[...]`` pair, e.g. ``[::1]`` -> ``::1``."""
    if len(token) >= 2 and token[0] == "[" and token[-1] == "]":
        return token[1:-1]
    return token


def unquote(token: str) -> str:
    """Decode a quoted-string token; other tokens are returned unchanged.

    The leading quote and the first unescaped closing quote are removed
    and every ``\\x`` pair collapses to ``x``.  Anything after the closing
    quote is discarded.
    """
    if not token.startswith(_QUOTE):
        return token

    chars: list[str] = []
    escaped = False
    for char in token[1:]:
        if escaped:
            chars.append(char)
            escaped = False
        elif char == _ESCAPE:
            escaped = True
        elif char == _QUOTE:
            break
        else:
            chars.append(char)
    return "".join(chars)
