"""ASGI middleware exposing the resolved client IP as ``request.state.real_ip``.

The trusted proxy set is read from ``app.state.trusted_networks`` on
every connection, the same place ``get_real_ip`` reads it, so both
always agree.
"""

from __future__ import annotations

import logging
from typing import Any

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

from realip.core.resolver import real_ip
from realip.core.trust import TrustedNetworks

logger = logging.getLogger(__name__)

STATE_KEY = "real_ip"
TRUSTED_NETWORKS_KEY = "trusted_networks"

_NO_TRUST = TrustedNetworks()


def app_trusted_networks(app: Any) -> TrustedNetworks:
    """Trusted proxies stored on *app*; empty when none were configured."""
    state = getattr(app, "state", None)
    return getattr(state, TRUSTED_NETWORKS_KEY, _NO_TRUST)


def resolve_scope(scope: Scope) -> str | None:
    """Resolved client address of an HTTP / WebSocket scope, as a string."""
    trusted = app_trusted_networks(scope.get("app"))
    address = real_ip(Headers(scope=scope), scope.get("client"), trusted)
    return str(address) if address is not None else None


class RealIPMiddleware:
    """Resolve the client address once per HTTP / WebSocket connection.

    The value is a string, or ``None`` when the server exposes no
    socket peer.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] in ("http", "websocket"):
            resolved = resolve_scope(scope)
            scope.setdefault("state", {})[STATE_KEY] = resolved
            logger.debug("Resolved client %s (peer %s)", resolved, scope.get("client"))
        await self.app(scope, receive, send)
