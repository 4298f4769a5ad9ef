"""FastAPI dependencies for client address resolution.

The trusted proxy set lives on ``app.state.trusted_networks``; it is
built once by ``create_app`` and is the only copy.  Tests swap it by
assigning ``app.state.trusted_networks`` before sending requests.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request

from realip.core.trust import TrustedNetworks

from realip.api.middleware import STATE_KEY, app_trusted_networks, resolve_scope


def get_trusted_networks(request: Request) -> TrustedNetworks:
    """Trusted proxies of the running app; empty when none were configured."""
    return app_trusted_networks(request.scope.get("app"))


def get_real_ip(request: Request) -> Optional[str]:
    """Resolved client IP of the request, ``None`` without a socket peer.

    Reuses the value ``RealIPMiddleware`` stored for the request, and
    resolves it directly when the middleware is not installed.  Usable
    as a FastAPI dependency::

        client_ip: RealIPDep
    """
    state = request.scope.get("state") or {}
    if STATE_KEY in state:
        return state[STATE_KEY]
    return resolve_scope(request.scope)


RealIPDep = Annotated[Optional[str], Depends(get_real_ip)]
