"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request

from realip.api.deps import RealIPDep
from realip.api.middleware import RealIPMiddleware, app_trusted_networks
from realip.configs.config import AppConfig, get_app_config

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    logger.info(
        "Starting realip with %d trusted proxy network(s)",
        len(app_trusted_networks(app)),
    )
    yield
    logger.info("Shutting down realip")


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    The trusted proxy set is built here, once, and stored on
    ``app.state``; the middleware and the dependencies read it from there.
    """
    if config is None:
        config = get_app_config()

    trusted = config.proxy.build_trusted_networks()

    app = FastAPI(
        title="realip",
        description="Real client IP resolution behind trusted reverse proxies",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.trusted_networks = trusted
    app.add_middleware(RealIPMiddleware)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/ip")
    async def whoami(request: Request, client_ip: RealIPDep) -> dict:
        return {
            "ip": client_ip,
            "peer": request.client.host if request.client else None,
        }

    return app


app = create_app()


def main() -> None:
    """Run the app under uvicorn using the configured logging."""
    import uvicorn

    from realip.infra.logging import setup_logging

    config = get_app_config()
    setup_logging(config.logging)
    uvicorn.run(
        create_app(config),
        host=config.api.host,
        port=config.api.port,
        log_config=None,
        proxy_headers=False,
    )


if __name__ == "__main__":
    main()
