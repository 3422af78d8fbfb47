"""
FastAPI application for the clocking dashboard.

PURPOSE: Application factory and server runner.
AI CONTEXT: One Controller per app, kept on app.state for the routes.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from ..__version__ import __version__
from ..config import Config
from ..controller import Controller
from ..gateway import ApiGateway
from .routes import router

__all__ = ["create_app", "run_dashboard"]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """
    Manage the controller across the application lifecycle.

    When create_app() was not given a controller, one is built here on a
    gateway pointing at Config.get_server_url(), and that gateway is closed
    on shutdown. Either way the initial state is loaded before the first
    request; a load failure is shown on the page, not raised.

    Args:
        app: The FastAPI application instance (provided by FastAPI).

    Yields:
        None. Control returns to FastAPI to handle requests.
    """
    owned_gateway: ApiGateway | None = None
    if app.state.controller is None:
        owned_gateway = ApiGateway()
        app.state.controller = Controller(owned_gateway)

    controller: Controller = app.state.controller
    logger.info(
        "Clocking dashboard starting (v%s) against %s",
        __version__,
        controller.gateway.base_url,
    )
    await controller.load()
    yield
    logger.info("Clocking dashboard shutting down")
    if owned_gateway is not None:
        await owned_gateway.aclose()
        app.state.controller = None


def create_app(controller: Controller | None = None) -> FastAPI:
    """
    Create and configure the FastAPI dashboard application.

    Args:
        controller: Optional pre-built Controller (tests inject one bound
            to a mock transport). Defaults to one created at startup.

    Returns:
        FastAPI application with the dashboard routes registered.

    Example:
        >>> from fastapi.testclient import TestClient
        >>> with TestClient(create_app(controller)) as client:
        ...     client.get('/').status_code
        200
    """
    app = FastAPI(
        title="Clocking",
        description="Local dashboard for the clocking time tracking service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.controller = controller
    app.include_router(router)
    return app


def run_dashboard(
    host: str = Config.DASHBOARD_HOST,
    port: int = Config.DASHBOARD_PORT,
    reload: bool = False,
    log_level: str = "info",
) -> None:
    """
    Launch the dashboard server.

    Args:
        host: Interface to bind. '127.0.0.1' keeps it local.
        port: TCP port for the dashboard.
        reload: Auto-reload on code changes (development only).
        log_level: Uvicorn logging verbosity.

    Returns:
        None. Blocks until the server is stopped (Ctrl+C).

    Raises:
        OSError: If the port is already in use or host is invalid.
    """
    uvicorn.run(
        "clocking_client.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


# For direct execution
if __name__ == "__main__":
    run_dashboard()
