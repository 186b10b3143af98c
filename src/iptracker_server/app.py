"""FastAPI application factory for the IP Tracker Server."""
from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from iptracker_server import __version__
from iptracker_server.api.routes_commands import router as commands_router
from iptracker_server.api.routes_devices import router as devices_router
from iptracker_server.api.routes_system import router as system_router
from iptracker_server.config import Settings


def create_app(config: Settings) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Loaded server settings.

    Returns:
        Configured FastAPI application instance. The registry and config
        dependencies still have to be wired through ``dependency_overrides``.
    """
    start_time = time.time()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # Store startup time and config on app state for access by routes
        app.state.start_time = start_time
        app.state.config = config
        yield

    app = FastAPI(
        title=config.server.name,
        version=__version__,
        lifespan=lifespan,
    )

    # Store config and start_time directly for access outside lifespan
    app.state.start_time = start_time
    app.state.config = config

    app.include_router(system_router)
    app.include_router(devices_router)
    app.include_router(commands_router)

    return app
