"""IP Tracker Server -- entry point.

Usage::

    python -m iptracker_server [--config PATH] [--host HOST] [--port PORT] [--data-file PATH]

Startup sequence:
    1. Parse CLI arguments
    2. Load configuration from YAML (or defaults) and apply CLI overrides
    3. Open the snapshot store and load the device registry from it
    4. Create the FastAPI application with dependency injection
    5. Start the uvicorn server
    6. On shutdown: flush pending snapshot writes and stop the save worker
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import uvicorn

from iptracker_server.app import create_app
from iptracker_server.config import Settings
from iptracker_server.devices.registry import DeviceRegistry

logger = logging.getLogger("iptracker_server")


# ---------------------------------------------------------------------------
# Integration seams -- thin wrappers around real subsystem constructors.
# These are module-level names so tests can patch them individually.
# ---------------------------------------------------------------------------


def load_config(config_path: str | None) -> Settings:
    """Load settings from a YAML file or return defaults."""
    from iptracker_server.config import load_settings

    path = Path(config_path) if config_path else None
    return load_settings(config_path=path)


def create_registry(config: Settings) -> DeviceRegistry:
    """Create the device registry backed by the JSON snapshot file."""
    from iptracker_server.devices.store import JsonSnapshotStore

    store = JsonSnapshotStore(Path(config.storage.data_file))
    return DeviceRegistry(store)


# ---------------------------------------------------------------------------
# CLI argument parsing
# ---------------------------------------------------------------------------


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Parameters
    ----------
    argv:
        Argument list.  Defaults to ``sys.argv[1:]`` when ``None``.
    """
    parser = argparse.ArgumentParser(
        prog="iptracker_server",
        description="Track the addresses and SSH state reported by remote hosts",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Interface to bind (default: from config, 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the API server (default: from config, 3000)",
    )
    parser.add_argument(
        "--data-file",
        type=str,
        default=None,
        help="Path of the JSON device snapshot (default: from config, devices.json)",
    )
    return parser.parse_args(argv)


def apply_cli_overrides(
    config: Settings,
    host: str | None = None,
    port: int | None = None,
    data_file: str | None = None,
) -> Settings:
    """Return *config* with any explicitly given CLI values applied."""
    server_updates: dict[str, object] = {}
    if host is not None:
        server_updates["host"] = host
    if port is not None:
        server_updates["port"] = port
    storage_updates: dict[str, object] = {}
    if data_file is not None:
        storage_updates["data_file"] = data_file

    return config.model_copy(
        update={
            "server": config.server.model_copy(update=server_updates),
            "storage": config.storage.model_copy(update=storage_updates),
        }
    )


# ---------------------------------------------------------------------------
# Main run coroutine
# ---------------------------------------------------------------------------


async def run_server(
    config_path: str | None = None,
    host: str | None = None,
    port: int | None = None,
    data_file: str | None = None,
) -> None:
    """Start the server and run until cancelled.

    This is the top-level coroutine that wires all subsystems together.
    It is designed to be called from ``main()`` or directly in tests.
    """
    # 1. Load config
    config = apply_cli_overrides(load_config(config_path), host=host, port=port, data_file=data_file)
    logging.getLogger().setLevel(config.server.log_level.upper())

    # 2. Registry, loaded from the last snapshot
    registry = create_registry(config)
    registry.load_from_store()

    # 3. Create FastAPI app
    app = create_app(config)

    # 3b. Wire up dependency overrides for production
    from iptracker_server.api.deps import get_config as _get_config_dep, get_registry as _get_registry_dep

    async def _prod_get_registry():
        return registry

    async def _prod_get_config():
        return config

    app.dependency_overrides[_get_registry_dep] = _prod_get_registry
    app.dependency_overrides[_get_config_dep] = _prod_get_config

    # 4. Configure and start uvicorn
    uvicorn_config = uvicorn.Config(
        app=app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.server.log_level.lower(),
    )
    server = uvicorn.Server(uvicorn_config)

    logger.info("Server starting on %s:%d", config.server.host, config.server.port)
    try:
        await server.serve()
    except asyncio.CancelledError:
        logger.info("Shutdown signal received -- stopping server")
    finally:
        # Pending snapshot writes must land before the process exits
        logger.info("Flushing device snapshot...")
        registry.close()
        logger.info("Server shutdown complete")


# ---------------------------------------------------------------------------
# Script entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Parse CLI args and run the server."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    args = parse_args()

    try:
        asyncio.run(
            run_server(
                config_path=args.config,
                host=args.host,
                port=args.port,
                data_file=args.data_file,
            )
        )
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)


if __name__ == "__main__":
    main()
