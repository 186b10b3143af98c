"""FastAPI dependency injection providers."""
from __future__ import annotations

from iptracker_server.config import Settings
from iptracker_server.devices.registry import DeviceRegistry


async def get_registry() -> DeviceRegistry:
    """Return the DeviceRegistry instance.

    In production, wired by the entry point. In tests, overridden.
    """
    raise NotImplementedError("Must be overridden via dependency_overrides")


async def get_config() -> Settings:
    """Return the server settings.

    In production, loaded at startup. In tests, overridden.
    """
    raise NotImplementedError("Must be overridden via dependency_overrides")
