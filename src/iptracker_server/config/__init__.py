"""Configuration loader for the IP Tracker Server.

Loads settings from a YAML file with built-in defaults. Supports environment
variable overrides using the IPTRACKER_ prefix with double-underscore
nesting (e.g., IPTRACKER_SERVER__PORT=8080). The bare ``PORT`` and
``DATA_FILE`` variables understood by earlier deployments are honoured too,
below the prefixed ones.
"""

from __future__ import annotations

import os
import pathlib
from typing import Any

import yaml
from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Config sub-models
# ---------------------------------------------------------------------------

class ServerConfig(BaseModel):
    name: str = "IP Tracker Server"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"


class StorageConfig(BaseModel):
    data_file: str = "devices.json"


class DisplayConfig(BaseModel):
    stale_after_minutes: int = 60


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)


# ---------------------------------------------------------------------------
# Deep merge helper
# ---------------------------------------------------------------------------

def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge *override* into *base*, returning a new dict."""
    merged = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

_ENV_PREFIX = "IPTRACKER_"

# Unprefixed variables understood by older deployments
_LEGACY_ENV = {
    "PORT": ("server", "port"),
    "DATA_FILE": ("storage", "data_file"),
}


def _coerce(value: str) -> Any:
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    return value


def _collect_legacy_env() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for var, (section, key) in _LEGACY_ENV.items():
        value = os.environ.get(var)
        if value:
            overrides.setdefault(section, {})[key] = _coerce(value)
    return overrides


def _collect_env_overrides() -> dict[str, Any]:
    """Collect IPTRACKER_* env vars and build a nested dict.

    Double-underscore separates nesting levels.
    Example: IPTRACKER_STORAGE__DATA_FILE=/var/lib/iptracker/devices.json
    becomes  {"storage": {"data_file": "/var/lib/iptracker/devices.json"}}
    """
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(_ENV_PREFIX):
            continue
        parts = key[len(_ENV_PREFIX) :].lower().split("__")
        current = overrides
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = _coerce(value)
    return overrides


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

_BUILTIN_DEFAULTS_PATH = pathlib.Path(__file__).resolve().parents[3] / "config" / "server_defaults.yaml"


def load_settings(
    config_path: pathlib.Path | None = None,
) -> Settings:
    """Load settings with layered precedence: defaults < file < PORT/DATA_FILE < IPTRACKER_*.

    Parameters
    ----------
    config_path:
        Path to a YAML config file. If ``None`` the repository's
        ``config/server_defaults.yaml`` is used when present; a missing
        file means built-in defaults.
    """
    # Layer 1: built-in defaults (always loaded from the model defaults)
    base: dict[str, Any] = {}

    # Layer 2: YAML config file
    path = config_path if config_path is not None else _BUILTIN_DEFAULTS_PATH
    if path.exists():
        with open(path) as fh:
            file_data = yaml.safe_load(fh)
        if isinstance(file_data, dict):
            base = _deep_merge(base, file_data)

    # Layer 3: legacy unprefixed variables
    legacy = _collect_legacy_env()
    if legacy:
        base = _deep_merge(base, legacy)

    # Layer 4: environment variable overrides
    env_overrides = _collect_env_overrides()
    if env_overrides:
        base = _deep_merge(base, env_overrides)

    return Settings(**base)
