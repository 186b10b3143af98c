# tests/integration/conftest.py
import pathlib

import pytest
from fastapi.testclient import TestClient

from iptracker_server.config import Settings, StorageConfig
from iptracker_server.devices.registry import DeviceRegistry
from iptracker_server.devices.store import JsonSnapshotStore
from tests.conftest import make_record


def seed_devices(registry: DeviceRegistry, count: int = 3, **overrides) -> list[str]:
    """Insert test devices and return their hostnames."""
    hostnames = []
    for i in range(count):
        hostname = f"host-{i:02d}"
        registry.upsert(hostname, make_record(hostname, ipv4_local=f"192.168.1.{100 + i}", **overrides))
        hostnames.append(hostname)
    return hostnames


@pytest.fixture
def data_file(tmp_path: pathlib.Path) -> pathlib.Path:
    return tmp_path / "devices.json"


@pytest.fixture
def server_config(data_file):
    """Return a test server configuration."""
    return Settings(storage=StorageConfig(data_file=str(data_file)))


@pytest.fixture
def registry(data_file):
    """A registry persisting into the test's temporary directory."""
    reg = DeviceRegistry(JsonSnapshotStore(data_file))
    yield reg
    reg.close()


@pytest.fixture
def app(registry, server_config):
    """Create a FastAPI app with dependency overrides for testing."""
    from iptracker_server.app import create_app
    from iptracker_server.api.deps import get_config, get_registry

    application = create_app(server_config)

    async def override_registry():
        return registry

    async def override_config():
        return server_config

    application.dependency_overrides[get_registry] = override_registry
    application.dependency_overrides[get_config] = override_config
    return application


@pytest.fixture
def client(app):
    """Create a test client for the FastAPI app."""
    return TestClient(app)
