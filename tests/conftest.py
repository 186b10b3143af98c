"""Shared test fixtures for IP Tracker Server tests."""

import pathlib
from datetime import datetime, timezone

import pytest

from iptracker_server.models import DeviceRecord

REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]


@pytest.fixture
def repo_root() -> pathlib.Path:
    return REPO_ROOT


def make_record(hostname: str = "mbp-alice", **overrides) -> DeviceRecord:
    """Build a fully populated record; keyword overrides use field names."""
    fields = {
        "hostname": hostname,
        "computer_name": f"{hostname} (laptop)",
        "ipv4_local": "192.168.1.20",
        "ipv4_public": "203.0.113.7",
        "ipv6_local": "fd00::20",
        "ipv6_public": "2001:db8::20",
        "ssh_port": "22",
        "ssh_status": "active",
        "current_user": "alice",
        "last_update": datetime(2026, 10, 18, 9, 30, 0, tzinfo=timezone.utc),
        "user_agent": "curl/8.4.0",
        "remote_address": "198.51.100.4:51234",
    }
    fields.update(overrides)
    return DeviceRecord(**fields)
