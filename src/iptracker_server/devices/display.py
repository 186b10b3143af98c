"""Display helpers for the device overview."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from iptracker_server.models import DeviceRecord


def display_name(record: DeviceRecord) -> str:
    """The computer name when the host reported one, otherwise its hostname."""
    return record.computer_name or record.hostname


def time_ago(ts: datetime, now: datetime | None = None) -> str:
    """Coarse relative age such as ``"3 hours ago"``.

    Months are 30 days and years 365; anything under ten seconds (or in the
    future) is ``"just now"``.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    seconds = (now - ts).total_seconds()
    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24
    months = days / 30
    years = days / 365

    if years >= 1:
        return f"{years:.0f} years ago"
    if months >= 1:
        return f"{months:.0f} months ago"
    if days >= 1:
        return f"{days:.0f} days ago"
    if hours >= 1:
        return f"{hours:.0f} hours ago"
    if minutes >= 1:
        return f"{minutes:.0f} minutes ago"
    if seconds >= 10:
        return f"{seconds:.0f} seconds ago"
    return "just now"


def device_rows(
    devices: Mapping[str, DeviceRecord],
    now: datetime | None = None,
    stale_after: timedelta = timedelta(hours=1),
) -> list[dict[str, Any]]:
    """Build overview rows, most recently updated first."""
    if now is None:
        now = datetime.now(timezone.utc)
    ordered = sorted(devices.items(), key=lambda item: item[0])
    ordered.sort(key=lambda item: item[1].last_update, reverse=True)
    return [
        {
            "hostname": hostname,
            "displayName": display_name(record),
            "sshStatus": record.ssh_status,
            "sshActive": record.ssh_active,
            "lastUpdate": record.last_update,
            "lastSeen": time_ago(record.last_update, now),
            "stale": now - record.last_update > stale_after,
        }
        for hostname, record in ordered
    ]
