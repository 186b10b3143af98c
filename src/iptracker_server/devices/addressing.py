"""Connection command derivation: pick an address and port from a record.

Public reachability beats locality: any public address wins over any local
one, and the IPv6 preference only decides between addresses of the same
tier. When nothing else is set the IPv4 local address is returned, even if
it is empty, and callers treat an empty address as "no usable address".
"""

from __future__ import annotations

from dataclasses import dataclass

from iptracker_server.models import DEFAULT_SSH_PORT, DeviceRecord


@dataclass(frozen=True)
class ConnectionTarget:
    """Address plus the port qualifier to render (None means the default)."""

    address: str
    port: str | None = None

    @property
    def usable(self) -> bool:
        return bool(self.address)


def select_address(record: DeviceRecord, prefer_ipv6: bool = False) -> ConnectionTarget:
    if prefer_ipv6 and record.ipv6_public:
        address = record.ipv6_public
    elif record.ipv4_public:
        address = record.ipv4_public
    elif prefer_ipv6 and record.ipv6_local:
        address = record.ipv6_local
    else:
        address = record.ipv4_local

    port = record.ssh_port if record.ssh_port and record.ssh_port != DEFAULT_SSH_PORT else None
    return ConnectionTarget(address=address, port=port)


def ssh_command(record: DeviceRecord, prefer_ipv6: bool = False) -> str:
    """Render ``ssh <user>@<address>[ -p <port>]`` for *record*."""
    target = select_address(record, prefer_ipv6)
    command = f"ssh {record.current_user}@{target.address}"
    if target.port is not None:
        command += f" -p {target.port}"
    return command


def vnc_command(record: DeviceRecord, prefer_ipv6: bool = False) -> str:
    """Render the ``vnc://<address>`` screen-sharing URL for *record*."""
    target = select_address(record, prefer_ipv6)
    return f"vnc://{target.address}"
