"""Connection command routes: SSH and screen-sharing commands for a device."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from iptracker_server.api.deps import get_registry
from iptracker_server.api.routes_devices import get_device_or_404
from iptracker_server.devices.addressing import select_address, ssh_command, vnc_command
from iptracker_server.devices.registry import DeviceRegistry

router = APIRouter(tags=["commands"])


class CommandResponse(BaseModel):
    hostname: str
    address: str
    port: Optional[str] = None
    command: str


def _require_hostname(hostname: str) -> str:
    if not hostname:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Hostname required")
    return hostname


@router.get("/ssh-command", response_model=CommandResponse)
def get_ssh_command(
    hostname: str = Query(""),
    ipv6: bool = Query(False),
    registry: DeviceRegistry = Depends(get_registry),
):
    """``ssh user@address [-p port]`` for the device, honouring the IPv6 preference."""
    hostname = _require_hostname(hostname)
    record = get_device_or_404(registry, hostname)
    target = select_address(record, ipv6)
    return CommandResponse(
        hostname=hostname,
        address=target.address,
        port=target.port,
        command=ssh_command(record, ipv6),
    )


@router.get("/vnc-command", response_model=CommandResponse)
def get_vnc_command(
    hostname: str = Query(""),
    ipv6: bool = Query(False),
    registry: DeviceRegistry = Depends(get_registry),
):
    """``vnc://address`` for the device, honouring the IPv6 preference."""
    hostname = _require_hostname(hostname)
    record = get_device_or_404(registry, hostname)
    target = select_address(record, ipv6)
    return CommandResponse(
        hostname=hostname,
        address=target.address,
        port=None,
        command=vnc_command(record, ipv6),
    )
