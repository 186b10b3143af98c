"""Device routes: report ingestion, list, get, display overview."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from iptracker_server.api.deps import get_config, get_registry
from iptracker_server.config import Settings
from iptracker_server.devices.display import device_rows
from iptracker_server.devices.registry import DeviceRegistry
from iptracker_server.devices.validator import validate_update
from iptracker_server.errors import UpdateRejected
from iptracker_server.models import DeviceRecord, DeviceUpdate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["devices"])


# ---------- Response models ----------


class UpdateResponse(BaseModel):
    success: bool


class OverviewRow(BaseModel):
    hostname: str
    displayName: str
    sshStatus: str
    sshActive: bool
    lastUpdate: datetime
    lastSeen: str
    stale: bool


# ---------- Helpers ----------


def _remote_address(request: Request) -> str:
    """Peer address as ``host:port``, bracketing IPv6 hosts."""
    client = request.client
    if client is None:
        return ""
    host = f"[{client.host}]" if ":" in client.host else client.host
    return f"{host}:{client.port}"


def get_device_or_404(registry: DeviceRegistry, hostname: str) -> DeviceRecord:
    record = registry.get(hostname)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not found")
    return record


# ---------- Routes ----------


@router.post("/update", response_model=UpdateResponse)
def update_device(
    update: DeviceUpdate,
    request: Request,
    registry: DeviceRegistry = Depends(get_registry),
):
    """Accept a report from a reporting host and store it as that host's record."""
    try:
        record = validate_update(
            update,
            remote_address=_remote_address(request),
            user_agent=request.headers.get("user-agent", ""),
        )
    except UpdateRejected as exc:
        logger.warning(
            "Rejected update from %s: %s", _remote_address(request), exc.reason,
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
            headers={"X-Reject-Reason": exc.reason},
        )

    registry.upsert(record.hostname, record)

    logger.info(
        "Update received for %s: IPv4=%s/%s, IPv6=%s/%s, User=%s",
        record.computer_name or record.hostname,
        record.ipv4_local, record.ipv4_public,
        record.ipv6_local, record.ipv6_public,
        record.current_user,
    )
    return UpdateResponse(success=True)


@router.get("/devices", response_model=dict[str, DeviceRecord])
def list_devices(registry: DeviceRegistry = Depends(get_registry)):
    """Every stored record, keyed by hostname."""
    return registry.list()


@router.get("/devices/", response_model=DeviceRecord)
def get_device_without_hostname():
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Device hostname required")


@router.get("/devices/{hostname}", response_model=DeviceRecord)
def get_device(hostname: str, registry: DeviceRegistry = Depends(get_registry)):
    """The stored record for one hostname."""
    return get_device_or_404(registry, hostname)


@router.get("/", response_model=list[OverviewRow])
def overview(
    registry: DeviceRegistry = Depends(get_registry),
    config: Settings = Depends(get_config),
):
    """Display rows for every device, most recently updated first."""
    stale_after = timedelta(minutes=config.display.stale_after_minutes)
    return device_rows(registry.list(), stale_after=stale_after)
