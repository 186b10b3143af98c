"""System routes: health."""
from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from iptracker_server import __version__
from iptracker_server.api.deps import get_registry
from iptracker_server.devices.registry import DeviceRegistry

router = APIRouter(prefix="/system", tags=["system"])


class HealthResponse(BaseModel):
    version: str
    uptime_seconds: float
    device_count: int


@router.get("/health", response_model=HealthResponse)
def health(request: Request, registry: DeviceRegistry = Depends(get_registry)):
    """Health check endpoint."""
    start_time = getattr(request.app.state, "start_time", time.time())
    uptime = time.time() - start_time
    return HealthResponse(
        version=__version__,
        uptime_seconds=round(uptime, 2),
        device_count=len(registry),
    )
