"""
Health, info and device bootstrap endpoints. None of them require auth.
"""
import logging
import time
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Request

from ..clock import isoformat_z, utc_now
from ..config import settings
from ..schemas.device_config import BootstrapConfigDocument

LOGGER = logging.getLogger(__name__)

router = APIRouter(tags=["system"])

_STARTED_AT = time.monotonic()


@router.get("/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "timestamp": isoformat_z(utc_now()),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "version": settings.APP_VERSION,
    }


@router.get("/api/info")
def server_info():
    """Static description of the server."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "description": f"{settings.APP_NAME} Air Quality Monitoring Server",
        "endpoints": {
            "devices": "/api/devices",
            "dashboard": "/api/dashboard/summary",
            "firmware": "/api/firmware",
            "health": "/health",
        },
    }


def _bootstrap_document(request: Request) -> BootstrapConfigDocument:
    base_url = (settings.PUBLIC_BASE_URL or str(request.base_url)).rstrip("/")
    return BootstrapConfigDocument(
        **settings.device_defaults().as_columns(),
        base_url=base_url,
        firmware_url=f"{base_url}/sensors/{{deviceId}}/generic/os/firmware.bin",
    )


@router.get("/config", response_model=BootstrapConfigDocument)
def get_bootstrap_config(request: Request):
    """Generic configuration a device can load before it knows its own id."""
    return _bootstrap_document(request)


@router.put("/config", response_model=BootstrapConfigDocument)
def put_bootstrap_config(request: Request, body: Optional[Dict[str, Any]] = Body(None)):
    """Accept a device's self-reported settings and answer with the bootstrap document."""
    if body:
        LOGGER.debug("Bootstrap config report from %s: %s", request.client.host if request.client else "?", body)
    return _bootstrap_document(request)
