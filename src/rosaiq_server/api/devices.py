"""
Devices API router.

Dashboard endpoints for listing, inspecting and editing devices, browsing
their telemetry and audit trail, managing configuration and ownership.
Every device-scoped route goes through ``get_accessible_device``.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..clock import as_utc
from ..config import settings
from ..database import get_db
from ..dependencies import (
    get_accessible_device,
    get_config_store,
    get_current_user,
    get_registry,
    require_admin,
)
from ..errors import InvalidInputError
from ..models.device import Device
from ..models.event import EVENT_CONFIG_UPDATED
from ..models.user import User
from ..schemas.device import (
    AssignRequest,
    ClaimRequest,
    CustomNameUpdate,
    DeviceDetail,
    DeviceListItem,
    DeviceUpdate,
    EventOut,
)
from ..schemas.device_config import DeviceConfigPatch, DeviceConfigResponse
from ..schemas.measurement import MeasurementOut
from ..services import access
from ..services.config_store import ConfigStore
from ..services.events import append_event, recent_events
from ..services.ingest import latest_measurement, query_measurements
from ..services.registry import DeviceRegistry
from ..services.stats_service import device_stats, is_online

router = APIRouter(tags=["devices"])


def _device_fields(db: Session, device: Device) -> Dict[str, Any]:
    latest = latest_measurement(db, device.device_id)
    return {
        "device_id": device.device_id,
        "serial_number": device.serial_number,
        "name": device.name,
        "custom_name": device.custom_name,
        "display_name": device.display_name,
        "location": device.location,
        "model": device.model,
        "firmware_version": device.firmware_version,
        "owner_id": device.owner_id,
        "first_seen": device.first_seen,
        "last_seen": device.last_seen,
        "status": device.status,
        "is_online": is_online(device, settings.DEVICE_ONLINE_SECONDS),
        "latest_measurement": MeasurementOut.model_validate(latest) if latest else None,
    }


def _list_item(db: Session, device: Device) -> DeviceListItem:
    return DeviceListItem(**_device_fields(db, device))


def _detail(db: Session, device: Device) -> DeviceDetail:
    return DeviceDetail(
        **_device_fields(db, device),
        notes=device.notes,
        stats=device_stats(db, device.device_id),
    )


@router.get("", response_model=List[DeviceListItem])
def list_devices(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    List the devices visible to the caller.

    Admins see every device; standard users see the ones they own.
    ``is_online`` is true when the device made contact within
    DEVICE_ONLINE_SECONDS.
    """
    devices = (
        access.visible_devices(db, current_user)
        .order_by(Device.last_seen.desc())
        .all()
    )
    return [_list_item(db, device) for device in devices]


@router.post("/claim", response_model=DeviceListItem)
def claim_device(
    body: ClaimRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Attach an unassigned device to the caller by serial number."""
    device = access.claim_device(db, current_user, body.serial_number)
    return _list_item(db, device)


@router.get("/{device_id}", response_model=DeviceDetail)
def get_device_detail(
    device: Device = Depends(get_accessible_device),
    db: Session = Depends(get_db),
):
    """Device details with aggregate statistics over all of its measurements."""
    return _detail(db, device)


@router.put("/{device_id}", response_model=DeviceDetail)
def update_device(
    body: DeviceUpdate,
    device: Device = Depends(get_accessible_device),
    registry: DeviceRegistry = Depends(get_registry),
    db: Session = Depends(get_db),
):
    """Update name, location or notes. Keys left out of the body are kept."""
    device = registry.update_metadata(device, body.changes())
    return _detail(db, device)


@router.put("/{device_id}/custom-name", response_model=DeviceListItem)
def update_custom_name(
    body: CustomNameUpdate,
    device: Device = Depends(get_accessible_device),
    registry: DeviceRegistry = Depends(get_registry),
    db: Session = Depends(get_db),
):
    custom_name = (body.custom_name or "").strip() or None
    device = registry.update_metadata(device, {"custom_name": custom_name})
    return _list_item(db, device)


@router.get("/{device_id}/measurements", response_model=List[MeasurementOut])
def get_measurements(
    start: Optional[datetime] = Query(None, description="Inclusive lower bound (ISO 8601)"),
    end: Optional[datetime] = Query(None, description="Inclusive upper bound (ISO 8601)"),
    limit: Optional[int] = Query(None, ge=1),
    device: Device = Depends(get_accessible_device),
    db: Session = Depends(get_db),
):
    """
    Measurements for one device, newest first.

    ``limit`` defaults to MEASUREMENT_QUERY_LIMIT and is capped at
    MEASUREMENT_QUERY_MAX.
    """
    start, end = as_utc(start), as_utc(end)
    if start is not None and end is not None and start > end:
        raise InvalidInputError("start must not be after end")
    effective_limit = min(limit or settings.MEASUREMENT_QUERY_LIMIT, settings.MEASUREMENT_QUERY_MAX)
    return query_measurements(db, device.device_id, start=start, end=end, limit=effective_limit)


@router.get("/{device_id}/events", response_model=List[EventOut])
def get_events(
    limit: int = Query(100, ge=1, le=1000),
    device: Device = Depends(get_accessible_device),
    db: Session = Depends(get_db),
):
    return recent_events(db, device.device_id, limit=limit)


@router.get("/{device_id}/config", response_model=DeviceConfigResponse)
def get_device_config(
    device: Device = Depends(get_accessible_device),
    store: ConfigStore = Depends(get_config_store),
):
    return store.get(device.device_id)


@router.put("/{device_id}/config", response_model=DeviceConfigResponse)
def update_device_config(
    patch: DeviceConfigPatch,
    device: Device = Depends(get_accessible_device),
    store: ConfigStore = Depends(get_config_store),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Merge the supplied keys onto the stored configuration.

    Keys that are absent keep their current value; ``false`` and ``0`` are
    applied like any other value.
    """
    config = store.set(device.device_id, patch)
    changes = patch.changes()
    if changes:
        append_event(
            db,
            device.device_id,
            EVENT_CONFIG_UPDATED,
            {"changes": changes, "by": current_user.username},
        )
        db.commit()
        db.refresh(config)
    return config


@router.post("/{device_id}/assign", response_model=DeviceListItem)
def assign_device(
    body: AssignRequest,
    device: Device = Depends(get_accessible_device),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    device = access.assign_device(db, admin, device, body.user_id)
    return _list_item(db, device)


@router.post("/{device_id}/unassign", response_model=DeviceListItem)
def unassign_device(
    device: Device = Depends(get_accessible_device),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    device = access.unassign_device(db, admin, device)
    return _list_item(db, device)
