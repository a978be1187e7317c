"""
Device-facing API router.

Endpoints called by the sensors themselves: telemetry ingest, config fetch and
OTA negotiation. No user session exists here; the optional API key guard is
the only gate.
"""
import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import FileResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import (
    get_config_store,
    get_firmware_registry,
    get_ingest,
    get_registry,
    require_api_key,
)
from ..schemas.device_config import DeviceConfigDocument
from ..schemas.measurement import IngestAck, MeasurementPayload
from ..services.config_store import ConfigStore
from ..services.firmware_registry import FirmwareRegistry
from ..services.ingest import MeasurementIngest
from ..services.ota import OtaOutcome, negotiate, record_ota_transition
from ..services.registry import DeviceRegistry

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/sensors", tags=["sensors"])

OTA_STATUS_HEADER = "X-Firmware-Status"


@router.post("/{device_id}/measures", response_model=IngestAck, dependencies=[Depends(require_api_key)])
def post_measures(
    device_id: str,
    payload: MeasurementPayload,
    ingest: MeasurementIngest = Depends(get_ingest),
):
    """
    Receive one telemetry sample from a device.

    The device row is created on first contact. Absent readings are stored
    as null and the timestamp is assigned here.
    """
    row = ingest.record(device_id, payload)
    return IngestAck(timestamp=row.timestamp)


@router.get(
    "/{device_id}/one/config",
    response_model=DeviceConfigDocument,
    dependencies=[Depends(require_api_key)],
)
def get_device_config(
    device_id: str,
    registry: DeviceRegistry = Depends(get_registry),
    store: ConfigStore = Depends(get_config_store),
):
    """Hand the device its operating parameters, registering it if unseen."""
    device = registry.register_contact(device_id)
    config = store.get(device.device_id)
    LOGGER.info("Configuration sent to %s", device.device_id)
    return config


@router.get("/{device_id}/generic/os/firmware.bin", dependencies=[Depends(require_api_key)])
@router.get("/{device_id}/firmware.bin", dependencies=[Depends(require_api_key)])
def get_firmware(
    device_id: str,
    current_firmware: Optional[str] = Query(None, description="Version the device is running"),
    db: Session = Depends(get_db),
    firmware_registry: FirmwareRegistry = Depends(get_firmware_registry),
):
    """
    OTA negotiation.

    - 200: latest image streamed
    - 304: device already runs the latest version
    - 400: development/snapshot build, empty body
    - 404: no firmware cataloged, or its file is missing
    - 500: storage failure
    """
    try:
        decision = negotiate(
            firmware_registry.latest(),
            current_firmware,
            settings.ota_non_release_markers,
        )

        if decision.outcome is OtaOutcome.NOT_AVAILABLE:
            LOGGER.info("OTA request from %s: no firmware available", device_id)
            return Response(status_code=404, headers={OTA_STATUS_HEADER: "not-available"})

        if decision.outcome is OtaOutcome.UNKNOWN_VERSION:
            LOGGER.info("OTA request from %s rejected: unknown version %s", device_id, decision.current_version)
            return Response(status_code=400)

        if decision.outcome is OtaOutcome.UP_TO_DATE:
            return Response(
                status_code=304,
                headers={OTA_STATUS_HEADER: f"Firmware {decision.current_version} is already the latest version"},
            )

        firmware = decision.firmware
        path = Path(firmware.file_path)
        if not path.is_file():
            LOGGER.error("Firmware %s is cataloged but its file is missing: %s", firmware.version, path)
            return Response(status_code=404, headers={OTA_STATUS_HEADER: "file-missing"})

        record_ota_transition(db, device_id, decision)
    except (SQLAlchemyError, OSError):
        LOGGER.exception("OTA negotiation failed for %s", device_id)
        db.rollback()
        return Response(status_code=500)

    return FileResponse(
        path,
        media_type="application/octet-stream",
        filename=firmware.filename,
        headers={OTA_STATUS_HEADER: f"update:{firmware.version}"},
    )
