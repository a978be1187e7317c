"""
Firmware catalog API router.

Any signed-in user may browse the catalog; uploads and deletions are
admin only.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from ..dependencies import (
    get_current_user,
    get_firmware_registry,
    get_firmware_storage,
    require_admin,
)
from ..errors import NotFoundError
from ..models.user import User
from ..schemas.firmware import FirmwareOut
from ..services.firmware_registry import FirmwareRegistry
from ..services.firmware_storage import FirmwareStorage, publish_firmware

LOGGER = logging.getLogger(__name__)

router = APIRouter(tags=["firmware"])


@router.get("", response_model=List[FirmwareOut])
def list_firmware(
    registry: FirmwareRegistry = Depends(get_firmware_registry),
    current_user: User = Depends(get_current_user),
):
    return registry.list_all()


@router.get("/latest", response_model=FirmwareOut)
def get_latest_firmware(
    registry: FirmwareRegistry = Depends(get_firmware_registry),
    current_user: User = Depends(get_current_user),
):
    """The image devices are currently offered."""
    firmware = registry.latest()
    if firmware is None:
        raise NotFoundError("No firmware available")
    return firmware


@router.post("", response_model=FirmwareOut, status_code=201)
def upload_firmware(
    file: UploadFile = File(...),
    version: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    registry: FirmwareRegistry = Depends(get_firmware_registry),
    storage: FirmwareStorage = Depends(get_firmware_storage),
    admin: User = Depends(require_admin),
):
    """
    Upload a firmware image.

    The new version becomes the latest one served to devices. A duplicate
    version returns 409 and leaves nothing behind on disk.
    """
    firmware = publish_firmware(
        storage,
        registry,
        file.file,
        file.filename,
        version,
        uploaded_by=admin.username,
        notes=notes,
    )
    LOGGER.info("Firmware %s uploaded by %s (%d bytes)", firmware.version, admin.username, firmware.file_size)
    return firmware


@router.delete("/{firmware_id}", status_code=204)
def delete_firmware(
    firmware_id: int,
    registry: FirmwareRegistry = Depends(get_firmware_registry),
    storage: FirmwareStorage = Depends(get_firmware_storage),
    admin: User = Depends(require_admin),
):
    """Remove a version from the catalog along with its binary."""
    firmware = registry.remove(firmware_id)
    storage.delete_artifact(firmware)
    LOGGER.info("Firmware %s deleted by %s", firmware.version, admin.username)
    return Response(status_code=204)
