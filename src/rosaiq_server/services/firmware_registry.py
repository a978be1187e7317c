"""
Versioned firmware catalog.

"Latest" means most recently uploaded, not highest version.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..clock import utc_now
from ..errors import DuplicateVersionError, NotFoundError
from ..models.firmware import Firmware

LOGGER = logging.getLogger(__name__)


class FirmwareRegistry:
    """Catalog rows for stored firmware artifacts. Files are the caller's job."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def add(
        self,
        version: str,
        filename: str,
        path: str,
        size: int,
        uploaded_by: Optional[str],
        notes: Optional[str] = None,
    ) -> Firmware:
        """
        Insert a catalog row.

        Raises:
            DuplicateVersionError: ``version`` is already cataloged. The
                caller must discard the uploaded file.
        """
        if self.by_version(version) is not None:
            raise DuplicateVersionError(f"Firmware version {version} already exists")
        firmware = Firmware(
            version=version,
            filename=filename,
            file_path=path,
            file_size=size,
            uploaded_by=uploaded_by,
            notes=notes,
            uploaded_at=utc_now(),
        )
        self.db.add(firmware)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateVersionError(f"Firmware version {version} already exists") from exc
        self.db.refresh(firmware)
        LOGGER.info("Firmware %s cataloged (%d bytes)", version, size)
        return firmware

    def latest(self) -> Optional[Firmware]:
        return (
            self.db.query(Firmware)
            .order_by(Firmware.uploaded_at.desc(), Firmware.id.desc())
            .first()
        )

    def by_version(self, version: str) -> Optional[Firmware]:
        return self.db.query(Firmware).filter(Firmware.version == version).first()

    def get(self, firmware_id: int) -> Optional[Firmware]:
        return self.db.get(Firmware, firmware_id)

    def list_all(self) -> List[Firmware]:
        return self.db.query(Firmware).order_by(Firmware.uploaded_at.desc(), Firmware.id.desc()).all()

    def remove(self, firmware_id: int) -> Firmware:
        """Delete the catalog row and return it so the caller can drop the file."""
        firmware = self.get(firmware_id)
        if firmware is None:
            raise NotFoundError(f"Firmware {firmware_id} not found")
        self.db.delete(firmware)
        self.db.commit()
        LOGGER.info("Firmware %s removed from catalog", firmware.version)
        return firmware
