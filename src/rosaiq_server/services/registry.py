"""
Device identity and registry.

Resolves the identifier a device uses on the wire to a durable device row,
creating it on first contact. Creation is a single upsert keyed by the
identifier, so simultaneous first contacts converge on one row.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..clock import utc_now
from ..database import dialect_insert
from ..errors import DuplicateSerialError, InvalidInputError, NotFoundError
from ..models.device import Device, STATUS_ACTIVE

LOGGER = logging.getLogger(__name__)

MAX_DEVICE_ID_LENGTH = 128


def serial_from_device_id(device_id: str, prefixes: Sequence[str]) -> str:
    """Strip the vendor prefix (``airgradient:``, ...) from a wire identifier."""
    lowered = device_id.lower()
    for prefix in prefixes:
        if prefix and lowered.startswith(prefix.lower()) and len(device_id) > len(prefix):
            return device_id[len(prefix):]
    return device_id


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


class DeviceRegistry:
    """Lookup and first-contact registration of devices."""

    def __init__(self, db: Session, id_prefixes: Sequence[str] = ()) -> None:
        self.db = db
        self._prefixes = tuple(id_prefixes)

    def get(self, device_id: str) -> Optional[Device]:
        return self.db.get(Device, device_id)

    def require(self, device_id: str) -> Device:
        device = self.get(device_id)
        if device is None:
            raise NotFoundError(f"Device {device_id} not found")
        return device

    def by_serial(self, serial_number: str) -> Optional[Device]:
        return self.db.query(Device).filter(Device.serial_number == serial_number).first()

    def list_all(self) -> List[Device]:
        return self.db.query(Device).order_by(Device.last_seen.desc()).all()

    def register_contact(
        self,
        device_id: str,
        model: Optional[str] = None,
        firmware_version: Optional[str] = None,
    ) -> Device:
        """Ensure a device that just called in, deriving its serial from the wire id."""
        device_id = self._validate_id(device_id)
        return self.ensure(
            device_id,
            serial_from_device_id(device_id, self._prefixes),
            model=model,
            firmware_version=firmware_version,
        )

    def ensure(
        self,
        device_id: str,
        serial_number: str,
        model: Optional[str] = None,
        firmware_version: Optional[str] = None,
    ) -> Device:
        """
        Create the device on first contact, otherwise refresh it.

        Existing rows always get ``last_seen`` bumped; ``model`` and
        ``firmware_version`` only change when a non-empty value is supplied.

        Raises:
            DuplicateSerialError: the serial number belongs to another identifier
        """
        device_id = self._validate_id(device_id)
        serial_number = _clean(serial_number)
        if serial_number is None:
            raise InvalidInputError("serial_number is required")

        existed = self.get(device_id) is not None
        now = utc_now()
        stmt = dialect_insert(self.db, Device).values(
            device_id=device_id,
            serial_number=serial_number,
            model=_clean(model),
            firmware_version=_clean(firmware_version),
            first_seen=now,
            last_seen=now,
            status=STATUS_ACTIVE,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Device.device_id],
            set_={
                "last_seen": stmt.excluded.last_seen,
                "model": func.coalesce(stmt.excluded.model, Device.model),
                "firmware_version": func.coalesce(stmt.excluded.firmware_version, Device.firmware_version),
            },
        )
        try:
            self.db.execute(stmt)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            LOGGER.warning("Serial number collision for %s (serial %s)", device_id, serial_number)
            raise DuplicateSerialError(
                f"Serial number {serial_number} is already registered to another device"
            ) from exc

        if not existed:
            LOGGER.info("New device registered: %s", device_id)
        return self.db.get(Device, device_id, populate_existing=True)

    def update_metadata(self, device: Device, changes: dict) -> Device:
        for key, value in changes.items():
            setattr(device, key, value)
        self.db.commit()
        self.db.refresh(device)
        return device

    @staticmethod
    def _validate_id(device_id: str) -> str:
        cleaned = _clean(device_id)
        if cleaned is None:
            raise InvalidInputError("Device identifier is required")
        if len(cleaned) > MAX_DEVICE_ID_LENGTH:
            raise InvalidInputError(f"Device identifier exceeds {MAX_DEVICE_ID_LENGTH} characters")
        return cleaned
