"""
Per-device configuration store.

Rows are created lazily from an explicit :class:`DeviceDefaults` object with
an insert-or-ignore, so concurrent first reads converge on one row. Updates
apply only the keys present in the patch, on top of whatever is stored.
"""
from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..clock import utc_now
from ..config import DeviceDefaults
from ..database import dialect_insert
from ..errors import NotFoundError
from ..models.device_config import DeviceConfig
from ..schemas.device_config import DeviceConfigPatch

LOGGER = logging.getLogger(__name__)


class ConfigStore:
    """Read/merge access to :class:`DeviceConfig` rows."""

    def __init__(self, db: Session, defaults: DeviceDefaults) -> None:
        self.db = db
        self.defaults = defaults

    def get(self, device_id: str) -> DeviceConfig:
        """Return the stored config, creating it from defaults on first access."""
        self._ensure_row(device_id)
        self.db.commit()
        return self._load(device_id)

    def set(self, device_id: str, patch: DeviceConfigPatch) -> DeviceConfig:
        """Merge ``patch`` onto the current values and return the result."""
        changes = patch.changes()
        self._ensure_row(device_id)
        if changes:
            self.db.execute(
                update(DeviceConfig)
                .where(DeviceConfig.device_id == device_id)
                .values(**changes, updated_at=utc_now())
            )
        self.db.commit()
        if changes:
            LOGGER.info("Configuration updated for %s: %s", device_id, sorted(changes))
        return self._load(device_id)

    def _ensure_row(self, device_id: str) -> None:
        stmt = (
            dialect_insert(self.db, DeviceConfig)
            .values(device_id=device_id, updated_at=utc_now(), **self.defaults.as_columns())
            .on_conflict_do_nothing(index_elements=[DeviceConfig.device_id])
        )
        try:
            self.db.execute(stmt)
        except IntegrityError as exc:
            self.db.rollback()
            raise NotFoundError(f"Device {device_id} not found") from exc

    def _load(self, device_id: str) -> DeviceConfig:
        config = self.db.get(DeviceConfig, device_id, populate_existing=True)
        if config is None:
            raise NotFoundError(f"Configuration for device {device_id} not found")
        return config
