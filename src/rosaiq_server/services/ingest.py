"""
Measurement ingest.

Appends one immutable telemetry row per device post. Timestamps are assigned
here, in UTC, and never taken from the payload.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..clock import as_utc, utc_now
from ..models.event import EVENT_MEASUREMENT_RECEIVED
from ..models.measurement import Measurement
from ..schemas.measurement import MeasurementPayload
from .events import append_event
from .registry import DeviceRegistry

LOGGER = logging.getLogger(__name__)

_TICK = timedelta(microseconds=1)


class MeasurementIngest:
    """Validates and stores device telemetry."""

    def __init__(self, db: Session, registry: DeviceRegistry) -> None:
        self.db = db
        self.registry = registry

    def record(self, device_id: str, sample: MeasurementPayload) -> Measurement:
        """Store ``sample`` for ``device_id``, registering the device if needed."""
        device = self.registry.register_contact(
            device_id,
            model=sample.model,
            firmware_version=sample.firmware,
        )
        timestamp = self._next_timestamp(device.device_id)
        row = Measurement(device_id=device.device_id, timestamp=timestamp, **sample.readings())
        self.db.add(row)
        append_event(
            self.db,
            device.device_id,
            EVENT_MEASUREMENT_RECEIVED,
            {"co2": sample.rco2, "pm25": sample.pm02, "temp": sample.atmp},
            timestamp=timestamp,
        )
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(row)
        LOGGER.info(
            "Data received from %s: co2=%s pm25=%s temp=%s humidity=%s",
            device.device_id,
            sample.rco2,
            sample.pm02,
            sample.atmp,
            sample.rhum,
        )
        return row

    def _next_timestamp(self, device_id: str) -> datetime:
        # Per-device ordering stays strictly increasing even if the clock stalls.
        now = utc_now()
        latest = as_utc(
            self.db.query(func.max(Measurement.timestamp))
            .filter(Measurement.device_id == device_id)
            .scalar()
        )
        if latest is not None and now <= latest:
            return latest + _TICK
        return now


def query_measurements(
    db: Session,
    device_id: str,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: int = 1000,
) -> List[Measurement]:
    """Measurements for one device within ``[start, end]``, newest first."""
    query = db.query(Measurement).filter(Measurement.device_id == device_id)
    if start is not None:
        query = query.filter(Measurement.timestamp >= as_utc(start))
    if end is not None:
        query = query.filter(Measurement.timestamp <= as_utc(end))
    return query.order_by(Measurement.timestamp.desc(), Measurement.id.desc()).limit(limit).all()


def latest_measurement(db: Session, device_id: str) -> Optional[Measurement]:
    return (
        db.query(Measurement)
        .filter(Measurement.device_id == device_id)
        .order_by(Measurement.timestamp.desc(), Measurement.id.desc())
        .first()
    )
