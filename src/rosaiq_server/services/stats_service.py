"""
Aggregates for the dashboard: per-device stats and the fleet summary.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..clock import as_utc, utc_now
from ..models.device import Device
from ..models.measurement import Measurement
from ..models.user import User
from ..schemas.device import DeviceStats
from ..schemas.stats import FleetAverages, SummaryResponse
from .access import visible_devices


def is_online(device: Device, online_seconds: int, now: Optional[datetime] = None) -> bool:
    """True if the device made contact within ``online_seconds``."""
    last_seen = as_utc(device.last_seen)
    if last_seen is None:
        return False
    current_time = as_utc(now) or utc_now()
    return (current_time - last_seen).total_seconds() < online_seconds


def device_stats(db: Session, device_id: str) -> DeviceStats:
    row = (
        db.query(
            func.count(Measurement.id),
            func.min(Measurement.timestamp),
            func.max(Measurement.timestamp),
            func.avg(Measurement.rco2),
            func.avg(Measurement.pm02),
            func.avg(Measurement.atmp),
            func.avg(Measurement.rhum),
        )
        .filter(Measurement.device_id == device_id)
        .one()
    )
    total, first, last, avg_co2, avg_pm25, avg_temp, avg_humidity = row
    return DeviceStats(
        total_measurements=total or 0,
        first_measurement=as_utc(first),
        last_measurement=as_utc(last),
        avg_co2=_as_float(avg_co2),
        avg_pm25=_as_float(avg_pm25),
        avg_temp=_as_float(avg_temp),
        avg_humidity=_as_float(avg_humidity),
    )


def fleet_summary(
    db: Session,
    user: User,
    active_window_minutes: int,
    now: Optional[datetime] = None,
) -> SummaryResponse:
    """
    Summary over the devices ``user`` can see.

    Fleet averages are the mean of per-device averages, skipping devices
    without readings for that metric.
    """
    current_time = as_utc(now) or utc_now()
    devices = visible_devices(db, user)
    device_ids = devices.with_entities(Device.device_id).statement

    total_devices = devices.count()
    active_cutoff = current_time - timedelta(minutes=active_window_minutes)
    active_devices = devices.filter(Device.last_seen >= active_cutoff).count()

    total_measurements = (
        db.query(func.count(Measurement.id))
        .filter(Measurement.device_id.in_(device_ids))
        .scalar()
        or 0
    )

    per_device = (
        db.query(func.avg(Measurement.rco2), func.avg(Measurement.pm02))
        .filter(Measurement.device_id.in_(device_ids))
        .group_by(Measurement.device_id)
        .all()
    )
    co2_values = [float(co2) for co2, _ in per_device if co2 is not None]
    pm25_values = [float(pm25) for _, pm25 in per_device if pm25 is not None]

    averages = FleetAverages(
        co2=round(sum(co2_values) / len(co2_values)) if co2_values else None,
        pm25=round(sum(pm25_values) / len(pm25_values), 1) if pm25_values else None,
    )
    return SummaryResponse(
        total_devices=total_devices,
        active_devices=active_devices,
        total_measurements=total_measurements,
        averages=averages,
    )


def _as_float(value) -> Optional[float]:
    return float(value) if value is not None else None
