from __future__ import annotations

from datetime import timedelta

import pytest

from rosaiq_server.clock import utc_now
from rosaiq_server.errors import SweepInProgressError
from rosaiq_server.models.device import Device
from rosaiq_server.models.device_config import DeviceConfig
from rosaiq_server.models.event import Event
from rosaiq_server.models.measurement import Measurement
from rosaiq_server.services.events import append_event
from rosaiq_server.services.retention import RetentionSweeper, start_sweep_scheduler


@pytest.fixture
def aged_rows(db_session, registry):
    device = registry.register_contact("airgradient:ret01")
    now = utc_now()
    for days in (400, 366, 10):
        db_session.add(Measurement(device_id=device.device_id, timestamp=now - timedelta(days=days), rco2=500))
    for days in (120, 91, 1):
        append_event(db_session, device.device_id, "measurement_received", timestamp=now - timedelta(days=days))
    db_session.add(DeviceConfig(device_id=device.device_id, **_config_columns()))
    db_session.commit()
    return now


def _config_columns():
    return dict(
        country="US",
        pm_standard="ugm3",
        led_bar_mode="pm",
        abc_days=8,
        tvoc_learning_offset=12,
        nox_learning_offset=12,
        mqtt_broker_url="",
        temperature_unit="c",
        configuration_control="local",
        post_data_to_airgradient=False,
        led_bar_brightness=100,
        display_brightness=100,
    )


def test_sweep_deletes_only_expired_rows(db_session, aged_rows):
    result = RetentionSweeper(365, 90).sweep(db_session, now=aged_rows)

    assert result.measurements_deleted == 2
    assert result.events_deleted == 2
    assert db_session.query(Measurement).count() == 1
    assert db_session.query(Event).count() == 1
    assert db_session.query(Device).count() == 1
    assert db_session.query(DeviceConfig).count() == 1


def test_second_sweep_is_a_no_op(db_session, aged_rows):
    sweeper = RetentionSweeper(365, 90)
    sweeper.sweep(db_session, now=aged_rows)

    again = sweeper.sweep(db_session, now=aged_rows)

    assert again.measurements_deleted == 0
    assert again.events_deleted == 0


def test_overlapping_sweep_is_refused(db_session):
    sweeper = RetentionSweeper(365, 90)
    sweeper._lock.acquire()
    try:
        assert sweeper.running
        with pytest.raises(SweepInProgressError):
            sweeper.sweep(db_session)
    finally:
        sweeper._lock.release()
    assert not sweeper.running


def test_scheduled_run_skips_when_busy(session_factory):
    sweeper = RetentionSweeper(365, 90)
    sweeper._lock.acquire()
    try:
        assert sweeper.sweep_with_session(session_factory) is None
    finally:
        sweeper._lock.release()


def test_scheduler_disabled_with_zero_interval(session_factory):
    assert start_sweep_scheduler(RetentionSweeper(365, 90), session_factory, 0) is None


def test_lock_released_after_failure(db_session, monkeypatch):
    sweeper = RetentionSweeper(365, 90)

    def _boom():
        raise RuntimeError("commit failed")

    monkeypatch.setattr(db_session, "commit", _boom)
    with pytest.raises(RuntimeError):
        sweeper.sweep(db_session)

    assert not sweeper.running
