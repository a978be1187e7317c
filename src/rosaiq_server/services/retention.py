"""
Retention sweeper.

Deletes telemetry and audit rows older than their configured windows. Device
and config rows are never touched. A non-blocking lock keeps two sweeps from
overlapping, whether they come from the scheduler or an admin trigger.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from ..clock import as_utc, utc_now
from ..errors import SweepInProgressError
from ..models.event import Event
from ..models.measurement import Measurement

LOGGER = logging.getLogger(__name__)

SWEEP_JOB_ID = "retention-sweep"


@dataclass(frozen=True)
class SweepResult:
    measurements_deleted: int
    events_deleted: int


class RetentionSweeper:
    """Bulk deletion of rows that fell out of the retention windows."""

    def __init__(self, measurement_days: int, event_days: int) -> None:
        self.measurement_days = measurement_days
        self.event_days = event_days
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def sweep(self, db: Session, now: Optional[datetime] = None) -> SweepResult:
        """
        Delete expired measurements and events as of ``now``.

        Raises:
            SweepInProgressError: another sweep holds the lock
        """
        if not self._lock.acquire(blocking=False):
            raise SweepInProgressError("A retention sweep is already running")
        try:
            reference = as_utc(now) or utc_now()
            measurement_cutoff = reference - timedelta(days=self.measurement_days)
            event_cutoff = reference - timedelta(days=self.event_days)
            try:
                measurements_deleted = (
                    db.query(Measurement)
                    .filter(Measurement.timestamp < measurement_cutoff)
                    .delete(synchronize_session=False)
                )
                events_deleted = (
                    db.query(Event)
                    .filter(Event.timestamp < event_cutoff)
                    .delete(synchronize_session=False)
                )
                db.commit()
            except Exception:
                db.rollback()
                raise
        finally:
            self._lock.release()

        LOGGER.info(
            "Retention sweep removed %d measurement(s) older than %s and %d event(s) older than %s",
            measurements_deleted,
            measurement_cutoff.date().isoformat(),
            events_deleted,
            event_cutoff.date().isoformat(),
        )
        return SweepResult(measurements_deleted=measurements_deleted, events_deleted=events_deleted)

    def sweep_with_session(self, session_factory: Callable[[], Session]) -> Optional[SweepResult]:
        """Scheduler entry point: own session, and a skipped run is not an error."""
        db = session_factory()
        try:
            return self.sweep(db)
        except SweepInProgressError:
            LOGGER.info("Skipping scheduled retention sweep; another sweep is running")
            return None
        finally:
            db.close()


def start_sweep_scheduler(
    sweeper: RetentionSweeper,
    session_factory: Callable[[], Session],
    interval_hours: int,
) -> Optional[AsyncIOScheduler]:
    """Run the sweeper every ``interval_hours``. Returns None when disabled."""
    if interval_hours <= 0:
        LOGGER.info("Periodic retention sweep disabled")
        return None

    async def _run_sweep() -> None:
        try:
            await asyncio.to_thread(sweeper.sweep_with_session, session_factory)
        except Exception:
            LOGGER.exception("Scheduled retention sweep failed")

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        _run_sweep,
        trigger=IntervalTrigger(hours=interval_hours),
        id=SWEEP_JOB_ID,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.start()
    LOGGER.info("Retention sweep scheduled every %d hour(s)", interval_hours)
    return scheduler
