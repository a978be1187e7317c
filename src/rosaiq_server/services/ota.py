"""
Over-the-air update negotiation.

A device reports the version it runs; the negotiator answers with one of four
outcomes. Versions are compared as opaque strings: a device that reports
anything other than the latest version string is offered the latest image,
even if its own version looks newer.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ..models.device import Device
from ..models.event import EVENT_OTA_UPDATE
from ..models.firmware import Firmware
from .events import append_event

LOGGER = logging.getLogger(__name__)


class OtaOutcome(str, Enum):
    NOT_AVAILABLE = "not_available"
    UNKNOWN_VERSION = "unknown_version"
    UP_TO_DATE = "up_to_date"
    UPDATE = "update"


@dataclass(frozen=True)
class OtaDecision:
    outcome: OtaOutcome
    current_version: Optional[str]
    firmware: Optional[Firmware] = None


def negotiate(
    latest: Optional[Firmware],
    current_version: Optional[str],
    non_release_markers: Iterable[str],
) -> OtaDecision:
    """Decide what to do with an OTA request. Pure; no I/O."""
    current = (current_version or "").strip() or None
    if latest is None:
        return OtaDecision(OtaOutcome.NOT_AVAILABLE, current)
    markers = {marker.strip().lower() for marker in non_release_markers if marker.strip()}
    if current is not None and current.lower() in markers:
        return OtaDecision(OtaOutcome.UNKNOWN_VERSION, current)
    if current == latest.version:
        return OtaDecision(OtaOutcome.UP_TO_DATE, current, latest)
    return OtaDecision(OtaOutcome.UPDATE, current, latest)


def record_ota_transition(db: Session, device_id: str, decision: OtaDecision) -> None:
    """Append the ``ota_update`` event for an image about to be served."""
    firmware = decision.firmware
    known_device = db.get(Device, device_id) is not None
    append_event(
        db,
        device_id if known_device else None,
        EVENT_OTA_UPDATE,
        {
            "device_id": device_id,
            "from_version": decision.current_version,
            "to_version": firmware.version if firmware else None,
        },
    )
    db.commit()
    LOGGER.info(
        "OTA update for %s: %s -> %s",
        device_id,
        decision.current_version or "unknown",
        firmware.version if firmware else None,
    )
