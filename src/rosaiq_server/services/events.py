"""Append-only audit trail helpers."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..clock import utc_now
from ..models.event import Event


def append_event(
    db: Session,
    device_id: Optional[str],
    event_type: str,
    data: Optional[Dict[str, Any]] = None,
    *,
    timestamp: Optional[datetime] = None,
) -> Event:
    """Stage an event on ``db``. The caller owns the commit."""
    event = Event(
        device_id=device_id,
        event_type=event_type,
        event_data=data,
        timestamp=timestamp or utc_now(),
    )
    db.add(event)
    return event


def recent_events(db: Session, device_id: str, limit: int = 100) -> List[Event]:
    return (
        db.query(Event)
        .filter(Event.device_id == device_id)
        .order_by(Event.timestamp.desc(), Event.id.desc())
        .limit(limit)
        .all()
    )
