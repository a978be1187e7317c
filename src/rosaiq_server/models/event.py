"""
SQLAlchemy model for Event entity.

Audit trail for ingest, configuration changes, ownership changes and OTA transitions.
"""
from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey, Index

from ..clock import utc_now
from ..database import Base

EVENT_MEASUREMENT_RECEIVED = "measurement_received"
EVENT_CONFIG_UPDATED = "config_updated"
EVENT_OTA_UPDATE = "ota_update"
EVENT_DEVICE_CLAIMED = "device_claimed"
EVENT_DEVICE_ASSIGNED = "device_assigned"
EVENT_DEVICE_UNASSIGNED = "device_unassigned"


class Event(Base):
    """Event model representing one audit record."""

    __tablename__ = "events"

    # Columns
    id = Column(Integer, primary_key=True, autoincrement=True)
    device_id = Column(String(128), ForeignKey("devices.device_id", ondelete="SET NULL"), nullable=True)
    event_type = Column(String(50), nullable=False)
    event_data = Column(JSON, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        Index("idx_events_device_timestamp", "device_id", "timestamp"),
        Index("idx_events_timestamp", "timestamp"),
    )

    def __repr__(self):
        return f"<Event(id={self.id}, device_id={self.device_id}, type={self.event_type})>"
