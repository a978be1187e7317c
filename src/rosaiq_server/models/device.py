"""
SQLAlchemy model for Device entity.

Represents a physical air-quality sensor, keyed by the identifier it uses on the wire.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from ..clock import utc_now
from ..database import Base

STATUS_ACTIVE = "active"


class Device(Base):
    """Device model representing a sensor that has contacted the server."""

    __tablename__ = "devices"

    # Columns
    device_id = Column(String(128), primary_key=True)
    serial_number = Column(String(128), nullable=False, unique=True)
    name = Column(String(100), nullable=True)
    custom_name = Column(String(100), nullable=True)
    location = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    model = Column(String(64), nullable=True)
    firmware_version = Column(String(32), nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    first_seen = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    last_seen = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE)

    __table_args__ = (
        Index("idx_devices_last_seen", "last_seen"),
        Index("idx_devices_owner_id", "owner_id"),
    )

    # Relationships
    owner = relationship("User", back_populates="devices")
    config = relationship(
        "DeviceConfig",
        back_populates="device",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    measurements = relationship(
        "Measurement",
        back_populates="device",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def display_name(self) -> str:
        return self.custom_name or self.name or self.serial_number

    def __repr__(self):
        return f"<Device(device_id={self.device_id}, serial={self.serial_number}, owner_id={self.owner_id})>"
