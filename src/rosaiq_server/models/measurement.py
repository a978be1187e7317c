"""
SQLAlchemy model for Measurement entity.

Append-only telemetry rows. Every sensor column is nullable on its own so a
partial sample still lands.
"""
from sqlalchemy import Column, Integer, Float, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from ..database import Base

READING_FIELDS = (
    "wifi_rssi",
    "rco2",
    "pm01",
    "pm02",
    "pm10",
    "pm02_compensated",
    "pm003_count",
    "pm005_count",
    "pm01_count",
    "pm02_count",
    "pm50_count",
    "pm10_count",
    "atmp",
    "atmp_compensated",
    "rhum",
    "rhum_compensated",
    "tvoc_index",
    "tvoc_raw",
    "nox_index",
    "nox_raw",
    "boot",
)


class Measurement(Base):
    """A single telemetry sample stamped by the server."""

    __tablename__ = "measurements"

    # Columns
    id = Column(Integer, primary_key=True, autoincrement=True)
    device_id = Column(String(128), ForeignKey("devices.device_id", ondelete="CASCADE"), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    wifi_rssi = Column(Integer, nullable=True)
    rco2 = Column(Integer, nullable=True)
    pm01 = Column(Float, nullable=True)
    pm02 = Column(Float, nullable=True)
    pm10 = Column(Float, nullable=True)
    pm02_compensated = Column(Float, nullable=True)
    pm003_count = Column(Integer, nullable=True)
    pm005_count = Column(Integer, nullable=True)
    pm01_count = Column(Integer, nullable=True)
    pm02_count = Column(Integer, nullable=True)
    pm50_count = Column(Integer, nullable=True)
    pm10_count = Column(Integer, nullable=True)
    atmp = Column(Float, nullable=True)
    atmp_compensated = Column(Float, nullable=True)
    rhum = Column(Float, nullable=True)
    rhum_compensated = Column(Float, nullable=True)
    tvoc_index = Column(Integer, nullable=True)
    tvoc_raw = Column(Integer, nullable=True)
    nox_index = Column(Integer, nullable=True)
    nox_raw = Column(Integer, nullable=True)
    boot = Column(Integer, nullable=True)

    __table_args__ = (
        Index("idx_measurements_device_timestamp", "device_id", "timestamp"),
        Index("idx_measurements_timestamp", "timestamp"),
    )

    # Relationships
    device = relationship("Device", back_populates="measurements")

    def __repr__(self):
        return f"<Measurement(id={self.id}, device_id={self.device_id}, timestamp={self.timestamp})>"
