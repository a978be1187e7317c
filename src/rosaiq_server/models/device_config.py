"""
SQLAlchemy model for DeviceConfig entity.

One row per device holding the operating parameters the device fetches on boot.
Rows are created from the configured defaults on first access.
"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from ..clock import utc_now
from ..database import Base

CONFIG_FIELDS = (
    "country",
    "pm_standard",
    "led_bar_mode",
    "abc_days",
    "tvoc_learning_offset",
    "nox_learning_offset",
    "mqtt_broker_url",
    "temperature_unit",
    "configuration_control",
    "post_data_to_airgradient",
    "led_bar_brightness",
    "display_brightness",
)


class DeviceConfig(Base):
    """Operating parameters for a single device."""

    __tablename__ = "device_configs"

    # Columns
    device_id = Column(String(128), ForeignKey("devices.device_id", ondelete="CASCADE"), primary_key=True)
    country = Column(String(8), nullable=False)
    pm_standard = Column(String(16), nullable=False)
    led_bar_mode = Column(String(16), nullable=False)
    abc_days = Column(Integer, nullable=False)
    tvoc_learning_offset = Column(Integer, nullable=False)
    nox_learning_offset = Column(Integer, nullable=False)
    mqtt_broker_url = Column(String(255), nullable=False)
    temperature_unit = Column(String(4), nullable=False)
    configuration_control = Column(String(16), nullable=False)
    post_data_to_airgradient = Column(Boolean, nullable=False)
    led_bar_brightness = Column(Integer, nullable=False)
    display_brightness = Column(Integer, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    # Relationships
    device = relationship("Device", back_populates="config")

    def __repr__(self):
        return f"<DeviceConfig(device_id={self.device_id}, led_bar_mode={self.led_bar_mode})>"
