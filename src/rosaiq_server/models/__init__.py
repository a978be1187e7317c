"""SQLAlchemy ORM models."""
from .user import User
from .device import Device
from .device_config import DeviceConfig
from .measurement import Measurement
from .event import Event
from .firmware import Firmware

__all__ = [
    "User",
    "Device",
    "DeviceConfig",
    "Measurement",
    "Event",
    "Firmware",
]
