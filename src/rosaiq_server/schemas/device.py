"""
Pydantic schemas for dashboard device endpoints.

Defines request/response models for device listing, detail, ownership and events.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import UtcDatetime
from .measurement import MeasurementOut


class DeviceStats(BaseModel):
    """Aggregates over every stored measurement of one device."""
    total_measurements: int = Field(ge=0)
    first_measurement: Optional[UtcDatetime] = None
    last_measurement: Optional[UtcDatetime] = None
    avg_co2: Optional[float] = None
    avg_pm25: Optional[float] = None
    avg_temp: Optional[float] = None
    avg_humidity: Optional[float] = None


class DeviceListItem(BaseModel):
    """Device list item with basic info and status."""
    device_id: str = Field(description="Wire-level device identifier")
    serial_number: str = Field(description="Hardware serial number")
    name: Optional[str] = None
    custom_name: Optional[str] = None
    display_name: str = Field(description="Custom name, else name, else serial number")
    location: Optional[str] = None
    model: Optional[str] = None
    firmware_version: Optional[str] = None
    owner_id: Optional[int] = Field(None, description="Owning user, null when unassigned")
    first_seen: UtcDatetime
    last_seen: UtcDatetime
    status: str
    is_online: bool = Field(description="True if the device made contact recently")
    latest_measurement: Optional[MeasurementOut] = None

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


class DeviceDetail(DeviceListItem):
    """Detailed device information."""
    notes: Optional[str] = None
    stats: DeviceStats


class DeviceUpdate(BaseModel):
    """Editable device metadata; only supplied keys are written."""
    name: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class CustomNameUpdate(BaseModel):
    custom_name: Optional[str] = Field(None, max_length=100)


class ClaimRequest(BaseModel):
    """A standard user's request to attach an unassigned device."""
    serial_number: Optional[str] = None


class AssignRequest(BaseModel):
    user_id: int


class EventOut(BaseModel):
    id: int
    device_id: Optional[str] = None
    event_type: str
    event_data: Optional[Any] = None
    timestamp: UtcDatetime

    model_config = ConfigDict(from_attributes=True)
