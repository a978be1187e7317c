"""
Pydantic schemas for fleet summary and maintenance endpoints.
"""
from typing import Optional

from pydantic import BaseModel, Field


class FleetAverages(BaseModel):
    co2: Optional[int] = None
    pm25: Optional[float] = None


class SummaryResponse(BaseModel):
    """Dashboard summary over the devices visible to the caller."""
    total_devices: int = Field(ge=0, serialization_alias="totalDevices")
    active_devices: int = Field(ge=0, serialization_alias="activeDevices")
    total_measurements: int = Field(ge=0, serialization_alias="totalMeasurements")
    averages: FleetAverages


class SweepResponse(BaseModel):
    success: bool = True
    measurements_deleted: int = Field(ge=0, serialization_alias="measurementsDeleted")
    events_deleted: int = Field(ge=0, serialization_alias="eventsDeleted")
