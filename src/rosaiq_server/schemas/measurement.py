"""
Pydantic schemas for telemetry ingest and measurement queries.
"""
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ..models.device import Device
from ..models.measurement import READING_FIELDS
from .common import UtcDatetime

_METADATA_WIDTHS = {
    "model": Device.__table__.c.model.type.length,
    "firmware": Device.__table__.c.firmware_version.type.length,
}


def _alias(camel: str, snake: str) -> Any:
    return Field(None, validation_alias=AliasChoices(camel, snake))


class MeasurementPayload(BaseModel):
    """
    Sample posted by a device.

    Every reading is optional. Any client-side timestamp is ignored; the
    server stamps the row at write time.
    """
    wifi_rssi: Optional[int] = _alias("wifi", "wifi_rssi")
    rco2: Optional[int] = None
    pm01: Optional[float] = None
    pm02: Optional[float] = None
    pm10: Optional[float] = None
    pm02_compensated: Optional[float] = _alias("pm02Compensated", "pm02_compensated")
    pm003_count: Optional[int] = _alias("pm003Count", "pm003_count")
    pm005_count: Optional[int] = _alias("pm005Count", "pm005_count")
    pm01_count: Optional[int] = _alias("pm01Count", "pm01_count")
    pm02_count: Optional[int] = _alias("pm02Count", "pm02_count")
    pm50_count: Optional[int] = _alias("pm50Count", "pm50_count")
    pm10_count: Optional[int] = _alias("pm10Count", "pm10_count")
    atmp: Optional[float] = None
    atmp_compensated: Optional[float] = _alias("atmpCompensated", "atmp_compensated")
    rhum: Optional[float] = None
    rhum_compensated: Optional[float] = _alias("rhumCompensated", "rhum_compensated")
    tvoc_index: Optional[int] = _alias("tvocIndex", "tvoc_index")
    tvoc_raw: Optional[int] = _alias("tvocRaw", "tvoc_raw")
    nox_index: Optional[int] = _alias("noxIndex", "nox_index")
    nox_raw: Optional[int] = _alias("noxRaw", "nox_raw")
    boot: Optional[int] = None

    # Device metadata, applied to the device record only when non-empty
    model: Optional[str] = None
    firmware: Optional[str] = None

    model_config = ConfigDict(extra="ignore", protected_namespaces=())

    @field_validator("model", "firmware")
    @classmethod
    def _fit_metadata_column(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        """Clip metadata to the device column widths; the readings are kept."""
        if value is None:
            return None
        return value.strip()[:_METADATA_WIDTHS[info.field_name]]

    def readings(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in READING_FIELDS}


class MeasurementOut(BaseModel):
    """Stored telemetry row."""
    id: int
    device_id: str
    timestamp: UtcDatetime
    wifi_rssi: Optional[int] = None
    rco2: Optional[int] = None
    pm01: Optional[float] = None
    pm02: Optional[float] = None
    pm10: Optional[float] = None
    pm02_compensated: Optional[float] = None
    pm003_count: Optional[int] = None
    pm005_count: Optional[int] = None
    pm01_count: Optional[int] = None
    pm02_count: Optional[int] = None
    pm50_count: Optional[int] = None
    pm10_count: Optional[int] = None
    atmp: Optional[float] = None
    atmp_compensated: Optional[float] = None
    rhum: Optional[float] = None
    rhum_compensated: Optional[float] = None
    tvoc_index: Optional[int] = None
    tvoc_raw: Optional[int] = None
    nox_index: Optional[int] = None
    nox_raw: Optional[int] = None
    boot: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class IngestAck(BaseModel):
    """Response returned to a device after a measurement post."""
    success: bool = True
    message: str = "Data received successfully"
    timestamp: UtcDatetime
