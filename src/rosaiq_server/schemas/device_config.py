"""
Pydantic schemas for device configuration documents.

Devices speak camelCase. The patch type records which keys were actually
supplied so that a merge never confuses "absent" with "zero" or "false".
"""
from typing import Any, Dict, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from .common import UtcDatetime

PmStandard = Literal["ugm3", "us-aqi"]
LedBarMode = Literal["co2", "pm", "off"]
TemperatureUnit = Literal["c", "f"]
ConfigurationControl = Literal["local", "cloud", "both"]


class DeviceConfigDocument(BaseModel):
    """Exact parameter set returned to a device on config fetch."""
    country: str
    pm_standard: str = Field(serialization_alias="pmStandard")
    led_bar_mode: str = Field(serialization_alias="ledBarMode")
    abc_days: int = Field(serialization_alias="abcDays")
    tvoc_learning_offset: int = Field(serialization_alias="tvocLearningOffset")
    nox_learning_offset: int = Field(serialization_alias="noxLearningOffset")
    mqtt_broker_url: str = Field(serialization_alias="mqttBrokerUrl")
    temperature_unit: str = Field(serialization_alias="temperatureUnit")
    configuration_control: str = Field(serialization_alias="configurationControl")
    post_data_to_airgradient: bool = Field(serialization_alias="postDataToAirGradient")
    led_bar_brightness: int = Field(serialization_alias="ledBarBrightness")
    display_brightness: int = Field(serialization_alias="displayBrightness")

    model_config = ConfigDict(from_attributes=True)


class DeviceConfigResponse(DeviceConfigDocument):
    """Dashboard view of a device configuration."""
    device_id: str = Field(serialization_alias="deviceId")
    updated_at: UtcDatetime = Field(serialization_alias="updatedAt")


class BootstrapConfigDocument(DeviceConfigDocument):
    """Device-facing bootstrap document served from ``/config``."""
    base_url: str = Field(serialization_alias="baseUrl")
    firmware_url: str = Field(serialization_alias="firmwareUrl")


def _choices(camel: str, snake: str) -> AliasChoices:
    return AliasChoices(camel, snake)


class DeviceConfigPatch(BaseModel):
    """Partial configuration update. Only supplied keys are applied."""
    country: Optional[str] = Field(None, min_length=2, max_length=8)
    pm_standard: Optional[PmStandard] = Field(None, validation_alias=_choices("pmStandard", "pm_standard"))
    led_bar_mode: Optional[LedBarMode] = Field(None, validation_alias=_choices("ledBarMode", "led_bar_mode"))
    abc_days: Optional[int] = Field(None, ge=0, validation_alias=_choices("abcDays", "abc_days"))
    tvoc_learning_offset: Optional[int] = Field(
        None, ge=0, validation_alias=_choices("tvocLearningOffset", "tvoc_learning_offset")
    )
    nox_learning_offset: Optional[int] = Field(
        None, ge=0, validation_alias=_choices("noxLearningOffset", "nox_learning_offset")
    )
    mqtt_broker_url: Optional[str] = Field(
        None, max_length=255, validation_alias=_choices("mqttBrokerUrl", "mqtt_broker_url")
    )
    temperature_unit: Optional[TemperatureUnit] = Field(
        None, validation_alias=_choices("temperatureUnit", "temperature_unit")
    )
    configuration_control: Optional[ConfigurationControl] = Field(
        None, validation_alias=_choices("configurationControl", "configuration_control")
    )
    post_data_to_airgradient: Optional[bool] = Field(
        None, validation_alias=_choices("postDataToAirGradient", "post_data_to_airgradient")
    )
    led_bar_brightness: Optional[int] = Field(
        None, ge=0, le=100, validation_alias=_choices("ledBarBrightness", "led_bar_brightness")
    )
    display_brightness: Optional[int] = Field(
        None, ge=0, le=100, validation_alias=_choices("displayBrightness", "display_brightness")
    )

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="after")
    def _reject_explicit_nulls(self):
        nulls = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self

    def changes(self) -> Dict[str, Any]:
        """Column values for every supplied key, zero and false included."""
        return self.model_dump(exclude_unset=True)
