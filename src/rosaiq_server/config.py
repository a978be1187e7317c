"""
Configuration module for the RosaIQ sync backend.

Loads and validates environment variables using Pydantic settings.
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class DeviceDefaults:
    """Operating parameters handed to a device before anyone customises them."""
    country: str
    pm_standard: str
    led_bar_mode: str
    abc_days: int
    tvoc_learning_offset: int
    nox_learning_offset: int
    mqtt_broker_url: str
    temperature_unit: str
    configuration_control: str
    post_data_to_airgradient: bool
    led_bar_brightness: int
    display_brightness: int

    def as_columns(self) -> Dict[str, Any]:
        return asdict(self)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    APP_NAME: str = "RosaIQ"
    APP_VERSION: str = "1.0.0"

    # Database
    DATABASE_URL: str = "sqlite:///./rosaiq-airquality.db"
    AUTO_CREATE_TABLES: bool = True

    # Security
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    ADMIN_USERNAME: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    # Machine traffic (devices never carry a user session)
    API_AUTH_ENABLED: bool = False
    API_KEY: Optional[str] = None
    DEVICE_ID_PREFIXES: str = "airgradient:,rosaiq:"

    # CORS
    CORS_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"
    PUBLIC_BASE_URL: Optional[str] = None

    # Firmware
    FIRMWARE_DIR: str = "./firmware"
    FIRMWARE_MAX_SIZE_MB: int = 16
    FIRMWARE_ALLOWED_EXTENSIONS: str = ".bin"
    OTA_NON_RELEASE_MARKERS: str = "snapshot,dev,development"

    # Retention (days)
    RETENTION_MEASUREMENT_DAYS: int = 365
    RETENTION_EVENT_DAYS: int = 90
    RETENTION_SWEEP_INTERVAL_HOURS: int = 24

    # Freshness thresholds
    DEVICE_ONLINE_SECONDS: int = 120
    ACTIVE_WINDOW_MINUTES: int = 10

    MEASUREMENT_QUERY_LIMIT: int = 1000
    MEASUREMENT_QUERY_MAX: int = 10000

    # Device configuration defaults
    DEFAULT_COUNTRY: str = "US"
    DEFAULT_PM_STANDARD: str = "ugm3"
    DEFAULT_LED_BAR_MODE: str = "pm"
    DEFAULT_ABC_DAYS: int = 8
    DEFAULT_TVOC_LEARNING_OFFSET: int = 12
    DEFAULT_NOX_LEARNING_OFFSET: int = 12
    DEFAULT_MQTT_BROKER_URL: str = ""
    DEFAULT_TEMPERATURE_UNIT: str = "c"
    DEFAULT_CONFIGURATION_CONTROL: str = "local"
    DEFAULT_POST_DATA_TO_AIRGRADIENT: bool = False
    DEFAULT_LED_BAR_BRIGHTNESS: int = 100
    DEFAULT_DISPLAY_BRIGHTNESS: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS string into list."""
        return _split_csv(self.CORS_ORIGINS)

    @property
    def device_id_prefixes(self) -> List[str]:
        return _split_csv(self.DEVICE_ID_PREFIXES)

    @property
    def firmware_extensions(self) -> List[str]:
        return [ext.lower() for ext in _split_csv(self.FIRMWARE_ALLOWED_EXTENSIONS)]

    @property
    def ota_non_release_markers(self) -> List[str]:
        return [marker.lower() for marker in _split_csv(self.OTA_NON_RELEASE_MARKERS)]

    @property
    def firmware_max_bytes(self) -> int:
        return self.FIRMWARE_MAX_SIZE_MB * 1024 * 1024

    def device_defaults(self) -> DeviceDefaults:
        return DeviceDefaults(
            country=self.DEFAULT_COUNTRY,
            pm_standard=self.DEFAULT_PM_STANDARD,
            led_bar_mode=self.DEFAULT_LED_BAR_MODE,
            abc_days=self.DEFAULT_ABC_DAYS,
            tvoc_learning_offset=self.DEFAULT_TVOC_LEARNING_OFFSET,
            nox_learning_offset=self.DEFAULT_NOX_LEARNING_OFFSET,
            mqtt_broker_url=self.DEFAULT_MQTT_BROKER_URL,
            temperature_unit=self.DEFAULT_TEMPERATURE_UNIT,
            configuration_control=self.DEFAULT_CONFIGURATION_CONTROL,
            post_data_to_airgradient=self.DEFAULT_POST_DATA_TO_AIRGRADIENT,
            led_bar_brightness=self.DEFAULT_LED_BAR_BRIGHTNESS,
            display_brightness=self.DEFAULT_DISPLAY_BRIGHTNESS,
        )

    def validate_config(self) -> None:
        """Validate critical configuration values."""
        if not self.DATABASE_URL:
            raise ValueError("DATABASE_URL must be set")

        if not self.JWT_SECRET or len(self.JWT_SECRET) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters")

        if self.ACCESS_TOKEN_EXPIRE_MINUTES <= 0:
            raise ValueError("ACCESS_TOKEN_EXPIRE_MINUTES must be positive")

        if self.API_AUTH_ENABLED and not self.API_KEY:
            raise ValueError("API_KEY must be set when API_AUTH_ENABLED is true")

        if self.RETENTION_MEASUREMENT_DAYS <= 0 or self.RETENTION_EVENT_DAYS <= 0:
            raise ValueError("Retention windows must be positive day counts")

        if self.RETENTION_SWEEP_INTERVAL_HOURS < 0:
            raise ValueError("RETENTION_SWEEP_INTERVAL_HOURS must be >= 0")

        if self.FIRMWARE_MAX_SIZE_MB <= 0:
            raise ValueError("FIRMWARE_MAX_SIZE_MB must be positive")

        if not 0 < self.MEASUREMENT_QUERY_LIMIT <= self.MEASUREMENT_QUERY_MAX:
            raise ValueError("MEASUREMENT_QUERY_LIMIT must be between 1 and MEASUREMENT_QUERY_MAX")


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


# Global settings instance
settings = Settings()

# Validate on import
settings.validate_config()
