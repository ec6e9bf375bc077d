from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from minitaxi.geo.geolocation import PositionOptions
from minitaxi.profiles import VehicleProfile

# Value shipped in sample configs; never a usable credential
PLACEHOLDER_API_KEY = "YOUR_ORS_API_KEY"


class ORSSettings(BaseSettings):
    api_key: str = Field(
        default="",
        description="OpenRouteService API key. Empty means synthetic routes only.",
    )
    base_url: str = "https://api.openrouteservice.org/v2/directions"
    timeout_seconds: float = Field(
        default=8.0,
        ge=1.0,
        le=30.0,
        description="Overall deadline for one routing request before falling back",
    )

    model_config = SettingsConfigDict(env_prefix="ORS_")

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("ORS base URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        return v.strip()

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key) and self.api_key != PLACEHOLDER_API_KEY


class GeolocationSettings(BaseSettings):
    timeout_seconds: float = Field(default=10.0, gt=0.0, le=60.0)
    maximum_age_seconds: float = Field(default=60.0, ge=0.0)
    enable_high_accuracy: bool = True

    model_config = SettingsConfigDict(env_prefix="GEOLOCATION_")

    def to_options(self) -> PositionOptions:
        return PositionOptions(
            enable_high_accuracy=self.enable_high_accuracy,
            timeout_seconds=self.timeout_seconds,
            maximum_age_seconds=self.maximum_age_seconds,
        )


class TripSettings(BaseSettings):
    default_profile: VehicleProfile = VehicleProfile.CAR
    retain_profile_on_reset: bool = Field(
        default=False,
        description="Keep the selected vehicle profile across reset() instead of reverting",
    )

    model_config = SettingsConfigDict(env_prefix="TRIP_")


class DisplaySettings(BaseSettings):
    currency_symbol: str = "₹"
    notification_seconds: float = Field(default=3.0, gt=0.0, le=30.0)

    model_config = SettingsConfigDict(env_prefix="DISPLAY_")


class LoggingSettings(BaseSettings):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["text", "json"] = "text"
    environment: str = "development"

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    ors: ORSSettings = Field(default_factory=ORSSettings)
    geolocation: GeolocationSettings = Field(default_factory=GeolocationSettings)
    trip: TripSettings = Field(default_factory=TripSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()
