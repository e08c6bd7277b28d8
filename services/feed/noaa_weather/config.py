"""Configuration management for the weather feed."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Literal, Optional, Union

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

NotificationState = Literal["normal", "alert", "warn", "alarm", "emergency"]


@dataclass
class NWSConfig:
    """api.weather.gov transport configuration."""
    base_url: str = "https://api.weather.gov"
    timeout: int = 30
    max_retries: int = 0
    retry_delay: int = 5
    user_agent: str = "noaa-weather-feed/1.0 (https://github.com/noaa-weather-feed)"

    @classmethod
    def from_env(cls) -> "NWSConfig":
        """Load NWS config from environment variables."""
        return cls(
            base_url=os.getenv("NWS_BASE_URL", "https://api.weather.gov"),
            timeout=int(os.getenv("NWS_TIMEOUT", "30")),
            max_retries=int(os.getenv("NWS_MAX_RETRIES", "0")),
            retry_delay=int(os.getenv("NWS_RETRY_DELAY", "5")),
            user_agent=os.getenv("NWS_USER_AGENT", cls.user_agent),
        )


class PluginSettings(BaseSettings):
    """Plugin options, as configured by the host."""

    station: Optional[str] = Field(
        default=None,
        title="Observation Station",
        description="NOAA Station Name (leave blank to use the closest)",
    )
    forecast_station: Optional[str] = Field(
        default=None,
        title="Forecast Station",
        description="NOAA Station Name (leave blank to use the closest)",
    )
    send_notifications: bool = Field(default=True, title="Send Notifications")
    notification_regions: str = Field(
        default="MD",
        title="Notification States",
        description="Comma separated list of US state abbreviations",
    )
    notification_visual: Optional[bool] = Field(default=None, title="Notification Method Visual")
    notification_sound: Optional[bool] = Field(default=None, title="Notification Method Sound")
    notification_state: NotificationState = Field(default="alert", title="Notification State")

    observations_interval: float = Field(default=60, gt=0, title="Observations Interval", description="in seconds")
    forecast_interval: float = Field(default=60 * 60, gt=0, title="Forecast Interval", description="in seconds")
    notifications_interval: float = Field(
        default=60 * 60, gt=0, title="Notifications Interval", description="in seconds"
    )
    initial_delay: float = Field(default=5, ge=0, title="Initial Delay", description="in seconds")

    model_config = SettingsConfigDict(
        env_prefix="NOAA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("station", "forecast_station")
    @classmethod
    def _blank_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @property
    def regions(self) -> List[str]:
        """Configured alert regions, trimmed, empties dropped."""
        return [r.strip() for r in self.notification_regions.split(",") if r.strip()]

    @property
    def default_method(self) -> List[str]:
        """Delivery method for newly raised notifications."""
        if self.notification_visual is None and self.notification_sound is None:
            return ["visual", "sound"]
        method = []
        if self.notification_visual:
            method.append("visual")
        if self.notification_sound:
            method.append("sound")
        return method

    @property
    def notifications_enabled(self) -> bool:
        return self.send_notifications and bool(self.regions)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "PluginSettings":
        """Load settings from a YAML file; environment still fills the gaps."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)


def get_settings() -> PluginSettings:
    """Get plugin settings from the environment"""
    return PluginSettings()
