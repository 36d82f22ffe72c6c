"""Application configuration pulled from environment variables via pydantic."""
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from peak_report.domain import Coordinate, ReportConfig
from utils.logging_utils import get_tagged_logger, mask_webhook_url

logger = get_tagged_logger(__name__, tag="peak_report/config")


class Settings(BaseSettings):
    """Environment-driven configuration for the peak report service."""
    model_config = SettingsConfigDict(env_prefix="PEAK_", extra="ignore")

    # Mission Peak: Stanford Ave staging area and the summit pole.
    trailhead_latitude: float = 37.5302
    trailhead_longitude: float = -121.9107
    trailhead_elevation: float = 120.0
    summit_latitude: float = 37.5126
    summit_longitude: float = -121.8806
    summit_elevation: float = 767.0

    timezone: str = "America/Los_Angeles"
    forecast_days: int | None = None
    request_timeout_seconds: float = 10.0
    default_target_hour: int = 5
    report_title: str = "Mission Peak"

    slack_webhook_url: str | None = None
    slack_signing_secret: str | None = None
    slash_command: str = "/mission-weather"

    schedule_enabled: bool = True
    schedule_hour: int = 20
    schedule_minute: int = 0

    log_level: str = "INFO"

    @field_validator("default_target_hour", "schedule_hour", mode="after")
    @classmethod
    def check_hour(cls, v: int) -> int:
        """Hours are wall-clock hours of the day."""
        if not 0 <= v <= 23:
            raise ValueError(f"hour must be between 0 and 23, got {v}")
        return v

    @field_validator("schedule_minute", mode="after")
    @classmethod
    def check_minute(cls, v: int) -> int:
        """Minutes within the hour."""
        if not 0 <= v <= 59:
            raise ValueError(f"minute must be between 0 and 59, got {v}")
        return v

    @field_validator("slack_webhook_url", "slack_signing_secret", mode="before")
    @classmethod
    def blank_is_none(cls, v):
        """Treat empty environment values as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def report_config(self) -> ReportConfig:
        """Freeze the report-related settings into a ReportConfig."""
        return ReportConfig(
            trailhead=Coordinate(
                latitude=self.trailhead_latitude,
                longitude=self.trailhead_longitude,
                elevation=self.trailhead_elevation,
            ),
            summit=Coordinate(
                latitude=self.summit_latitude,
                longitude=self.summit_longitude,
                elevation=self.summit_elevation,
            ),
            timezone=self.timezone,
            default_target_hour=self.default_target_hour,
            forecast_days=self.forecast_days,
            request_timeout_seconds=self.request_timeout_seconds,
            report_title=self.report_title,
        )


settings = Settings()


if __name__ == "__main__":
    logger.logger.setLevel("DEBUG")
    dumped = settings.model_dump(exclude={"slack_signing_secret"})
    if dumped.get("slack_webhook_url"):
        dumped["slack_webhook_url"] = mask_webhook_url(dumped["slack_webhook_url"])
    logger.debug(f"Loaded settings: {dumped}")
