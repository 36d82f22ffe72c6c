"""Domain vocabulary and immutable schemas for the peak weather report.

This module defines the contract between the configuration layer, the
condition analyzer and the report composer: label enums, the coordinates and
route profile the report is built for, and the analysis payload. No
interpretation logic lives here.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class _FrozenBaseModel(BaseModel):
    """Base model with strict extra handling and immutable instances."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class WindStrength(str, Enum):
    """Human description of a wind speed bucket."""
    CALM = "Calm"
    LIGHT_BREEZE = "Light breeze"
    MODERATE_BREEZE = "Moderate breeze"
    STRONG_BREEZE = "Strong breeze"
    HIGH_WINDS = "High winds"


class GloveAdvice(str, Enum):
    """How strongly gloves are recommended for the hike."""
    DEFINITELY = "Yes, definitely"
    RECOMMENDED = "Yes, recommended"
    MAYBE = "Maybe, if you run cold"
    NO = "No"


class ThunderstormPotential(str, Enum):
    """Thunderstorm potential derived from CAPE."""
    HIGH = "High"
    MODERATE = "Moderate"
    LOW = "Low"


class AirQualityCategory(str, Enum):
    """US AQI categories."""
    GOOD = "Good"
    MODERATE = "Moderate"
    UNHEALTHY_FOR_SENSITIVE_GROUPS = "Unhealthy for Sensitive Groups"
    UNHEALTHY = "Unhealthy"
    VERY_UNHEALTHY = "Very Unhealthy"
    HAZARDOUS = "Hazardous"


class Coordinate(_FrozenBaseModel):
    """A forecast point. Elevation is in metres, as Open-Meteo expects it."""
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    elevation: float


class RouteProfile(_FrozenBaseModel):
    """Fixed assumptions about the hiker and the trail used by the sweat model."""
    body_weight_lb: float = 180.0
    distance_mi: float = 6.22
    elevation_gain_ft: float = 2150.0
    base_pace_min_per_mi: float = 10.0


class ReportConfig(_FrozenBaseModel):
    """Everything the report pipeline needs, resolved once at startup."""
    trailhead: Coordinate
    summit: Coordinate
    timezone: str = "America/Los_Angeles"
    route: RouteProfile = Field(default_factory=RouteProfile)
    default_target_hour: int = Field(default=5, ge=0, le=23)
    forecast_days: int | None = Field(default=None, ge=1, le=16)
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    report_title: str = "Mission Peak"


class SweatEstimate(_FrozenBaseModel):
    """Estimated sweat volume and hike duration."""
    liters: float
    duration_minutes: int


class AnalysisResult(_FrozenBaseModel):
    """Derived conditions for one target hour across both forecast points."""
    target_time: datetime
    trailhead_temperature: int
    summit_temperature: int
    has_inversion: bool
    wind_description: WindStrength
    wind_direction_label: str
    cloud_summary: str
    sweat_loss_liters: float
    estimated_duration_minutes: int
    glove_recommendation: GloveAdvice
    thunderstorm_potential: ThunderstormPotential | None = None
    air_quality_index: int | None = None
    air_quality_label: AirQualityCategory | None = None
