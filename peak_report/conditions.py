"""Deterministic condition analysis for the peak report.

Every function here is pure: raw hourly values in, labels and estimates out.
The report composer decides which of them make it into the message.
"""

from __future__ import annotations

import math
from typing import Any

from peak_report.domain import (
    AirQualityCategory,
    AnalysisResult,
    GloveAdvice,
    RouteProfile,
    SweatEstimate,
    ThunderstormPotential,
    WindStrength,
)
from peak_report.records import get_field

COMPASS_POINTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")

# Sweat model reference conditions: 70F, 50% humidity, no wind, sea level, no sun.
BASE_SWEAT_RATE_ML_PER_HOUR = 650.0
REFERENCE_TEMP_F = 70.0
REFERENCE_HUMIDITY = 50.0

UNHEALTHY_AQI_THRESHOLD = 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def detect_inversion(trailhead_temp: float, summit_temp: float) -> bool:
    """Temperature inversion: the summit is strictly warmer than the trailhead."""
    return summit_temp > trailhead_temp


def describe_wind(speed_mph: float) -> WindStrength:
    """Bucket a wind speed; each bucket includes its lower bound."""
    if speed_mph < 5:
        return WindStrength.CALM
    if speed_mph < 10:
        return WindStrength.LIGHT_BREEZE
    if speed_mph < 15:
        return WindStrength.MODERATE_BREEZE
    if speed_mph < 20:
        return WindStrength.STRONG_BREEZE
    return WindStrength.HIGH_WINDS


def wind_direction_label(degrees: float) -> str:
    """Map compass degrees onto the eight principal points, N at 0."""
    return COMPASS_POINTS[round_half_up(degrees / 45) % 8]


def summarize_clouds(low: float, mid: float, high: float) -> str:
    """Cloud cover per altitude band, rounded to whole percent."""
    return f"Low {round_half_up(low)}%, Mid {round_half_up(mid)}%, High {round_half_up(high)}%"


def estimate_hike_minutes(route: RouteProfile) -> float:
    """Base pace plus one minute per mile for every 1000 ft of gain."""
    return (route.base_pace_min_per_mi + route.elevation_gain_ft / 1000) * route.distance_mi


def estimate_sweat_loss(
    temperature: float,
    humidity: float,
    wind_speed: float,
    solar_radiation: float | None,
    route: RouteProfile | None = None,
) -> SweatEstimate:
    """
    Estimate total sweat lost over the hike.

    Starts from a base rate at reference conditions and scales it by one linear
    factor per driver:

    - temperature: +10% per 5F above 70F
    - humidity: +5% per 10 points above 50%
    - wind: -5% per 5 mph
    - elevation gain: +5% per 1000 ft
    - solar radiation: up to +75% at 1000 W/m² and above
    """
    route = route or RouteProfile()
    duration = estimate_hike_minutes(route)
    solar = solar_radiation or 0.0

    temp_factor = 1 + ((temperature - REFERENCE_TEMP_F) / 5) * 0.10
    humidity_factor = 1 + ((humidity - REFERENCE_HUMIDITY) / 10) * 0.05
    wind_factor = 1 - (wind_speed / 5) * 0.05
    elevation_factor = 1 + (route.elevation_gain_ft / 1000) * 0.05
    solar_factor = 1 + min(solar / 1000, 1) * 0.75

    sweat_ml = (
        BASE_SWEAT_RATE_ML_PER_HOUR
        * temp_factor
        * humidity_factor
        * wind_factor
        * elevation_factor
        * solar_factor
        * (duration / 60)
    )
    liters = round_half_up(sweat_ml / 1000 * 10) / 10
    return SweatEstimate(liters=liters, duration_minutes=round_half_up(duration))


def glove_recommendation(trailhead_temp: float, summit_temp: float) -> GloveAdvice:
    """Glove advice from the average of the two temperatures."""
    avg_temp = (trailhead_temp + summit_temp) / 2
    if avg_temp < 40:
        return GloveAdvice.DEFINITELY
    if avg_temp < 45:
        return GloveAdvice.RECOMMENDED
    if avg_temp < 52:
        return GloveAdvice.MAYBE
    return GloveAdvice.NO


def thunderstorm_potential(cape: float | None) -> ThunderstormPotential | None:
    """Thunderstorm potential from CAPE (J/kg); None when insignificant or unknown."""
    if cape is None:
        return None
    if cape > 2500:
        return ThunderstormPotential.HIGH
    if cape > 1500:
        return ThunderstormPotential.MODERATE
    if cape > 1000:
        return ThunderstormPotential.LOW
    return None


def describe_air_quality(aqi: float) -> AirQualityCategory:
    """US AQI category; each bucket includes its upper bound."""
    if aqi <= 50:
        return AirQualityCategory.GOOD
    if aqi <= 100:
        return AirQualityCategory.MODERATE
    if aqi <= 150:
        return AirQualityCategory.UNHEALTHY_FOR_SENSITIVE_GROUPS
    if aqi <= 200:
        return AirQualityCategory.UNHEALTHY
    if aqi <= 300:
        return AirQualityCategory.VERY_UNHEALTHY
    return AirQualityCategory.HAZARDOUS


def is_air_quality_unhealthy(aqi: float | None) -> bool:
    """Only AQI above 100 is worth mentioning in the report."""
    return aqi is not None and aqi > UNHEALTHY_AQI_THRESHOLD


def _average(a: float | None, b: float | None) -> float:
    """Mean of two readings, treating a missing reading as zero."""
    return ((a or 0.0) + (b or 0.0)) / 2


def analyze_conditions(trailhead: Any, summit: Any, summit_air: Any = None, *,
                       route: RouteProfile | None = None) -> AnalysisResult:
    """
    Derive the report's conditions from the two selected hours.

    Temperatures are rounded to whole degrees before comparison, so inversion
    and glove advice agree with what the report prints. Wind, clouds, storms and
    air quality describe the summit; the sweat estimate averages both points.
    """
    trailhead_temp = round_half_up(get_field(trailhead, "temperature"))
    summit_temp = round_half_up(get_field(summit, "temperature"))

    sweat = estimate_sweat_loss(
        (trailhead_temp + summit_temp) / 2,
        _average(get_field(trailhead, "rel_humidity"), get_field(summit, "rel_humidity")),
        _average(get_field(trailhead, "wind_speed"), get_field(summit, "wind_speed")),
        _average(get_field(trailhead, "shortwave_radiation"), get_field(summit, "shortwave_radiation")),
        route,
    )

    aqi = get_field(summit_air, "us_aqi")
    aqi_value = round_half_up(aqi) if aqi is not None else None

    return AnalysisResult(
        target_time=get_field(summit, "time"),
        trailhead_temperature=trailhead_temp,
        summit_temperature=summit_temp,
        has_inversion=detect_inversion(trailhead_temp, summit_temp),
        wind_description=describe_wind(get_field(summit, "wind_speed")),
        wind_direction_label=wind_direction_label(get_field(summit, "wind_direction")),
        cloud_summary=summarize_clouds(
            get_field(summit, "cloud_cover_low"),
            get_field(summit, "cloud_cover_mid"),
            get_field(summit, "cloud_cover_high"),
        ),
        sweat_loss_liters=sweat.liters,
        estimated_duration_minutes=sweat.duration_minutes,
        glove_recommendation=glove_recommendation(trailhead_temp, summit_temp),
        thunderstorm_potential=thunderstorm_potential(get_field(summit, "cape")),
        air_quality_index=aqi_value,
        air_quality_label=describe_air_quality(aqi_value) if is_air_quality_unhealthy(aqi_value) else None,
    )
