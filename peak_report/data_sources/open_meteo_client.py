"""Helpers for fetching hourly weather and air-quality series from the Open-Meteo APIs."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import List, Optional
from zoneinfo import ZoneInfo
import requests

from peak_report.exceptions import NetworkFailure, ProviderError
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag='open_meteo_client')

# One request per fetch: no response cache and no retry adapter.
session = requests.Session()

OPEN_METEO_WEATHER_URL = "https://api.open-meteo.com/v1/forecast"
OPEN_METEO_AIR_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"

DEFAULT_TIMEZONE = "America/Los_Angeles"

WEATHER_HOURLY_VARS = [
    "temperature_2m",
    "relative_humidity_2m",
    "wind_speed_10m",
    "wind_direction_10m",
    "cloud_cover",
    "cloud_cover_low",
    "cloud_cover_mid",
    "cloud_cover_high",
    "precipitation_probability",
    "shortwave_radiation",
    "cape",
]

AIR_HOURLY_VARS = ["us_aqi"]

EXPECTED_WEATHER_UNITS = {
    "temperature_2m": "°F",
    "relative_humidity_2m": "%",
    "wind_speed_10m": "mph",
    "wind_direction_10m": "°",
    "cloud_cover": "%",
    "cloud_cover_low": "%",
    "cloud_cover_mid": "%",
    "cloud_cover_high": "%",
    "precipitation_probability": "%",
    "shortwave_radiation": "W/m²",
    "cape": "J/kg",
}

EXPECTED_AIR_UNITS = {
    "us_aqi": "USAQI",
}

# Spellings the API is known to use for the same unit.
ALLOWED_UNIT_SYNONYMS = {
    "relative_humidity_2m": {"%", "percent"},
    "wind_direction_10m": {"°", "deg", "degrees"},
    "cloud_cover": {"%", "percent"},
    "cloud_cover_low": {"%", "percent"},
    "cloud_cover_mid": {"%", "percent"},
    "cloud_cover_high": {"%", "percent"},
    "precipitation_probability": {"%", "percent"},
    "shortwave_radiation": {"W/m²", "W/m2"},
    "cape": {"J/kg"},
    "us_aqi": {"USAQI", "aqi", "US AQI"},
}


@dataclass
class WeatherHour:
    """Normalized hourly weather reading returned by Open-Meteo."""
    time: dt.datetime  # timezone-aware
    hour_index: int
    temperature: Optional[float]
    temperature_unit: Optional[str]
    rel_humidity: Optional[float]
    wind_speed: Optional[float]
    wind_speed_unit: Optional[str]
    wind_direction: Optional[float]
    cloud_cover: Optional[float]
    cloud_cover_low: Optional[float]
    cloud_cover_mid: Optional[float]
    cloud_cover_high: Optional[float]
    precipitation_prob: Optional[float]
    shortwave_radiation: Optional[float]  # W/m²
    cape: Optional[float]  # J/kg


@dataclass
class AirHour:
    """Normalized hourly air-quality reading returned by Open-Meteo."""
    time: dt.datetime  # timezone-aware
    hour_index: int
    us_aqi: Optional[int]


def _iso_to_dt_with_tz(s: str, tz_name: str) -> dt.datetime:
    """Interpret Open-Meteo local time string as being in tz_name."""
    naive = dt.datetime.fromisoformat(s)
    return naive.replace(tzinfo=ZoneInfo(tz_name))


def _warn_on_unexpected_units(units: dict, expected_units: dict, *, context: str):
    """Log a warning if Open-Meteo returns units we did not request/expect."""
    if not units:
        return
    for field, expected in expected_units.items():
        actual = units.get(field)
        if not actual or actual == expected:
            continue
        allowed = ALLOWED_UNIT_SYNONYMS.get(field, set())
        if actual not in allowed:
            logger.warning(
                "Unexpected Open-Meteo unit",
                extra={"context": context, "field": field, "unit": actual, "expected": expected, "allowed": sorted(allowed)},
            )


def _get_json(url: str, params: dict, *, source: str, timeout: float) -> dict:
    """GET a provider endpoint once, mapping failures onto the report's error types."""
    try:
        resp = session.get(url, params=params, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        logger.error("Open-Meteo request failed", extra={"source": source, "error": str(exc)})
        raise NetworkFailure(source, str(exc)) from exc

    try:
        resp.raise_for_status()
    except requests.exceptions.HTTPError as exc:
        logger.error(
            "Open-Meteo returned an error status",
            extra={"source": source, "status": resp.status_code, "reason": resp.reason},
        )
        raise ProviderError(resp.status_code, resp.reason or "", source=source) from exc

    try:
        return resp.json()
    except ValueError as exc:
        raise NetworkFailure(source, f"invalid JSON response: {exc}") from exc


def fetch_weather_hours(
    latitude: float,
    longitude: float,
    elevation: float,
    *,
    timezone: str = DEFAULT_TIMEZONE,
    forecast_days: int | None = None,
    temperature_unit: str = "fahrenheit",
    wind_speed_unit: str = "mph",
    timeout: float = 10,
) -> List[WeatherHour]:
    """Fetch the hourly weather series used by the report for one forecast point."""
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "elevation": elevation,
        "hourly": ",".join(WEATHER_HOURLY_VARS),
        "timezone": timezone,
        "temperature_unit": temperature_unit,
        "wind_speed_unit": wind_speed_unit,
    }
    if forecast_days is not None:
        params["forecast_days"] = forecast_days

    logger.info(
        "Fetching weather data",
        extra={"latitude": latitude, "longitude": longitude, "elevation": elevation},
    )
    data = _get_json(OPEN_METEO_WEATHER_URL, params, source="Open-Meteo", timeout=timeout)

    hourly = data["hourly"]
    hourly_units = data.get("hourly_units", {})
    _warn_on_unexpected_units(hourly_units, EXPECTED_WEATHER_UNITS, context="weather_hourly")
    times = hourly["time"]
    missing = [None] * len(times)
    temp = hourly.get("temperature_2m", missing)
    rel_humidity = hourly.get("relative_humidity_2m", missing)
    wind_speed = hourly.get("wind_speed_10m", missing)
    wind_dir = hourly.get("wind_direction_10m", missing)
    cloud = hourly.get("cloud_cover", missing)
    cloud_low = hourly.get("cloud_cover_low", missing)
    cloud_mid = hourly.get("cloud_cover_mid", missing)
    cloud_high = hourly.get("cloud_cover_high", missing)
    precip_prob = hourly.get("precipitation_probability", missing)
    radiation = hourly.get("shortwave_radiation", missing)
    cape = hourly.get("cape", missing)

    out: List[WeatherHour] = []
    for i, t in enumerate(times):
        out.append(
            WeatherHour(
                time=_iso_to_dt_with_tz(t, timezone),
                hour_index=i,
                temperature=temp[i],
                temperature_unit=hourly_units.get("temperature_2m"),
                rel_humidity=rel_humidity[i],
                wind_speed=wind_speed[i],
                wind_speed_unit=hourly_units.get("wind_speed_10m"),
                wind_direction=wind_dir[i],
                cloud_cover=cloud[i],
                cloud_cover_low=cloud_low[i],
                cloud_cover_mid=cloud_mid[i],
                cloud_cover_high=cloud_high[i],
                precipitation_prob=precip_prob[i],
                shortwave_radiation=radiation[i],
                cape=cape[i],
            )
        )
    logger.debug("Parsed weather hours", extra={"hours": len(out)})
    return out


def fetch_air_hours(
    latitude: float,
    longitude: float,
    *,
    timezone: str = DEFAULT_TIMEZONE,
    forecast_days: int | None = None,
    timeout: float = 10,
) -> List[AirHour]:
    """Fetch the hourly US AQI series for one forecast point."""
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "hourly": ",".join(AIR_HOURLY_VARS),
        "timezone": timezone,
    }
    if forecast_days is not None:
        params["forecast_days"] = forecast_days

    logger.info("Fetching air quality data", extra={"latitude": latitude, "longitude": longitude})
    data = _get_json(OPEN_METEO_AIR_URL, params, source="Air Quality", timeout=timeout)

    hourly = data["hourly"]
    hourly_units = data.get("hourly_units", {})
    _warn_on_unexpected_units(hourly_units, EXPECTED_AIR_UNITS, context="air_hourly")
    times = hourly["time"]
    us_aqi = hourly.get("us_aqi", [None] * len(times))

    out: List[AirHour] = []
    for i, t in enumerate(times):
        out.append(
            AirHour(
                time=_iso_to_dt_with_tz(t, timezone),
                hour_index=i,
                us_aqi=us_aqi[i],
            )
        )
    return out
