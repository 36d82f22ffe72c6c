"""Forecast data sources feeding the report pipeline."""

from .base import CallableForecastDataSource, ForecastDataSource, open_meteo_data_source
from .open_meteo_client import (
    AirHour,
    WeatherHour,
    fetch_air_hours,
    fetch_weather_hours,
)

__all__ = [
    "ForecastDataSource",
    "CallableForecastDataSource",
    "open_meteo_data_source",
    "AirHour",
    "WeatherHour",
    "fetch_air_hours",
    "fetch_weather_hours",
]
