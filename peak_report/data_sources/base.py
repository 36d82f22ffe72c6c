"""Interfaces and helpers for forecast data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Protocol

from peak_report.data_sources.open_meteo_client import AirHour, WeatherHour


class ForecastDataSource(Protocol):
    """Interface for anything that can provide hourly weather and air-quality series."""

    def fetch_weather_hours(
        self,
        latitude: float,
        longitude: float,
        elevation: float,
        *,
        timezone: str = "America/Los_Angeles",
        forecast_days: int | None = None,
        timeout: float = 10,
    ) -> List[WeatherHour]:
        """Return hourly weather observations."""
        ...

    def fetch_air_hours(
        self,
        latitude: float,
        longitude: float,
        *,
        timezone: str = "America/Los_Angeles",
        forecast_days: int | None = None,
        timeout: float = 10,
    ) -> List[AirHour]:
        """Return hourly air-quality observations."""
        ...


@dataclass
class CallableForecastDataSource(ForecastDataSource):
    """Wrap two callables so they can be swapped for different backends or fakes."""

    weather_hours: Callable[..., List[WeatherHour]]
    air_hours: Callable[..., List[AirHour]]

    def fetch_weather_hours(self, *args, **kwargs) -> List[WeatherHour]:
        """Delegate to the configured hourly-weather callable."""
        return self.weather_hours(*args, **kwargs)

    def fetch_air_hours(self, *args, **kwargs) -> List[AirHour]:
        """Delegate to the configured hourly air-quality callable."""
        return self.air_hours(*args, **kwargs)


def open_meteo_data_source() -> CallableForecastDataSource:
    """Data source backed by the live Open-Meteo endpoints."""
    from peak_report.data_sources import open_meteo_client

    # Resolve at call time so tests can swap the module's fetch functions.
    return CallableForecastDataSource(
        weather_hours=lambda *a, **k: open_meteo_client.fetch_weather_hours(*a, **k),
        air_hours=lambda *a, **k: open_meteo_client.fetch_air_hours(*a, **k),
    )
