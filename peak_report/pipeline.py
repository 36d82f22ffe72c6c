"""Sequence fetch -> select -> analyze -> compose for the trailhead and summit."""
from __future__ import annotations

import datetime as dt
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List
from zoneinfo import ZoneInfo

from peak_report.conditions import analyze_conditions
from peak_report.data_sources import ForecastDataSource, open_meteo_data_source
from peak_report.data_sources.open_meteo_client import AirHour, WeatherHour
from peak_report.domain import ReportConfig
from peak_report.hour_selector import REQUIRED_WEATHER_FIELDS, select_hour, target_datetime
from peak_report.records import format_hour
from peak_report.report import ReportContext, compose_report, summarize_for_log
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="peak_report/pipeline")


class ReportPipeline:
    """Builds the report text for one target hour from live forecast data."""

    def __init__(self, config: ReportConfig, data_source: ForecastDataSource | None = None):
        self.config = config
        self.data_source = data_source or open_meteo_data_source()

    def _fetch_all(self) -> tuple[List[WeatherHour], List[WeatherHour], List[AirHour], List[AirHour]]:
        """Fetch the four series concurrently; any failure aborts the run."""
        cfg = self.config
        common = {
            "timezone": cfg.timezone,
            "forecast_days": cfg.forecast_days,
            "timeout": cfg.request_timeout_seconds,
        }
        calls: list[Callable[[], list]] = [
            lambda: self.data_source.fetch_weather_hours(
                cfg.summit.latitude, cfg.summit.longitude, cfg.summit.elevation, **common),
            lambda: self.data_source.fetch_weather_hours(
                cfg.trailhead.latitude, cfg.trailhead.longitude, cfg.trailhead.elevation, **common),
            lambda: self.data_source.fetch_air_hours(
                cfg.summit.latitude, cfg.summit.longitude, **common),
            lambda: self.data_source.fetch_air_hours(
                cfg.trailhead.latitude, cfg.trailhead.longitude, **common),
        ]

        with ThreadPoolExecutor(max_workers=len(calls), thread_name_prefix="peak-fetch") as pool:
            futures = [pool.submit(call) for call in calls]
            # Fail on the first error to complete; calls not yet started are dropped.
            for done in as_completed(futures):
                error = done.exception()
                if error is not None:
                    for future in futures:
                        future.cancel()
                    raise error
            summit_weather, trailhead_weather, summit_air, trailhead_air = (f.result() for f in futures)

        logger.debug(
            "Fetched forecast series",
            extra={
                "summit_weather": len(summit_weather),
                "trailhead_weather": len(trailhead_weather),
                "summit_air": len(summit_air),
                "trailhead_air": len(trailhead_air),
            },
        )
        return summit_weather, trailhead_weather, summit_air, trailhead_air

    def build_context(self, target_hour: int | None = None, *, now: dt.datetime | None = None) -> ReportContext:
        """Run everything up to (not including) text composition."""
        cfg = self.config
        hour = cfg.default_target_hour if target_hour is None else target_hour
        now = now or dt.datetime.now(ZoneInfo(cfg.timezone))
        target = target_datetime(now, hour, cfg.timezone)

        logger.info(
            "Generating weather report",
            extra={"target_hour": format_hour(hour), "target": target.isoformat()},
        )

        summit_weather, trailhead_weather, summit_air, trailhead_air = self._fetch_all()

        summit = select_hour(summit_weather, target, required=REQUIRED_WEATHER_FIELDS)
        trailhead = select_hour(trailhead_weather, target, required=REQUIRED_WEATHER_FIELDS)
        summit_aq = select_hour(summit_air, target)
        # Not printed, but the hour must exist so both points describe the same time.
        select_hour(trailhead_air, target)

        analysis = analyze_conditions(trailhead, summit, summit_aq, route=cfg.route)
        return ReportContext(
            trailhead=trailhead,
            summit=summit,
            analysis=analysis,
            target_hour=hour,
            title=cfg.report_title,
        )

    def generate(self, target_hour: int | None = None, *, now: dt.datetime | None = None) -> str:
        """Return the finished report text for tomorrow at ``target_hour``."""
        ctx = self.build_context(target_hour, now=now)
        logger.info("Composed weather report", extra=summarize_for_log(ctx))
        return compose_report(ctx)


def build_pipeline(config: ReportConfig | None = None,
                   data_source: ForecastDataSource | None = None) -> ReportPipeline:
    """Pipeline wired to the process settings unless told otherwise."""
    if config is None:
        from peak_report.config import settings
        config = settings.report_config()
    return ReportPipeline(config, data_source=data_source)


def main():
    """Manual helper: print tomorrow's report without posting it anywhere."""
    import sys

    hour = int(sys.argv[1]) if len(sys.argv) > 1 else None
    print(build_pipeline().generate(hour))


if __name__ == "__main__":
    main()
