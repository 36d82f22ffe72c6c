"""Locate the forecast record for the report's target hour."""

from __future__ import annotations

import datetime as dt
from typing import Sequence, TypeVar
from zoneinfo import ZoneInfo

from peak_report.exceptions import NoMatchingHour
from peak_report.records import get_field
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="peak_report/hour_selector")

T = TypeVar("T")

# Weather fields the report cannot be composed without.
REQUIRED_WEATHER_FIELDS = (
    "temperature",
    "rel_humidity",
    "wind_speed",
    "wind_direction",
    "cloud_cover_low",
    "cloud_cover_mid",
    "cloud_cover_high",
)


def target_datetime(now: dt.datetime, target_hour: int, timezone: str) -> dt.datetime:
    """Return tomorrow at ``target_hour``:00 in ``timezone``, relative to ``now``."""
    if not 0 <= target_hour <= 23:
        raise ValueError(f"target_hour must be between 0 and 23, got {target_hour}")
    tz = ZoneInfo(timezone)
    local_now = now.astimezone(tz) if now.tzinfo else now.replace(tzinfo=tz)
    tomorrow = local_now.date() + dt.timedelta(days=1)
    return dt.datetime.combine(tomorrow, dt.time(hour=target_hour), tzinfo=tz)


def _same_calendar_hour(time_val: dt.datetime, target: dt.datetime) -> bool:
    """True when both timestamps fall on the same local date and hour."""
    if time_val.tzinfo is not None and target.tzinfo is not None:
        time_val = time_val.astimezone(target.tzinfo)
    return time_val.date() == target.date() and time_val.hour == target.hour


def select_hour(series: Sequence[T], target: dt.datetime, *, required: Sequence[str] = ()) -> T:
    """
    Return the first record in ``series`` whose timestamp is the target hour.

    Matching uses the full local calendar date plus hour, so series that
    straddle a year boundary cannot produce a false match. A matched record
    with any ``required`` field set to null counts as unavailable.
    """
    for record in series:
        time_val = get_field(record, "time")
        if not isinstance(time_val, dt.datetime):
            continue
        if not _same_calendar_hour(time_val, target):
            continue

        missing = [key for key in required if get_field(record, key) is None]
        if missing:
            logger.error(
                "Target hour present but incomplete",
                extra={"target": target.isoformat(), "missing": missing},
            )
            raise NoMatchingHour(target, detail=f"missing {', '.join(missing)}")

        logger.debug(
            "Found data for target hour",
            extra={"target": target.isoformat(), "hour_index": get_field(record, "hour_index")},
        )
        return record

    logger.error(
        "Could not find data for target time",
        extra={"target": target.isoformat(), "series_len": len(series)},
    )
    raise NoMatchingHour(target)
