"""Small helpers shared by modules that read hourly forecast records."""

from __future__ import annotations

from typing import Any, Mapping


def get_field(record: Any, key: str, default=None):
    """Support attribute, dict, or Mapping access for hourly records."""
    if record is None:
        return default
    if isinstance(record, Mapping):
        return record.get(key, default)
    return getattr(record, key, default)


def format_hour(hour: int) -> str:
    """Render an hour of the day as 12am/5am/12pm/5pm."""
    if hour == 0:
        return "12am"
    if hour == 12:
        return "12pm"
    if hour < 12:
        return f"{hour}am"
    return f"{hour - 12}pm"
