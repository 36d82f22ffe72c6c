import datetime as dt
from types import SimpleNamespace

from peak_report import conditions, exceptions, hour_selector, records
from peak_report.exceptions import NoMatchingHour
from peak_report.records import get_field


def test_get_field_reads_mappings_and_attributes():
    assert get_field({"temperature": 42}, "temperature") == 42
    assert get_field(SimpleNamespace(temperature=42), "temperature") == 42


def test_get_field_defaults():
    assert get_field(None, "us_aqi") is None
    assert get_field({}, "cape", 0.0) == 0.0
    assert get_field(SimpleNamespace(), "cape", 0.0) == 0.0


def test_selector_and_analyzer_share_one_accessor():
    assert hour_selector.get_field is records.get_field
    assert conditions.get_field is records.get_field


def test_no_matching_hour_message_uses_shared_formatter():
    assert exceptions.format_hour is records.format_hour
    err = NoMatchingHour(dt.datetime(2026, 10, 18, 20), detail="missing cape")
    assert str(err) == "No forecast data available for 8pm on 2026-10-18 (missing cape)"
