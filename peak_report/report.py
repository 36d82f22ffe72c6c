"""Compose the Slack-formatted text report from analyzed conditions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from peak_report.conditions import round_half_up
from peak_report.domain import AnalysisResult
from peak_report.records import format_hour

DEFAULT_TARGET_HOUR = 5
PRECIPITATION_THRESHOLD_PERCENT = 10
FOOTER = "_Data provided by Open-Meteo API_"
BULLET = "•"


@dataclass(frozen=True)
class ReportContext:
    """Inputs for the line rules: the two selected hours plus their analysis."""
    trailhead: Any
    summit: Any
    analysis: AnalysisResult
    target_hour: int = DEFAULT_TARGET_HOUR
    title: str = "Mission Peak"


ReportLine = Callable[[ReportContext], Optional[str]]


def _literal_number(value: float) -> str:
    """Print provider numbers as given: 35 -> "35", 35.5 -> "35.5"."""
    return f"{value:g}"


def describe_when(target_hour: int) -> str:
    """Human wording for the report's target time."""
    if target_hour == DEFAULT_TARGET_HOUR:
        return "Tomorrow Morning"
    return f"Tomorrow at {format_hour(target_hour)}"


def header_line(ctx: ReportContext) -> str:
    """Report title naming the target time."""
    return f"🌄 *{ctx.title} Weather Report for {describe_when(ctx.target_hour)}* 🌄"


def temperature_line(ctx: ReportContext) -> str:
    """Trailhead temperature and humidity."""
    humidity = _literal_number(ctx.trailhead.rel_humidity)
    return f"{BULLET} Temperature: {ctx.analysis.trailhead_temperature}°F, Humidity: {humidity}%"


def wind_line(ctx: ReportContext) -> str:
    """Summit wind strength and direction."""
    a = ctx.analysis
    return f"{BULLET} Wind: {a.wind_description.value} from {a.wind_direction_label}"


def precipitation_line(ctx: ReportContext) -> str | None:
    """Chance of rain, only when it is worth mentioning."""
    prob = ctx.summit.precipitation_prob
    if prob is None or prob <= PRECIPITATION_THRESHOLD_PERCENT:
        return None
    return f"{BULLET} Chance of Rain: {_literal_number(prob)}%"


def thunderstorm_line(ctx: ReportContext) -> str | None:
    """Thunderstorm potential, only when CAPE is significant."""
    potential = ctx.analysis.thunderstorm_potential
    if potential is None:
        return None
    return f"{BULLET} {potential.value} thunderstorm potential"


def air_quality_line(ctx: ReportContext) -> str | None:
    """Air quality, only when it is unhealthy."""
    a = ctx.analysis
    if a.air_quality_label is None or a.air_quality_index is None:
        return None
    return f"{BULLET} Air Quality: {a.air_quality_index} ({a.air_quality_label.value})"


def cloud_line(ctx: ReportContext) -> str:
    """Cloud cover by altitude band."""
    return f"{BULLET} Cloud Cover: {ctx.analysis.cloud_summary}"


def inversion_line(ctx: ReportContext) -> str:
    """Whether the summit is warmer than the trailhead."""
    return f"{BULLET} Temperature Inversion: {'Yes' if ctx.analysis.has_inversion else 'No'}"


def sweat_line(ctx: ReportContext) -> str:
    """Estimated sweat loss for the hike."""
    return f"{BULLET} Estimated Sweat Loss: {ctx.analysis.sweat_loss_liters:.1f}L"


def glove_line(ctx: ReportContext) -> str:
    """Glove recommendation."""
    return f"{BULLET} Gloves Needed: {ctx.analysis.glove_recommendation.value}"


# Evaluated in order; a rule returning None leaves its line out.
REPORT_LINES: tuple[ReportLine, ...] = (
    temperature_line,
    wind_line,
    precipitation_line,
    thunderstorm_line,
    air_quality_line,
    cloud_line,
    inversion_line,
    sweat_line,
    glove_line,
)


def compose_report(ctx: ReportContext, *, rules: Sequence[ReportLine] = REPORT_LINES) -> str:
    """Render the full report: header, the lines that apply, footer."""
    body = [line for line in (rule(ctx) for rule in rules) if line is not None]
    return "\n".join([header_line(ctx), "", *body, "", FOOTER])


def summarize_for_log(ctx: ReportContext) -> dict:
    """Compact view of a report's key numbers for structured logging."""
    a = ctx.analysis
    return {
        "target_time": a.target_time.isoformat(),
        "trailhead_f": a.trailhead_temperature,
        "summit_f": a.summit_temperature,
        "inversion": a.has_inversion,
        "sweat_l": a.sweat_loss_liters,
        "aqi": a.air_quality_index,
        "precip": round_half_up(ctx.summit.precipitation_prob) if ctx.summit.precipitation_prob is not None else None,
    }
