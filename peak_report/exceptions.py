"""Error types raised while generating and delivering a peak report."""

from __future__ import annotations

import datetime as dt

from peak_report.records import format_hour


class PeakReportError(Exception):
    """Base exception for report generation and delivery."""


class NetworkFailure(PeakReportError):
    """Raised when a request never produced an HTTP response (DNS, connect, timeout)."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source} request failed: {reason}")


class ProviderError(PeakReportError):
    """Raised when a forecast provider answers with a non-success status."""

    def __init__(self, status: int, reason: str, source: str = "Open-Meteo"):
        self.status = status
        self.reason = reason
        self.source = source
        super().__init__(f"{source} API error: {status} {reason}".rstrip())


# Name used for provider fetch failures in the report pipeline.
FetchFailure = ProviderError


class NoMatchingHour(PeakReportError):
    """Raised when a series has no usable record for the target hour."""

    def __init__(self, target: dt.datetime, detail: str | None = None):
        self.target = target
        self.detail = detail
        message = f"No forecast data available for {format_hour(target.hour)} on {target.date().isoformat()}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DeliveryError(PeakReportError):
    """Raised when the webhook rejects a report."""

    def __init__(self, status: int, reason: str):
        self.status = status
        self.reason = reason
        super().__init__(f"Slack API error: {status} {reason}".rstrip())
