"""
Daily timer that generates the default report and posts it to the webhook.

The task is started from the FastAPI lifespan and lives until shutdown.
"""

from __future__ import annotations

import asyncio
import datetime as dt
from typing import Callable
from zoneinfo import ZoneInfo

from peak_report.config import Settings, settings as default_settings
from peak_report.exceptions import PeakReportError
from peak_report.pipeline import ReportPipeline, build_pipeline
from peak_report.slack import post_to_webhook
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="peak_report/scheduler")


def next_run_at(now: dt.datetime, hour: int, minute: int, timezone: str) -> dt.datetime:
    """Next local wall-clock occurrence of hour:minute strictly after ``now``."""
    tz = ZoneInfo(timezone)
    local_now = now.astimezone(tz) if now.tzinfo else now.replace(tzinfo=tz)
    candidate = dt.datetime.combine(local_now.date(), dt.time(hour, minute), tzinfo=tz)
    if candidate <= local_now:
        candidate = dt.datetime.combine(local_now.date() + dt.timedelta(days=1), dt.time(hour, minute), tzinfo=tz)
    return candidate


def seconds_until_next_run(now: dt.datetime, hour: int, minute: int, timezone: str) -> float:
    """Seconds to sleep before the next scheduled run, measured in absolute time."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=ZoneInfo(timezone))
    target = next_run_at(now, hour, minute, timezone)
    # Subtract in UTC: same-zone aware subtraction is wall-clock and skips DST shifts.
    delta = target.astimezone(dt.timezone.utc) - now.astimezone(dt.timezone.utc)
    return max(0.0, delta.total_seconds())


def run_scheduled_report(pipeline: ReportPipeline, webhook_url: str | None, *, timeout: float = 10) -> bool:
    """
    Generate the default report and deliver it to the configured webhook.

    Errors propagate; the caller decides whether to log them or surface them.
    """
    if not webhook_url:
        raise PeakReportError("Slack webhook URL is not configured")
    message = pipeline.generate()
    return post_to_webhook(webhook_url, message, timeout=timeout)


async def report_scheduler_task(
    cfg: Settings | None = None,
    *,
    pipeline_factory: Callable[[], ReportPipeline] = build_pipeline,
    clock: Callable[[], dt.datetime] | None = None,
) -> None:
    """
    Run the daily report forever.

    The task lifecycle:
    1. Sleep until the next configured local time
    2. Generate and deliver the report in a worker thread
    3. Log any failure and wait for the next day
    4. Exit quietly on cancellation
    """
    cfg = cfg or default_settings
    tz = ZoneInfo(cfg.timezone)
    clock = clock or (lambda: dt.datetime.now(tz))

    while True:
        try:
            delay = seconds_until_next_run(clock(), cfg.schedule_hour, cfg.schedule_minute, cfg.timezone)
            logger.info("Next scheduled report", extra={"in_seconds": int(delay)})
            await asyncio.sleep(delay)
            await asyncio.to_thread(
                run_scheduled_report,
                pipeline_factory(),
                cfg.slack_webhook_url,
                timeout=cfg.request_timeout_seconds,
            )
            logger.info("Scheduled weather report sent")
        except asyncio.CancelledError:
            logger.info("Report scheduler cancelled")
            break
        except Exception as e:
            logger.error("Scheduled weather report failed: %s", e)
            # Step past the scheduled minute so a fast failure does not re-run immediately.
            await asyncio.sleep(60)


def start_report_scheduler(cfg: Settings | None = None, **kwargs) -> asyncio.Task | None:
    """Create the background scheduler task, or return None when disabled."""
    cfg = cfg or default_settings
    if not cfg.schedule_enabled:
        logger.info("Report scheduler is disabled")
        return None
    if not cfg.slack_webhook_url:
        logger.warning("Report scheduler enabled but no webhook URL is configured; not starting")
        return None
    return asyncio.create_task(report_scheduler_task(cfg, **kwargs))
