import asyncio
import datetime as dt
from zoneinfo import ZoneInfo

import pytest

from peak_report import scheduler
from peak_report.config import Settings
from peak_report.exceptions import PeakReportError
from peak_report.scheduler import next_run_at, run_scheduled_report, seconds_until_next_run, start_report_scheduler

TZ = "America/Los_Angeles"
LA = ZoneInfo(TZ)


class FakePipeline:
    def __init__(self, text="report", error=None):
        self.text = text
        self.error = error
        self.calls = 0

    def generate(self, target_hour=None):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.text


def test_next_run_later_today():
    now = dt.datetime(2026, 10, 17, 9, 15, tzinfo=LA)
    assert next_run_at(now, 20, 0, TZ) == dt.datetime(2026, 10, 17, 20, 0, tzinfo=LA)


def test_next_run_tomorrow_when_time_has_passed():
    now = dt.datetime(2026, 10, 17, 21, 0, tzinfo=LA)
    assert next_run_at(now, 20, 0, TZ) == dt.datetime(2026, 10, 18, 20, 0, tzinfo=LA)


def test_next_run_is_strictly_after_now():
    now = dt.datetime(2026, 10, 17, 20, 0, tzinfo=LA)
    assert next_run_at(now, 20, 0, TZ) == dt.datetime(2026, 10, 18, 20, 0, tzinfo=LA)


def test_next_run_from_utc_clock():
    now = dt.datetime(2026, 10, 18, 2, 0, tzinfo=dt.timezone.utc)  # 19:00 local on the 17th
    assert next_run_at(now, 20, 30, TZ) == dt.datetime(2026, 10, 17, 20, 30, tzinfo=LA)


def test_seconds_until_next_run():
    now = dt.datetime(2026, 10, 17, 19, 59, 30, tzinfo=LA)
    assert seconds_until_next_run(now, 20, 0, TZ) == 30


@pytest.mark.parametrize(
    "now,expected_seconds",
    [
        # spring forward: the night is one hour short
        (dt.datetime(2026, 3, 7, 20, 0, 5, tzinfo=LA), 23 * 3600 - 5),
        # fall back: the night is one hour long
        (dt.datetime(2026, 10, 31, 20, 0, 5, tzinfo=LA), 25 * 3600 - 5),
    ],
)
def test_sleep_across_dst_wakes_at_local_run_time(now, expected_seconds):
    delay = seconds_until_next_run(now, 20, 0, TZ)
    assert delay == expected_seconds

    wake = (now.astimezone(dt.timezone.utc) + dt.timedelta(seconds=delay)).astimezone(LA)
    assert (wake.date(), wake.hour, wake.minute) == (now.date() + dt.timedelta(days=1), 20, 0)


def test_no_second_run_after_fall_back_wake():
    # Once the run at 20:00 local has happened, the next one is a day later.
    woke = dt.datetime(2026, 11, 1, 20, 0, 1, tzinfo=LA)
    assert next_run_at(woke, 20, 0, TZ) == dt.datetime(2026, 11, 2, 20, 0, tzinfo=LA)


def test_run_scheduled_report_posts(monkeypatch):
    sent = []
    monkeypatch.setattr(scheduler, "post_to_webhook", lambda url, text, timeout=10: sent.append((url, text)) or True)

    assert run_scheduled_report(FakePipeline("hello"), "https://hooks.slack.com/services/T/B/X")
    assert sent == [("https://hooks.slack.com/services/T/B/X", "hello")]


def test_run_scheduled_report_requires_webhook():
    pipeline = FakePipeline()
    with pytest.raises(PeakReportError):
        run_scheduled_report(pipeline, None)
    assert pipeline.calls == 0


def test_run_scheduled_report_propagates_generation_errors(monkeypatch):
    monkeypatch.setattr(scheduler, "post_to_webhook", lambda *a, **k: pytest.fail("should not post"))
    with pytest.raises(PeakReportError):
        run_scheduled_report(FakePipeline(error=PeakReportError("boom")), "https://example.com/hook")


def test_scheduler_disabled_returns_none():
    cfg = Settings(schedule_enabled=False, slack_webhook_url="https://example.com/hook")
    assert start_report_scheduler(cfg) is None


def test_scheduler_without_webhook_returns_none():
    cfg = Settings(schedule_enabled=True, slack_webhook_url=None)
    assert start_report_scheduler(cfg) is None


def test_scheduler_task_runs_then_cancels(monkeypatch):
    cfg = Settings(slack_webhook_url="https://example.com/hook", schedule_hour=20, schedule_minute=0)
    sent = []
    monkeypatch.setattr(scheduler, "post_to_webhook", lambda url, text, timeout=10: sent.append(text) or True)

    async def scenario():
        clock = lambda: dt.datetime(2026, 10, 17, 19, 59, 59, 990000, tzinfo=LA)
        task = start_report_scheduler(cfg, pipeline_factory=lambda: FakePipeline("daily"), clock=clock)
        assert task is not None
        for _ in range(50):
            if sent:
                break
            await asyncio.sleep(0.02)
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        return task

    task = asyncio.run(scenario())
    assert sent and sent[0] == "daily"
    assert task.done()
