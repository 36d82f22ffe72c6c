import os
import unittest

from pydantic import ValidationError

from peak_report.config import Settings


class _EnvOverride:
    """Set PEAK_* variables for the duration of a test and restore them afterwards."""

    def __init__(self, **values):
        self.values = values
        self.previous = {}

    def __enter__(self):
        for key, value in self.values.items():
            self.previous[key] = os.environ.get(key)
            os.environ[key] = value
        return self

    def __exit__(self, *exc):
        for key, value in self.previous.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value


class TestConfig(unittest.TestCase):
    def test_settings_defaults(self):
        previous = os.environ.pop("PEAK_DEFAULT_TARGET_HOUR", None)
        try:
            s = Settings()
            self.assertEqual(s.default_target_hour, 5)
            self.assertEqual(s.timezone, "America/Los_Angeles")
            self.assertEqual(s.slash_command, "/mission-weather")
            self.assertIsNone(s.forecast_days)
            self.assertEqual(s.summit_elevation, 767.0)
        finally:
            if previous is not None:
                os.environ["PEAK_DEFAULT_TARGET_HOUR"] = previous

    def test_settings_env_override(self):
        with _EnvOverride(
            PEAK_SLACK_WEBHOOK_URL="https://hooks.slack.com/services/T/B/X",
            PEAK_FORECAST_DAYS="3",
            PEAK_SCHEDULE_HOUR="19",
        ):
            s = Settings()
            self.assertEqual(s.slack_webhook_url, "https://hooks.slack.com/services/T/B/X")
            self.assertEqual(s.forecast_days, 3)
            self.assertEqual(s.schedule_hour, 19)

    def test_blank_secrets_are_unset(self):
        with _EnvOverride(PEAK_SLACK_SIGNING_SECRET="  ", PEAK_SLACK_WEBHOOK_URL=""):
            s = Settings()
            self.assertIsNone(s.slack_signing_secret)
            self.assertIsNone(s.slack_webhook_url)

    def test_invalid_hours_rejected(self):
        with self.assertRaises(ValidationError):
            Settings(default_target_hour=24)
        with self.assertRaises(ValidationError):
            Settings(schedule_hour=-1)
        with self.assertRaises(ValidationError):
            Settings(schedule_minute=60)

    def test_report_config(self):
        s = Settings(trailhead_elevation=100.0, report_title="Test Peak", request_timeout_seconds=4)
        cfg = s.report_config()
        self.assertEqual(cfg.trailhead.elevation, 100.0)
        self.assertEqual(cfg.summit.latitude, s.summit_latitude)
        self.assertEqual(cfg.report_title, "Test Peak")
        self.assertEqual(cfg.request_timeout_seconds, 4)


if __name__ == "__main__":
    unittest.main()
