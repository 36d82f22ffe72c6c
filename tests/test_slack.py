import pytest
import requests

from peak_report import slack
from peak_report.exceptions import DeliveryError, NetworkFailure
from peak_report.slack import compute_slack_signature, parse_target_hour, post_to_webhook, verify_slack_signature

SECRET = "8f742231b10e8888abcd99yyyzzz85a5"
BODY = b"token=xyz&command=%2Fmission-weather&text=7am&response_url=https%3A%2F%2Fhooks.slack.com%2Fcommands%2F1%2F2%2F3"
TS = "1531420618"


def test_signature_roundtrip_verifies():
    sig = compute_slack_signature(BODY, TS, SECRET)
    assert sig.startswith("v0=")
    assert len(sig) == 3 + 64
    assert verify_slack_signature(BODY, TS, sig, SECRET, now=int(TS) + 10)


def test_signature_matches_known_vector():
    # Example request from Slack's signing documentation.
    body = (
        b"token=xyzz0WbapA4vBCDEFasx0q6G&team_id=T1DC2JH3J&team_domain=testteamnow&channel_id=G8PSS9T3V"
        b"&channel_name=foobar&user_id=U2CERLKJA&user_name=roadrunner&command=%2Fwebhook-collect&text="
        b"&response_url=https%3A%2F%2Fhooks.slack.com%2Fcommands%2FT1DC2JH3J%2F397700885554%2F96rGlfmibIGlgcZRskXaIFfN"
        b"&trigger_id=398738663015.47445629121.803a0bc887a14d10d2c447fce8b6703c"
    )
    expected = "v0=a2114d57b48eac39b9ad189dd8316235a7b4a8d21a10bd27519666489c69b503"
    assert compute_slack_signature(body, TS, SECRET) == expected


def test_rejects_tampered_body():
    sig = compute_slack_signature(BODY, TS, SECRET)
    assert not verify_slack_signature(BODY + b"x", TS, sig, SECRET, now=int(TS))


def test_rejects_wrong_secret():
    sig = compute_slack_signature(BODY, TS, "other-secret")
    assert not verify_slack_signature(BODY, TS, sig, SECRET, now=int(TS))


@pytest.mark.parametrize("offset", [301, -301, 3600])
def test_rejects_stale_or_future_timestamp(offset):
    sig = compute_slack_signature(BODY, TS, SECRET)
    assert not verify_slack_signature(BODY, TS, sig, SECRET, now=int(TS) + offset)


def test_accepts_timestamp_at_replay_window_edge():
    sig = compute_slack_signature(BODY, TS, SECRET)
    assert verify_slack_signature(BODY, TS, sig, SECRET, now=int(TS) + 300)


@pytest.mark.parametrize(
    "timestamp,signature,secret",
    [(None, "v0=abc", SECRET), (TS, None, SECRET), (TS, "v0=abc", None), (TS, "v0=abc", ""), ("soon", "v0=abc", SECRET)],
)
def test_rejects_missing_inputs(timestamp, signature, secret):
    assert not verify_slack_signature(BODY, timestamp, signature, secret, now=int(TS))


def test_rejects_non_ascii_signature_without_error():
    assert not verify_slack_signature(BODY, TS, "v0=é", SECRET, now=int(TS))


@pytest.mark.parametrize(
    "text,expected",
    [
        ("", 5),
        (None, 5),
        ("7", 7),
        ("7am", 7),
        ("7 AM", 7),
        ("3pm", 15),
        ("3 pm", 15),
        ("12pm", 12),
        ("12am", 0),
        ("18", 18),
        ("0", 0),
        ("25", 5),
        ("13pm", 13),
        ("tomorrow", 5),
    ],
)
def test_parse_target_hour(text, expected):
    assert parse_target_hour(text) == expected


def test_parse_target_hour_uses_given_default():
    assert parse_target_hour("whenever", default=6) == 6


class _Resp:
    def __init__(self, status_code=200, reason="OK"):
        self.status_code = status_code
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400


def test_post_to_webhook_sends_json(monkeypatch):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json, timeout))
        return _Resp()

    monkeypatch.setattr(slack.requests, "post", fake_post)
    assert post_to_webhook("https://hooks.slack.com/services/T/B/X", "hello", timeout=3)
    assert calls == [("https://hooks.slack.com/services/T/B/X", {"text": "hello"}, 3)]


def test_post_to_webhook_in_channel_reply(monkeypatch):
    calls = []
    monkeypatch.setattr(slack.requests, "post", lambda url, json=None, timeout=None: calls.append(json) or _Resp())

    post_to_webhook("https://hooks.slack.com/commands/1/2/3", "hi", response_type="in_channel")
    assert calls == [{"response_type": "in_channel", "text": "hi"}]


def test_post_to_webhook_rejected(monkeypatch):
    monkeypatch.setattr(slack.requests, "post", lambda *a, **k: _Resp(404, "Not Found"))

    with pytest.raises(DeliveryError) as excinfo:
        post_to_webhook("https://hooks.slack.com/services/T/B/X", "hello")
    assert excinfo.value.status == 404
    assert str(excinfo.value) == "Slack API error: 404 Not Found"


def test_post_to_webhook_network_failure(monkeypatch):
    def boom(*a, **k):
        raise requests.exceptions.ConnectionError("connection refused")

    monkeypatch.setattr(slack.requests, "post", boom)
    with pytest.raises(NetworkFailure) as excinfo:
        post_to_webhook("https://hooks.slack.com/services/T/B/X", "hello")
    assert excinfo.value.source == "Slack"
