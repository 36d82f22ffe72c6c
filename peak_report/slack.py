"""Slack glue: request signature checks, slash-command parsing, webhook delivery."""

from __future__ import annotations

import hashlib
import hmac
import re
import time

import requests

from peak_report.exceptions import DeliveryError, NetworkFailure
from utils.logging_utils import get_tagged_logger, mask_webhook_url

logger = get_tagged_logger(__name__, tag="peak_report/slack")

SIGNATURE_VERSION = "v0"
MAX_REQUEST_AGE_SECONDS = 300

_HOUR_PATTERN = re.compile(r"(\d{1,2})(?:\s*(?:am|pm))?", re.IGNORECASE)


def compute_slack_signature(body: bytes, timestamp: str, signing_secret: str) -> str:
    """Signature Slack sends in X-Slack-Signature for this body and timestamp."""
    base = f"{SIGNATURE_VERSION}:{timestamp}:".encode() + body
    digest = hmac.new(signing_secret.encode(), base, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def verify_slack_signature(
    body: bytes,
    timestamp: str | None,
    signature: str | None,
    signing_secret: str | None,
    *,
    now: float | None = None,
) -> bool:
    """
    Check a Slack request signature.

    Rejects requests with missing headers, a missing secret, or a timestamp
    more than five minutes away from ``now`` (replay protection).
    """
    if not timestamp or not signature:
        logger.warning("Missing Slack signature headers")
        return False
    if not signing_secret:
        logger.error("Slack signing secret is not configured; rejecting request")
        return False

    try:
        ts = int(timestamp)
    except ValueError:
        logger.warning("Non-numeric Slack request timestamp", extra={"timestamp": timestamp})
        return False

    current = time.time() if now is None else now
    if abs(current - ts) > MAX_REQUEST_AGE_SECONDS:
        logger.warning("Slack request too old", extra={"age_seconds": int(abs(current - ts))})
        return False

    expected = compute_slack_signature(body, timestamp, signing_secret)
    valid = hmac.compare_digest(expected.encode(), signature.encode())
    if not valid:
        logger.warning("Slack signature mismatch")
    return valid


def parse_target_hour(text: str | None, default: int = 5) -> int:
    """
    Read an hour of the day from slash-command text such as "7", "7am" or "3 pm".

    Anything unparseable or outside 0-23 falls back to ``default``.
    """
    if not text:
        return default
    match = _HOUR_PATTERN.search(text)
    if not match:
        return default

    hour = int(match.group(1))
    lowered = text.lower()
    if "pm" in lowered and hour < 12:
        hour += 12
    if "am" in lowered and hour == 12:
        hour = 0

    if 0 <= hour <= 23:
        return hour
    return default


def post_to_webhook(url: str, text: str, *, response_type: str | None = None, timeout: float = 10) -> bool:
    """POST a message to a Slack incoming webhook or slash-command response URL."""
    payload = {"text": text}
    if response_type is not None:
        payload = {"response_type": response_type, "text": text}

    masked = mask_webhook_url(url)
    try:
        r = requests.post(url, json=payload, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        logger.error("Slack POST failed", extra={"url": masked, "error": str(exc)})
        raise NetworkFailure("Slack", str(exc)) from exc

    if not r.ok:
        logger.error("Slack rejected message", extra={"url": masked, "status": r.status_code})
        raise DeliveryError(r.status_code, r.reason or "")

    logger.info("Delivered report to Slack", extra={"url": masked, "chars": len(text)})
    return True
