import os

import uvicorn

from peak_report.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def check_slack_config() -> None:
    """
    Warn about missing Slack settings before serving. Controlled by:
    - PEAK_SLACK_WEBHOOK_URL for scheduled and /test reports
    - PEAK_SLACK_SIGNING_SECRET for the slash command endpoint
    """
    if not settings.slack_webhook_url:
        logger.warning("PEAK_SLACK_WEBHOOK_URL is not set; scheduled and /test reports will fail.")
    if not settings.slack_signing_secret:
        logger.warning("PEAK_SLACK_SIGNING_SECRET is not set; slash commands will be rejected.")


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="peak_report")
    check_slack_config()

    uvicorn.run(
        "peak_report.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
