"""HTTP API: Slack slash command, manual test trigger, health check."""

from urllib.parse import parse_qs

from fastapi import APIRouter, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from .config import settings
from .records import format_hour
from .pipeline import build_pipeline
from .scheduler import run_scheduled_report
from .slack import parse_target_hour, post_to_webhook, verify_slack_signature
from utils.logging_utils import get_tagged_logger, mask_webhook_url

logger = get_tagged_logger(__name__, tag="peak_report/api")

router = APIRouter()


def _form_value(form: dict[str, list[str]], key: str) -> str:
    """First value of a form field, or an empty string."""
    values = form.get(key) or [""]
    return values[0]


def _generate_and_reply(target_hour: int, response_url: str) -> None:
    """Build the report and post it back to the channel that asked for it."""
    message = build_pipeline().generate(target_hour)
    post_to_webhook(
        response_url,
        message,
        response_type="in_channel",
        timeout=settings.request_timeout_seconds,
    )


def _error_reply(e: Exception) -> JSONResponse:
    """Ephemeral Slack reply shown only to the user who ran the command."""
    return JSONResponse(
        {"response_type": "ephemeral", "text": f"Error: {e}"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@router.get("/health")
def health():
    """Liveness probe."""
    return {"status": "ok"}


@router.post("/slack/command")
async def slack_command(request: Request):
    """Handle the signed slash command and reply through Slack's response_url."""
    body = await request.body()
    valid = verify_slack_signature(
        body,
        request.headers.get("x-slack-request-timestamp"),
        request.headers.get("x-slack-signature"),
        settings.slack_signing_secret,
    )
    if not valid:
        return PlainTextResponse("Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)

    try:
        form = parse_qs(body.decode("utf-8"), keep_blank_values=True)
    except UnicodeDecodeError as e:
        logger.error("Undecodable slash command payload: %s", e)
        return _error_reply(e)

    command = _form_value(form, "command")
    response_url = _form_value(form, "response_url")
    text = _form_value(form, "text")
    logger.info("Received slash command", extra={"command": command, "text": text})

    if command != settings.slash_command:
        return PlainTextResponse("Not found", status_code=status.HTTP_404_NOT_FOUND)

    target_hour = parse_target_hour(text, default=settings.default_target_hour)
    try:
        if not response_url:
            raise ValueError("Slash command payload has no response_url")
        logger.info(
            "Generating weather report for slash command",
            extra={"target_hour": format_hour(target_hour), "response_url": mask_webhook_url(response_url)},
        )
        await run_in_threadpool(_generate_and_reply, target_hour, response_url)
    except Exception as e:
        logger.error("Error handling slash command: %s", e)
        return _error_reply(e)

    return Response(status_code=status.HTTP_200_OK)


@router.get("/test")
def send_test_report():
    """Generate the default report now and post it to the configured webhook."""
    try:
        run_scheduled_report(
            build_pipeline(),
            settings.slack_webhook_url,
            timeout=settings.request_timeout_seconds,
        )
    except Exception as e:
        logger.error("Error in test endpoint: %s", e)
        return PlainTextResponse(f"Error: {e}", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return PlainTextResponse("Test weather report sent successfully")
