"""Slack webhook router with signature verification."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from gpt_thread_bot.dependencies import BotServices, get_services
from gpt_thread_bot.models.events import EventParseError, parse_envelope
from gpt_thread_bot.slack.handlers import handle_slack_event
from gpt_thread_bot.slack.verification import verify_slack_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["slack"])


@router.post("/slack/events")
async def slack_events(
    request: Request,
    background_tasks: BackgroundTasks,
    body: bytes = Depends(verify_slack_request),
    services: BotServices = Depends(get_services),
) -> JSONResponse:
    """Receive Slack webhook events.

    Slack retries (X-Slack-Retry-Num header) are acknowledged immediately,
    before the body is decoded, so a redelivered mention never posts twice.
    """
    retry_num = request.headers.get("X-Slack-Retry-Num")
    if retry_num:
        logger.info(
            "Ignoring Slack retry %s (%s)",
            retry_num,
            request.headers.get("X-Slack-Retry-Reason", "unknown"),
        )
        return JSONResponse({"message": "No need to resend"})

    try:
        envelope = parse_envelope(body)
    except EventParseError as exc:
        logger.warning("Rejected malformed event payload: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return handle_slack_event(envelope, background_tasks, services)
