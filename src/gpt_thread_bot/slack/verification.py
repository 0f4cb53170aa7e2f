"""Slack request signature verification as a FastAPI dependency."""

import logging

from fastapi import HTTPException, Request
from slack_sdk.signature import SignatureVerifier

from gpt_thread_bot.config import get_settings

logger = logging.getLogger(__name__)


async def verify_slack_request(request: Request) -> bytes:
    """Verify the Slack request signature and return the raw body.

    Reads the raw body FIRST (before any JSON parsing) to ensure the
    signature verification uses the exact bytes Slack signed. Verification
    is skipped when no signing secret is configured.

    Raises HTTPException(403) if the signature is invalid.
    """
    settings = get_settings()
    body = await request.body()

    if not settings.slack_signing_secret:
        return body

    timestamp = request.headers.get("X-Slack-Request-Timestamp", "")
    signature = request.headers.get("X-Slack-Signature", "")

    verifier = SignatureVerifier(signing_secret=settings.slack_signing_secret)

    if not verifier.is_valid(
        body=body.decode("utf-8", errors="replace"), timestamp=timestamp, signature=signature
    ):
        logger.warning("Rejected request with invalid Slack signature")
        raise HTTPException(status_code=403, detail="Invalid Slack signature")

    return body
