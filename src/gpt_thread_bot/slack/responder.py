"""Thread replies for answers and canned pipeline notices.

``post_reply`` is fire-and-forget: it catches and logs Slack errors but never
raises, so a failed notice cannot turn into an unhandled background error.
"""

import logging

import aiohttp
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

logger = logging.getLogger(__name__)

REJECTED_TEXT = "[Bot] Inappropriate content detected. The question was not sent."
FETCH_FAILED_TEXT = "[Bot] Failed to retrieve messages from this thread."
NO_QUESTION_TEXT = (
    "[Bot] No question found. Mention the bot together with your question and try again."
)
NO_ANSWER_TEXT = (
    "[Bot] No answer came back from the completion service. This usually happens "
    "when the service is overloaded. Please wait a moment and try again."
)
ERROR_TEXT_TEMPLATE = "[Bot] Error happened: {error}"


async def post_reply(client: AsyncWebClient, channel: str, thread_ts: str, text: str) -> None:
    """Post ``text`` into the thread anchored at ``thread_ts``.

    Args:
        client: Slack client authenticated with the bot token.
        channel: Slack channel ID.
        thread_ts: Thread parent timestamp.
        text: Message body (answer text or a canned notice).
    """
    try:
        await client.chat_postMessage(channel=channel, text=text, thread_ts=thread_ts)
    except SlackApiError as exc:
        error_code = exc.response.get("error", "") if exc.response else ""
        logger.warning(
            "Failed to post reply to %s/%s: %s", channel, thread_ts, error_code, exc_info=True
        )
    except (aiohttp.ClientError, TimeoutError):
        logger.warning("Failed to post reply to %s/%s", channel, thread_ts, exc_info=True)
