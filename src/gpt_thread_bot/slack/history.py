"""Thread history retrieval via conversations.replies."""

import logging

import aiohttp
from pydantic import ValidationError
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from gpt_thread_bot.models.conversation import ThreadMessage

logger = logging.getLogger(__name__)

REPLIES_PAGE_SIZE = 200


class ThreadFetchError(RuntimeError):
    """Raised when a thread's messages cannot be retrieved from Slack."""


async def fetch_thread_messages(
    client: AsyncWebClient, channel: str, thread_ts: str
) -> list[ThreadMessage]:
    """Fetch every message in a thread, following pagination cursors.

    Messages are returned in the order Slack delivered them, which is not
    guaranteed to be time order.

    Raises:
        ThreadFetchError: On Slack API errors, ``ok: false`` responses,
            transport failures, or malformed message objects.
    """
    messages: list[ThreadMessage] = []
    cursor: str | None = None

    while True:
        kwargs: dict = {"channel": channel, "ts": thread_ts, "limit": REPLIES_PAGE_SIZE}
        if cursor:
            kwargs["cursor"] = cursor

        try:
            response = await client.conversations_replies(**kwargs)
        except SlackApiError as exc:
            error_code = exc.response.get("error", "") if exc.response else ""
            raise ThreadFetchError(f"conversations.replies failed: {error_code}") from exc
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise ThreadFetchError(f"conversations.replies request failed: {exc}") from exc

        if not response.get("ok"):
            raise ThreadFetchError(
                f"conversations.replies returned ok=false: {response.get('error', 'unknown')}"
            )

        try:
            messages.extend(
                ThreadMessage.model_validate(m) for m in response.get("messages", [])
            )
        except ValidationError as exc:
            raise ThreadFetchError(f"Malformed message in thread {thread_ts}") from exc

        metadata = response.get("response_metadata") or {}
        cursor = metadata.get("next_cursor")
        if not cursor:
            break

    logger.info(
        "Fetched thread history",
        extra={"channel": channel, "thread_ts": thread_ts, "messages": len(messages)},
    )
    return messages
