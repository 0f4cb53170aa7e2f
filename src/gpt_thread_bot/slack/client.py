"""Async Slack client construction.

The client is built once by the application lifespan and handed to the
pipeline through ``BotServices``; nothing in this package caches it globally.
"""

from slack_sdk.web.async_client import AsyncWebClient

from gpt_thread_bot.config import Settings

SLACK_TIMEOUT_SECONDS = 10


def create_slack_client(settings: Settings) -> AsyncWebClient:
    """Return an AsyncWebClient authenticated with the bot token from settings."""
    return AsyncWebClient(token=settings.slack_bot_token, timeout=SLACK_TIMEOUT_SECONDS)
