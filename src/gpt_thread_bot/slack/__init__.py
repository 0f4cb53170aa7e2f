"""Slack ingress: webhook handling, signature verification, thread history, and replies.

The webhook router lives in ``gpt_thread_bot.slack.router`` and is imported
directly by the app, since it depends on the service container.
"""

from gpt_thread_bot.slack.client import create_slack_client
from gpt_thread_bot.slack.history import ThreadFetchError, fetch_thread_messages
from gpt_thread_bot.slack.responder import post_reply

__all__ = [
    "ThreadFetchError",
    "create_slack_client",
    "fetch_thread_messages",
    "post_reply",
]
