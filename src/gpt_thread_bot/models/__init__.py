"""Data models and enums for the mention pipeline."""

from gpt_thread_bot.models.conversation import ChatMessage, Role, ThreadMessage
from gpt_thread_bot.models.events import (
    MENTION_EVENT_TYPE,
    EventEnvelope,
    EventParseError,
    MentionEvent,
    parse_envelope,
)

__all__ = [
    "MENTION_EVENT_TYPE",
    "ChatMessage",
    "EventEnvelope",
    "EventParseError",
    "MentionEvent",
    "Role",
    "ThreadMessage",
    "parse_envelope",
]
