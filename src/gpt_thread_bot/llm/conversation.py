"""Conversation assembly: thread history -> ordered, windowed, role-tagged messages.

Slack does not guarantee that conversations.replies returns messages in time
order, so everything here sorts by the numeric timestamp before windowing.
"""

import re

from gpt_thread_bot.models.conversation import ChatMessage, Role, ThreadMessage

# A single leading user mention such as "<@U012ABC> " or "<@U012ABC|name> "
LEADING_MENTION_PATTERN = re.compile(r"^\s*<@[^>]+>\s*")


def strip_mention(text: str) -> str:
    """Remove the first leading ``<@...>`` mention token and the whitespace after it."""
    return LEADING_MENTION_PATTERN.sub("", text, count=1)


def extract_question(text: str) -> str:
    """Derive the standalone question from a raw mention text."""
    return strip_mention(text).strip()


def sort_messages(messages: list[ThreadMessage]) -> list[ThreadMessage]:
    """Order messages by ascending numeric timestamp.

    ``sorted`` is stable, so messages sharing a timestamp keep their fetch order.
    """
    return sorted(messages, key=lambda m: m.timestamp)


def window_messages(messages: list[ThreadMessage], max_count: int | None) -> list[ThreadMessage]:
    """Keep only the last ``max_count`` messages.

    ``None`` or a non-positive value disables truncation.
    """
    if max_count is None or max_count <= 0:
        return list(messages)
    return messages[-max_count:]


def to_chat_message(message: ThreadMessage) -> ChatMessage:
    """Map a thread message to a role-tagged message (bot -> assistant, human -> user)."""
    role = Role.ASSISTANT if message.is_bot else Role.USER
    return ChatMessage(role=role, content=strip_mention(message.text))


def assemble_history(
    messages: list[ThreadMessage], max_count: int | None
) -> list[ChatMessage]:
    """Sort, window, and role-tag a thread's messages.

    Returns an empty list when the thread has nothing to send.
    """
    windowed = window_messages(sort_messages(messages), max_count)
    return [to_chat_message(m) for m in windowed]


def build_conversation(history: list[ChatMessage], system_prompt: str) -> list[ChatMessage]:
    """Prepend the system message to an assembled history."""
    return [ChatMessage(role=Role.SYSTEM, content=system_prompt), *history]
