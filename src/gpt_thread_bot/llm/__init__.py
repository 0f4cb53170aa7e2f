"""Conversation assembly and completion clients.

Public API:
    assemble_history(messages, max_count) -> list[ChatMessage]
    build_conversation(history, system_prompt) -> list[ChatMessage]
    CompletionClient.complete(conversation, question) -> str | None
"""

from gpt_thread_bot.llm.completion import (
    ChatCompletionClient,
    CompletionClient,
    RetrievalCompletionClient,
    SamplingParams,
)
from gpt_thread_bot.llm.conversation import (
    assemble_history,
    build_conversation,
    extract_question,
    strip_mention,
)
from gpt_thread_bot.llm.unescape import unescape_unicode

__all__ = [
    "ChatCompletionClient",
    "CompletionClient",
    "RetrievalCompletionClient",
    "SamplingParams",
    "assemble_history",
    "build_conversation",
    "extract_question",
    "strip_mention",
    "unescape_unicode",
]
