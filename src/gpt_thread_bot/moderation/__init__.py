"""Moderation gate: rejects mentions with disallowed content before any completion call."""

from gpt_thread_bot.moderation.gate import (
    ModerationGate,
    StaticPatternGate,
    WordListGate,
    contains_banned_content,
    matches_word_list,
)
from gpt_thread_bot.moderation.wordlist import WordListUnavailableError, fetch_word_list

__all__ = [
    "ModerationGate",
    "StaticPatternGate",
    "WordListGate",
    "WordListUnavailableError",
    "contains_banned_content",
    "fetch_word_list",
    "matches_word_list",
]
