"""Moderation gates: decide whether a mention contains disallowed content.

StaticPatternGate matches a fixed pattern set compiled into the module.
WordListGate matches a word list fetched from blob storage on every check.

Word list failure policy is fail-open unless ``fail_closed`` is set: when the
list cannot be fetched the gate logs a warning and lets the message through.
With ``fail_closed=True`` the same failure rejects the message instead.
"""

import logging
import re
from typing import Protocol

from gpt_thread_bot.moderation.wordlist import WordListUnavailableError, fetch_word_list

logger = logging.getLogger(__name__)

BANNED_TERMS = (
    "死ね",
    "殺す",
    "クレジットカード",
)

# A password being disclosed ("password: x", "my password is x"), not merely mentioned
CREDENTIAL_PATTERN = r"(?:password|パスワード)\s*(?:\bis\s+|[:=：]\s*)\S"

# Hyphenated numbers (03-1234-5678, 090-1234-5678) or 10-11 bare digits starting with 0
PHONE_NUMBER_PATTERN = r"(?<!\d)\d{2,4}-\d{2,4}-\d{3,4}(?!\d)|(?<!\d)0\d{9,10}(?!\d)"

STATIC_PATTERN = re.compile(
    "|".join(
        [*(re.escape(term) for term in BANNED_TERMS), CREDENTIAL_PATTERN, PHONE_NUMBER_PATTERN]
    ),
    re.IGNORECASE,
)


class ModerationGate(Protocol):
    """Strategy interface for the moderation stage."""

    async def check(self, text: str) -> bool:
        """Return True if ``text`` is disallowed."""
        ...


def contains_banned_content(text: str) -> bool:
    """Test text against the static banned-term, credential and phone-number patterns."""
    return STATIC_PATTERN.search(text) is not None


def matches_word_list(text: str, patterns: list[str]) -> bool:
    """Return True on the first pattern that matches ``text`` case-insensitively.

    Each pattern is a regular expression. A pattern that fails to compile is
    matched as a literal substring instead.
    """
    for pattern in patterns:
        try:
            if re.search(pattern, text, re.IGNORECASE):
                return True
        except re.error:
            logger.warning("Invalid moderation pattern, matching literally: %r", pattern)
            if pattern.casefold() in text.casefold():
                return True
    return False


class StaticPatternGate:
    """Moderation against the built-in pattern set. No I/O."""

    async def check(self, text: str) -> bool:
        return contains_banned_content(text)


class WordListGate:
    """Moderation against a word list downloaded from Azure Blob Storage per check."""

    def __init__(
        self,
        connection_string: str,
        container: str,
        blob_name: str,
        *,
        fail_closed: bool = False,
    ) -> None:
        self._connection_string = connection_string
        self._container = container
        self._blob_name = blob_name
        self._fail_closed = fail_closed

    async def check(self, text: str) -> bool:
        try:
            patterns = await fetch_word_list(
                self._connection_string, self._container, self._blob_name
            )
        except WordListUnavailableError as exc:
            logger.warning(
                "Moderation word list unavailable (%s): %s",
                "rejecting" if self._fail_closed else "allowing",
                exc,
            )
            return self._fail_closed

        return matches_word_list(text, patterns)
