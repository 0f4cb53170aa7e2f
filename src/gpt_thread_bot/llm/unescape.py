"""Decoding of literal ``\\uXXXX`` sequences in raw completion responses.

The retrieval endpoint double-encodes non-ASCII text, so its body arrives with
escapes like ``\\\\u3053`` that a single ``json.loads`` would leave as literal
text. ``unescape_unicode`` rewrites those sequences to the characters they name
before the body is parsed.
"""

import re

# One or two backslashes (a run that does not continue further left), then uXXXX.
# Two backslashes is the double-encoded form; longer runs are escaped backslashes.
_ESCAPE_PATTERN = re.compile(r"(?<!\\)\\{1,2}u([0-9a-fA-F]{4})")

_QUOTE = 0x22
_BACKSLASH = 0x5C
_FIRST_PRINTABLE = 0x20


def _is_structural(code_point: int) -> bool:
    """Code points that must stay escaped for the result to remain valid JSON."""
    return code_point < _FIRST_PRINTABLE or code_point in (_QUOTE, _BACKSLASH)


def _replace(match: re.Match[str]) -> str:
    code_point = int(match.group(1), 16)
    if _is_structural(code_point):
        return match.group(0)
    return chr(code_point)


def _join_surrogates(text: str) -> str:
    """Combine UTF-16 surrogate pairs produced by separate escapes into one character."""
    if not any("\ud800" <= ch <= "\udfff" for ch in text):
        return text
    return text.encode("utf-16", "surrogatepass").decode("utf-16", "replace")


def unescape_unicode(text: str) -> str:
    """Replace literal ``\\uXXXX`` escapes in ``text`` with the characters they encode.

    Text without escapes is returned unchanged (including the empty string).
    Escapes for quotes, backslashes, and control characters are left as-is so
    the result can still be parsed as JSON.
    """
    if not text:
        return text
    decoded = _ESCAPE_PATTERN.sub(_replace, text)
    return _join_surrogates(decoded)
