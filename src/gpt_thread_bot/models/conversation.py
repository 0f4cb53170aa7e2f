"""Thread history and role-tagged message models."""

from decimal import Decimal, InvalidOperation
from enum import Enum

from pydantic import BaseModel, field_validator


class Role(str, Enum):
    """Conversational role of a message sent to the completion service."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ThreadMessage(BaseModel):
    """One prior message in a Slack thread, as returned by conversations.replies."""

    ts: str
    text: str = ""
    bot_id: str | None = None  # Set when the message was posted by a bot

    @field_validator("ts")
    @classmethod
    def _ts_is_numeric(cls, value: str) -> str:
        try:
            numeric = Decimal(value)
        except InvalidOperation as exc:
            raise ValueError(f"ts must be numeric, got {value!r}") from exc
        if not numeric.is_finite():
            raise ValueError(f"ts must be finite, got {value!r}")
        return value

    @property
    def timestamp(self) -> Decimal:
        """Numeric timestamp used for ordering (Decimal keeps microsecond precision)."""
        return Decimal(self.ts)

    @property
    def is_bot(self) -> bool:
        return bool(self.bot_id)


class ChatMessage(BaseModel):
    """A role-tagged message in the conversation sent to the completion service."""

    role: Role
    content: str

    def to_payload(self) -> dict[str, str]:
        """Return the ``{"role", "content"}`` dict expected by chat-completion APIs."""
        return {"role": self.role.value, "content": self.content}
