"""Inbound Slack event envelope and mention event models."""

from typing import Any

from pydantic import BaseModel, ValidationError

MENTION_EVENT_TYPE = "app_mention"


class EventParseError(ValueError):
    """Raised when an inbound request body is not a valid JSON event envelope."""


class MentionEvent(BaseModel):
    """The nested ``event`` object of an ``app_mention`` callback."""

    user: str | None = None
    text: str = ""
    channel: str | None = None
    ts: str | None = None  # Slack message ts, e.g., "1234567890.123456"
    thread_ts: str | None = None  # Present only when the mention is a thread reply

    @property
    def thread_id(self) -> str | None:
        """Timestamp identifying the thread the reply belongs to."""
        return self.thread_ts or self.ts


class EventEnvelope(BaseModel):
    """Decoded Events API payload.

    ``event`` stays a plain dict: Slack sends dozens of event shapes and only
    ``app_mention`` is validated further, via :meth:`mention`.
    """

    challenge: str | None = None
    event: dict[str, Any] | None = None

    @property
    def event_type(self) -> str | None:
        return self.event.get("type") if self.event else None

    def mention(self) -> MentionEvent | None:
        """Return the mention event, or None for any other event type.

        Raises:
            EventParseError: If the event is an app_mention with unexpected field types.
        """
        if self.event_type != MENTION_EVENT_TYPE:
            return None
        try:
            return MentionEvent.model_validate(self.event)
        except ValidationError as exc:
            raise EventParseError(f"Invalid app_mention event: {exc.errors()[0]['msg']}") from exc


def parse_envelope(body: bytes | str) -> EventEnvelope:
    """Strictly decode a raw request body into an EventEnvelope.

    Raises:
        EventParseError: If the body is not JSON, or not a JSON object matching
            the envelope shape.
    """
    try:
        return EventEnvelope.model_validate_json(body)
    except ValidationError as exc:
        raise EventParseError(f"Invalid event payload: {exc.errors()[0]['msg']}") from exc
