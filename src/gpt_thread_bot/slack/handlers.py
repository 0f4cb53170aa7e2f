"""Slack event classification and the mention pipeline."""

import logging

from fastapi import BackgroundTasks
from fastapi.responses import JSONResponse

from gpt_thread_bot.dependencies import BotServices
from gpt_thread_bot.llm.conversation import assemble_history, build_conversation, extract_question
from gpt_thread_bot.models.conversation import ChatMessage
from gpt_thread_bot.models.events import EventEnvelope, EventParseError
from gpt_thread_bot.slack.history import ThreadFetchError, fetch_thread_messages
from gpt_thread_bot.slack.responder import (
    ERROR_TEXT_TEMPLATE,
    FETCH_FAILED_TEXT,
    NO_ANSWER_TEXT,
    NO_QUESTION_TEXT,
    REJECTED_TEXT,
    post_reply,
)

logger = logging.getLogger(__name__)


def handle_slack_event(
    envelope: EventEnvelope,
    background_tasks: BackgroundTasks,
    services: BotServices,
) -> JSONResponse:
    """Classify a decoded event envelope and dispatch it.

    - challenge present: echo the challenge token (url_verification handshake)
    - app_mention event: schedule the mention pipeline in the background
    - anything else, including a mention with unexpected field types: acknowledge with 200
    """
    if envelope.challenge is not None:
        logger.info("Answering url_verification challenge")
        return JSONResponse({"challenge": envelope.challenge})

    try:
        event = envelope.mention()
    except EventParseError as exc:
        logger.warning("Ignoring malformed mention: %s", exc)
        return JSONResponse({"ok": True})
    if event is None:
        return JSONResponse({"ok": True})

    thread_ts = event.thread_id
    if not event.channel or not thread_ts:
        logger.warning("Mention without channel or ts, skipping: %s", event.model_dump())
        return JSONResponse({"ok": True})

    logger.info(
        "Dispatching mention from user %s in channel %s (thread %s)",
        event.user,
        event.channel,
        thread_ts,
    )
    background_tasks.add_task(
        process_mention,
        services,
        channel=event.channel,
        thread_ts=thread_ts,
        text=event.text,
    )
    return JSONResponse({"ok": True})


async def process_mention(
    services: BotServices, channel: str, thread_ts: str, text: str
) -> None:
    """Run the mention pipeline, reporting any unexpected error into the thread.

    Stages: moderation -> thread fetch -> conversation assembly -> completion -> reply.
    Each stage that cannot continue posts a canned notice and stops.
    """
    try:
        await _run_pipeline(services, channel, thread_ts, text)
    except Exception as exc:
        logger.error(
            "Mention pipeline failed for %s/%s: %s", channel, thread_ts, exc, exc_info=True
        )
        await post_reply(
            services.slack, channel, thread_ts, ERROR_TEXT_TEMPLATE.format(error=exc)
        )


async def _run_pipeline(
    services: BotServices, channel: str, thread_ts: str, text: str
) -> None:
    settings = services.settings
    slack = services.slack

    # Stage 1: Moderation
    if await services.gate.check(text):
        logger.info("Mention rejected by moderation in %s/%s", channel, thread_ts)
        await post_reply(slack, channel, thread_ts, REJECTED_TEXT)
        return

    # Stage 2: Thread history
    try:
        messages = await fetch_thread_messages(slack, channel, thread_ts)
    except ThreadFetchError as exc:
        logger.warning("Thread fetch failed for %s/%s: %s", channel, thread_ts, exc)
        await post_reply(slack, channel, thread_ts, FETCH_FAILED_TEXT)
        return

    # Stage 3: Conversation assembly
    history = assemble_history(messages, settings.gpt_thread_max_count)
    if not history:
        await post_reply(slack, channel, thread_ts, NO_QUESTION_TEXT)
        return
    conversation = build_conversation(history, settings.chat_gpt_system_prompt)

    # Stage 4: Completion
    answer = await _complete(services, conversation, extract_question(text))
    if not answer or not answer.strip():
        await post_reply(slack, channel, thread_ts, NO_ANSWER_TEXT)
        return

    # Stage 5: Reply
    await post_reply(slack, channel, thread_ts, answer)
    logger.info(
        "Answer posted",
        extra={"channel": channel, "thread_ts": thread_ts, "messages": len(conversation)},
    )


async def _complete(
    services: BotServices, conversation: list[ChatMessage], question: str
) -> str | None:
    """Call the completion strategy, treating any escaped exception as no answer."""
    try:
        return await services.completion.complete(conversation, question)
    except Exception as exc:
        logger.error("Completion client raised: %s", exc, exc_info=True)
        return None
