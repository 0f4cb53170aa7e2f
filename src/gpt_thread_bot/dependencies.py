"""Service construction and FastAPI injection.

``build_services`` creates every outbound client from settings. The FastAPI
lifespan owns the result (stored on ``app.state``) and closes it on shutdown;
route handlers receive it through ``Depends(get_services)``.
"""

import logging
from dataclasses import dataclass

import httpx
from fastapi import Request
from openai import AsyncAzureOpenAI
from slack_sdk.web.async_client import AsyncWebClient

from gpt_thread_bot.config import Settings
from gpt_thread_bot.llm.completion import (
    COMPLETION_TIMEOUT_SECONDS,
    ChatCompletionClient,
    CompletionClient,
    RetrievalCompletionClient,
)
from gpt_thread_bot.moderation.gate import ModerationGate, StaticPatternGate, WordListGate
from gpt_thread_bot.slack.client import create_slack_client

logger = logging.getLogger(__name__)


@dataclass
class BotServices:
    """Everything the mention pipeline talks to, built once per process."""

    settings: Settings
    slack: AsyncWebClient
    gate: ModerationGate
    completion: CompletionClient

    async def aclose(self) -> None:
        await self.completion.aclose()


def build_completion_client(settings: Settings) -> CompletionClient:
    """Select and construct the completion strategy named by ``completion_protocol``."""
    if not settings.openai_api_url:
        logger.warning("OPENAI_API_URL is not set; completion requests will fail")

    if settings.completion_protocol == "retrieval":
        return RetrievalCompletionClient(
            http_client=httpx.AsyncClient(timeout=httpx.Timeout(COMPLETION_TIMEOUT_SECONDS)),
            endpoint_url=settings.openai_api_url,
            api_key=settings.openai_api_key,
            deployment=settings.openai_deploy_name,
        )

    return ChatCompletionClient(
        client=AsyncAzureOpenAI(
            api_key=settings.openai_api_key,
            azure_endpoint=settings.openai_api_url,
            api_version=settings.openai_api_version,
            timeout=COMPLETION_TIMEOUT_SECONDS,
            max_retries=0,
        ),
        deployment=settings.openai_deploy_name,
    )


def build_moderation_gate(settings: Settings) -> ModerationGate:
    """Select and construct the moderation gate named by ``moderation_backend``."""
    if settings.moderation_backend == "blob":
        return WordListGate(
            connection_string=settings.azure_storage_connection_string,
            container=settings.moderation_container,
            blob_name=settings.moderation_blob_name,
            fail_closed=settings.moderation_fail_closed,
        )
    return StaticPatternGate()


def build_services(settings: Settings) -> BotServices:
    """Construct all pipeline collaborators from settings."""
    services = BotServices(
        settings=settings,
        slack=create_slack_client(settings),
        gate=build_moderation_gate(settings),
        completion=build_completion_client(settings),
    )
    logger.info(
        "Services initialised",
        extra={
            "completion_protocol": settings.completion_protocol,
            "moderation_backend": settings.moderation_backend,
            "moderation_fail_closed": settings.moderation_fail_closed,
        },
    )
    return services


def get_services(request: Request) -> BotServices:
    """FastAPI dependency returning the services built by the lifespan."""
    return request.app.state.services
