"""Shared test fixtures."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from gpt_thread_bot.app import app
from gpt_thread_bot.config import Settings
from gpt_thread_bot.dependencies import BotServices


@pytest.fixture
def settings() -> Settings:
    """Settings with a known system prompt and no window limit."""
    return Settings(
        _env_file=None,
        slack_bot_token="xoxb-test",
        chat_gpt_system_prompt="You are a helpful assistant.",
        gpt_thread_max_count=None,
    )


@pytest.fixture
def services(settings: Settings) -> BotServices:
    """BotServices with every external collaborator mocked."""
    slack = MagicMock()
    slack.chat_postMessage = AsyncMock()
    slack.conversations_replies = AsyncMock()
    gate = MagicMock()
    gate.check = AsyncMock(return_value=False)
    completion = MagicMock()
    completion.complete = AsyncMock(return_value="An answer.")
    completion.aclose = AsyncMock()
    return BotServices(settings=settings, slack=slack, gate=gate, completion=completion)


@pytest.fixture
def client(services: BotServices):
    """TestClient whose lifespan installs the mocked services."""
    with (
        patch("gpt_thread_bot.app.build_services", return_value=services),
        TestClient(app) as test_client,
    ):
        yield test_client
