"""Tests for the chat-completion and retrieval completion clients."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from gpt_thread_bot.llm.completion import (
    ChatCompletionClient,
    RetrievalCompletionClient,
    SamplingParams,
    build_chat_history,
    parse_answer,
)
from gpt_thread_bot.models.conversation import ChatMessage, Role

ENDPOINT = "https://scoring.example.com/score"

CONVERSATION = [
    ChatMessage(role=Role.SYSTEM, content="Be helpful."),
    ChatMessage(role=Role.USER, content="What is RAG?"),
    ChatMessage(role=Role.ASSISTANT, content="Retrieval-augmented generation."),
    ChatMessage(role=Role.USER, content="Give an example."),
]


def _chat_response(content: str | None) -> SimpleNamespace:
    """Build an object shaped like an openai ChatCompletion."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


def _openai_client(**create_kwargs) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(**create_kwargs)
    client.close = AsyncMock()
    return client


# -- ChatCompletionClient --


async def test_chat_completion_returns_first_choice():
    sdk = _openai_client(return_value=_chat_response("An example is..."))
    client = ChatCompletionClient(sdk, deployment="gpt-35-turbo")

    answer = await client.complete(CONVERSATION, "Give an example.")

    assert answer == "An example is..."


async def test_chat_completion_sends_conversation_and_sampling_params():
    sdk = _openai_client(return_value=_chat_response("ok"))
    client = ChatCompletionClient(sdk, deployment="gpt-35-turbo")

    await client.complete(CONVERSATION, "Give an example.")

    kwargs = sdk.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-35-turbo"
    assert kwargs["messages"][0] == {"role": "system", "content": "Be helpful."}
    assert [m["role"] for m in kwargs["messages"]] == ["system", "user", "assistant", "user"]
    assert kwargs["max_tokens"] == 800
    assert kwargs["temperature"] == 0.7
    assert kwargs["frequency_penalty"] == 0
    assert kwargs["presence_penalty"] == 0
    assert kwargs["top_p"] == 0.95


async def test_chat_completion_custom_sampling_params():
    sdk = _openai_client(return_value=_chat_response("ok"))
    client = ChatCompletionClient(sdk, deployment="d", params=SamplingParams(max_tokens=50))

    await client.complete(CONVERSATION, "q")

    assert sdk.chat.completions.create.call_args.kwargs["max_tokens"] == 50


async def test_chat_completion_api_error_returns_none():
    request = httpx.Request("POST", "https://example.openai.azure.com")
    sdk = _openai_client(side_effect=openai.APIConnectionError(request=request))
    client = ChatCompletionClient(sdk, deployment="d")

    assert await client.complete(CONVERSATION, "q") is None


async def test_chat_completion_no_choices_returns_none():
    sdk = _openai_client(return_value=SimpleNamespace(choices=[]))
    client = ChatCompletionClient(sdk, deployment="d")

    assert await client.complete(CONVERSATION, "q") is None


async def test_chat_completion_aclose_closes_sdk_client():
    sdk = _openai_client(return_value=_chat_response("ok"))
    await ChatCompletionClient(sdk, deployment="d").aclose()
    sdk.close.assert_awaited_once()


# -- build_chat_history --


def test_build_chat_history_pairs_answered_questions():
    assert build_chat_history(CONVERSATION) == [
        {
            "inputs": {"question": "What is RAG?"},
            "outputs": {"answer": "Retrieval-augmented generation."},
        }
    ]


def test_build_chat_history_skips_unprompted_assistant():
    conversation = [
        ChatMessage(role=Role.SYSTEM, content="s"),
        ChatMessage(role=Role.ASSISTANT, content="Hello!"),
        ChatMessage(role=Role.USER, content="q"),
    ]
    assert build_chat_history(conversation) == []


def test_build_chat_history_uses_latest_question_before_answer():
    conversation = [
        ChatMessage(role=Role.USER, content="first"),
        ChatMessage(role=Role.USER, content="second"),
        ChatMessage(role=Role.ASSISTANT, content="answer"),
    ]
    assert build_chat_history(conversation)[0]["inputs"]["question"] == "second"


# -- parse_answer --


def test_parse_answer_plain_json():
    assert parse_answer('{"answer": "42"}') == "42"


def test_parse_answer_double_encoded_non_ascii():
    """A JSON document serialized twice, with non-ASCII escaped, decodes fully."""
    body = json.dumps(json.dumps({"answer": "晴れです"}))
    assert parse_answer(body) == "晴れです"


def test_parse_answer_missing_field():
    with pytest.raises(KeyError):
        parse_answer('{"result": "x"}')


def test_parse_answer_not_object():
    with pytest.raises(TypeError):
        parse_answer("[1, 2]")


# -- RetrievalCompletionClient --


def _retrieval_client(handler) -> RetrievalCompletionClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RetrievalCompletionClient(
        http_client, endpoint_url=ENDPOINT, api_key="secret-key", deployment="rag-1"
    )


async def test_retrieval_posts_question_and_history():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(200, text='{"answer": "For example..."}')

    client = _retrieval_client(handler)
    answer = await client.complete(CONVERSATION, "Give an example.")
    await client.aclose()

    assert answer == "For example..."
    request = captured["request"]
    assert str(request.url) == ENDPOINT
    assert request.headers["Authorization"] == "Bearer secret-key"
    assert request.headers["azureml-model-deployment"] == "rag-1"
    assert request.headers["Content-Type"] == "application/json"
    body = json.loads(request.content)
    assert body["question"] == "Give an example."
    assert body["chat_history"] == build_chat_history(CONVERSATION)


async def test_retrieval_unescapes_double_encoded_body():
    body = json.dumps(json.dumps({"answer": "こんにちは"}))

    client = _retrieval_client(lambda request: httpx.Response(200, text=body))

    assert await client.complete(CONVERSATION, "q") == "こんにちは"


async def test_retrieval_http_error_returns_none():
    client = _retrieval_client(lambda request: httpx.Response(500, text="boom"))
    assert await client.complete(CONVERSATION, "q") is None


async def test_retrieval_network_error_returns_none():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = _retrieval_client(handler)
    assert await client.complete(CONVERSATION, "q") is None


async def test_retrieval_malformed_json_returns_none():
    client = _retrieval_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
    assert await client.complete(CONVERSATION, "q") is None


async def test_retrieval_missing_answer_returns_none():
    client = _retrieval_client(lambda request: httpx.Response(200, text='{"result": "x"}'))
    assert await client.complete(CONVERSATION, "q") is None
