"""Completion clients: conversation -> answer text.

Two wire protocols are supported behind one ``CompletionClient`` interface:

- ``ChatCompletionClient`` sends the full role-tagged conversation to an Azure
  OpenAI chat-completion deployment.
- ``RetrievalCompletionClient`` posts ``{chat_history, question}`` to a custom
  retrieval-augmented scoring endpoint and reads the ``answer`` field.

Neither client raises: every failure is logged and reported as ``None`` so the
pipeline can always post a definite reply. Neither client retries either;
Slack's own redelivery is the only retry in the system.
"""

import json
import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
from openai import AsyncOpenAI

from gpt_thread_bot.llm.unescape import unescape_unicode
from gpt_thread_bot.models.conversation import ChatMessage, Role

logger = logging.getLogger(__name__)

# Bounded so a stuck completion cannot hold a worker indefinitely
COMPLETION_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class SamplingParams:
    """Fixed sampling parameters sent with every chat-completion request."""

    max_tokens: int = 800
    temperature: float = 0.7
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0
    top_p: float = 0.95


class CompletionClient(Protocol):
    """Strategy interface the mention pipeline is configured with."""

    async def complete(self, conversation: list[ChatMessage], question: str) -> str | None:
        """Return the answer text, or None when no answer was produced."""
        ...

    async def aclose(self) -> None:
        """Release network resources held by the client."""
        ...


class ChatCompletionClient:
    """Chat-completion protocol over the OpenAI SDK (Azure deployments)."""

    def __init__(
        self,
        client: AsyncOpenAI,
        deployment: str,
        params: SamplingParams | None = None,
    ) -> None:
        self._client = client
        self._deployment = deployment
        self._params = params or SamplingParams()

    async def complete(self, conversation: list[ChatMessage], question: str) -> str | None:
        try:
            response = await self._client.chat.completions.create(
                model=self._deployment,
                messages=[m.to_payload() for m in conversation],
                max_tokens=self._params.max_tokens,
                temperature=self._params.temperature,
                frequency_penalty=self._params.frequency_penalty,
                presence_penalty=self._params.presence_penalty,
                top_p=self._params.top_p,
            )
            content = response.choices[0].message.content
        except Exception as exc:
            logger.error("Chat completion failed: %s", exc, exc_info=True)
            return None

        logger.info(
            "Chat completion complete",
            extra={
                "deployment": self._deployment,
                "messages": len(conversation),
                "answer_chars": len(content or ""),
            },
        )
        return content

    async def aclose(self) -> None:
        await self._client.close()


def build_chat_history(conversation: list[ChatMessage]) -> list[dict]:
    """Pair answered questions from a conversation into retrieval chat history.

    Each user message immediately followed by an assistant message becomes
    ``{"inputs": {"question": ...}, "outputs": {"answer": ...}}``. The system
    message, unanswered questions, and unprompted assistant messages are skipped.
    """
    history: list[dict] = []
    pending_question: str | None = None
    for message in conversation:
        if message.role == Role.USER:
            pending_question = message.content
        elif message.role == Role.ASSISTANT and pending_question is not None:
            history.append(
                {
                    "inputs": {"question": pending_question},
                    "outputs": {"answer": message.content},
                }
            )
            pending_question = None
    return history


def parse_answer(raw_body: str) -> str | None:
    """Extract the ``answer`` field from a raw retrieval endpoint response body.

    The body is unescaped first, then parsed as JSON. A body that decodes to a
    JSON string (a document serialized twice) is decoded once more.

    Raises:
        ValueError: If the body is not valid JSON.
        KeyError: If the decoded document has no ``answer`` field.
        TypeError: If the decoded document is not an object.
    """
    data = json.loads(unescape_unicode(raw_body))
    if isinstance(data, str):
        data = json.loads(data)
    if not isinstance(data, dict):
        raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
    answer = data["answer"]
    return str(answer) if answer is not None else None


class RetrievalCompletionClient:
    """Retrieval-augmented protocol: plain JSON POST to a scoring endpoint."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        endpoint_url: str,
        api_key: str,
        deployment: str,
    ) -> None:
        self._http = http_client
        self._endpoint_url = endpoint_url
        self._headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
            "azureml-model-deployment": deployment,
        }

    async def complete(self, conversation: list[ChatMessage], question: str) -> str | None:
        payload = {
            "chat_history": build_chat_history(conversation),
            "question": question,
        }
        try:
            response = await self._http.post(
                self._endpoint_url,
                headers=self._headers,
                content=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
            )
            response.raise_for_status()
            answer = parse_answer(response.text)
        except httpx.HTTPError as exc:
            logger.error("Retrieval endpoint request failed: %s", exc, exc_info=True)
            return None
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Retrieval endpoint returned an unusable body: %s", exc, exc_info=True)
            return None

        logger.info(
            "Retrieval completion complete",
            extra={
                "history_pairs": len(payload["chat_history"]),
                "answer_chars": len(answer or ""),
            },
        )
        return answer

    async def aclose(self) -> None:
        await self._http.aclose()
