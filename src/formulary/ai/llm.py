"""LLM client abstractions."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence

import httpx
from openai import APIError, AsyncOpenAI

from formulary.config import get_settings, read_api_key

logger = logging.getLogger(__name__)


class EnrichmentError(RuntimeError):
    """Base class for failures of the text-generation collaborator."""


class ConfigurationError(EnrichmentError):
    """Raised when the credential needed to call the text-generation service is missing."""


class EnrichmentFailure(EnrichmentError):
    """Raised for network, status or parse failures during a completion call."""


class MalformedResponse(EnrichmentFailure):
    """Raised when a completion response lacks the expected structure."""


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def as_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class LLMClient(Protocol):
    """Minimal interface for chat-completion providers."""

    async def complete(
        self, messages: Sequence[ChatMessage], *, temperature: float, max_tokens: int
    ) -> Optional[str]:
        ...


class ChatCompletionClient:
    """OpenAI-compatible chat-completion client reading its key at call time."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        settings = get_settings()
        self.api_key = api_key
        self.base_url = base_url or settings.llm_base_url
        self.model = model or settings.llm_model
        self.timeout = timeout if timeout is not None else settings.llm_timeout_s
        self.http_client = http_client
        self._clients: Dict[str, AsyncOpenAI] = {}

    def _client_for(self, api_key: str) -> AsyncOpenAI:
        client = self._clients.get(api_key)
        if client is None:
            client = AsyncOpenAI(
                api_key=api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
                http_client=self.http_client,
            )
            self._clients[api_key] = client
        return client

    async def complete(
        self, messages: Sequence[ChatMessage], *, temperature: float, max_tokens: int
    ) -> Optional[str]:
        api_key = self.api_key or read_api_key()
        if not api_key:
            raise ConfigurationError("Missing GROQ_API_KEY in environment variables.")

        try:
            completion = await self._client_for(api_key).chat.completions.create(
                model=self.model,
                messages=[message.as_payload() for message in messages],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except APIError as exc:
            raise EnrichmentFailure(f"Chat completion failed: {exc}") from exc
        except ValueError as exc:
            raise MalformedResponse(f"Chat completion returned an unreadable body: {exc}") from exc

        choices = getattr(completion, "choices", None)
        if not choices:
            logger.warning("Chat completion response carried no choices")
            return None
        message = getattr(choices[0], "message", None)
        return getattr(message, "content", None) or None

    async def aclose(self) -> None:
        for client in self._clients.values():
            await client.close()
        self._clients.clear()


@dataclass
class MockLLMClient:
    """Deterministic mock returning canned responses and recording every call."""

    response: Optional[str] = None
    calls: List[List[ChatMessage]] = field(default_factory=list)

    async def complete(
        self, messages: Sequence[ChatMessage], *, temperature: float, max_tokens: int
    ) -> Optional[str]:
        self.calls.append(list(messages))
        return self.response
