"""OpenAI-compatible chat-completions client (DeepSeek, Groq, OpenAI)."""

from __future__ import annotations

import logging
from typing import Any

import openai
from openai import AsyncOpenAI

from ..errors import ApiError, error_message_from_body
from ..models import ChatRequest, ChatResponse
from .base import ChatCompletionClient

logger = logging.getLogger(__name__)


class OpenAICompatibleClient(ChatCompletionClient):
    """Chat-completions client built on the openai SDK with a custom base_url."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        default_model: str,
        timeout: float = 60.0,
    ) -> None:
        self.base_url = base_url
        self.api_key = api_key
        self.default_model = default_model
        self.timeout = timeout
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if not self._client:
            # Retries stay with the caller; a failed call surfaces immediately.
            self._client = AsyncOpenAI(
                api_key=self.api_key or "missing-api-key",
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    async def chat_completions(self, request: ChatRequest) -> ChatResponse:
        """Non-streaming chat-completions call."""
        client = self._get_client()
        params: dict[str, Any] = request.to_payload()
        if not params.get("model"):
            params["model"] = self.default_model

        try:
            resp = await client.chat.completions.create(**params)
        except openai.APITimeoutError as e:
            raise ApiError(f"Request timed out after {self.timeout:.0f}s", retryable=True) from e
        except openai.APIConnectionError as e:
            raise ApiError(f"Connection error: {e}", retryable=True) from e
        except openai.APIStatusError as e:
            message = error_message_from_body(e.body, e.status_code)
            logger.debug("Completion call to %s failed: %s %s", self.base_url, e.status_code, message)
            raise ApiError(message, e.status_code, retryable=e.status_code >= 500) from e

        return ChatResponse.model_validate(resp.model_dump(exclude_none=True))
