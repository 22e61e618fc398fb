from __future__ import annotations

from typing import Any

from .config import DEFAULT_LLM_CORE_CONFIG, LLMCoreConfig
from .models import ChatRequest, Message
from .providers import ChatCompletionClient, OpenAICompatibleClient

_client_cache: dict[str, ChatCompletionClient] = {}


def get_client(provider: str | None = None, config: LLMCoreConfig | None = None) -> ChatCompletionClient:
    """Return the cached client for a provider name ("deepseek", "groq")."""
    cfg = config or DEFAULT_LLM_CORE_CONFIG
    provider_cfg = cfg.provider(provider)
    if provider_cfg.name not in _client_cache:
        _client_cache[provider_cfg.name] = OpenAICompatibleClient(
            base_url=provider_cfg.base_url,
            api_key=provider_cfg.api_key(),
            default_model=provider_cfg.default_model,
            timeout=cfg.request_timeout,
        )
    return _client_cache[provider_cfg.name]


def set_client(provider: str, client: ChatCompletionClient) -> None:
    """Replace the client used for a provider name."""
    _client_cache[provider.strip().lower()] = client


async def chat(
    messages: list[Message],
    *,
    model: str | None = None,
    provider: str | None = None,
    client: ChatCompletionClient | None = None,
    config: LLMCoreConfig | None = None,
    **kwargs: Any,
) -> str:
    """Non-streaming chat helper; returns the text of the first choice."""
    cfg = config or DEFAULT_LLM_CORE_CONFIG
    c = client or get_client(provider, cfg)
    request = ChatRequest(
        model=model or cfg.provider(provider).default_model,
        messages=messages,
        **kwargs,
    )
    response = await c.chat_completions(request)
    return response.first_choice().message.content or ""
