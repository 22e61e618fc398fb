"""Shared chat-completion models and clients used across the backend."""

from .config import DEEPSEEK, GROQ, DEFAULT_LLM_CORE_CONFIG, LLMCoreConfig, ProviderConfig
from .core import chat, get_client, set_client
from .errors import ApiError, EmptyResponseError
from .models import (
    ChatRequest,
    ChatResponse,
    Choice,
    Message,
    ToolCall,
    ToolCallFunction,
    Usage,
)
from .providers import ChatCompletionClient, OpenAICompatibleClient

__all__ = [
    "DEEPSEEK",
    "GROQ",
    "DEFAULT_LLM_CORE_CONFIG",
    "LLMCoreConfig",
    "ProviderConfig",
    "chat",
    "get_client",
    "set_client",
    "ApiError",
    "EmptyResponseError",
    "ChatRequest",
    "ChatResponse",
    "Choice",
    "Message",
    "ToolCall",
    "ToolCallFunction",
    "Usage",
    "ChatCompletionClient",
    "OpenAICompatibleClient",
]
