"""Chat-completion clients: pluggable backends for the agent and the playground."""

from .base import ChatCompletionClient
from .openai_provider import OpenAICompatibleClient

__all__ = [
    "ChatCompletionClient",
    "OpenAICompatibleClient",
]
