"""Abstract chat-completion client interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import ChatRequest, ChatResponse


class ChatCompletionClient(ABC):
    """
    Abstract chat-completions backend. Implement this to plug in any
    OpenAI-compatible endpoint or a scripted fake in tests.

    The agent and the playground only depend on this interface.
    """

    @abstractmethod
    async def chat_completions(self, request: ChatRequest) -> ChatResponse:
        """
        Send one request and return the parsed response.

        Raises ApiError on non-success status or transport failure.
        """
        ...
