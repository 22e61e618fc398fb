"""Plain chat with user-tunable sampling settings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from src.llm_core import ChatCompletionClient, ChatRequest, Message


class ChatSettings(BaseModel):
    system_prompt: str = ""
    temperature: float = 1.0
    max_tokens: int = 4096
    top_p: float = 1.0
    frequency_penalty: float = 0.0
    presence_penalty: float = 0.0
    stop_sequences: list[str] = Field(default_factory=list)


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "error"]
    content: str


def build_chat_request(history: list[ChatMessage], settings: ChatSettings, model: str) -> ChatRequest:
    """System prompt first (if set), then the history without error bubbles."""
    messages: list[Message] = []
    if settings.system_prompt.strip():
        messages.append(Message(role="system", content=settings.system_prompt))
    for msg in history:
        if msg.role == "error":
            continue
        messages.append(Message(role=msg.role, content=msg.content))
    return ChatRequest(
        model=model,
        messages=messages,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        top_p=settings.top_p,
        frequency_penalty=settings.frequency_penalty,
        presence_penalty=settings.presence_penalty,
        stop=settings.stop_sequences or None,
    )


async def send_message(
    client: ChatCompletionClient,
    history: list[ChatMessage],
    settings: ChatSettings,
    model: str = "deepseek-chat",
) -> ChatMessage:
    """Send the conversation and return the assistant reply. Raises ApiError on failure."""
    response = await client.chat_completions(build_chat_request(history, settings, model))
    reply = response.first_choice().message
    return ChatMessage(role="assistant", content=reply.content or "")
