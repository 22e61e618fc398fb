from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import EmptyResponseError

Role = Literal["system", "user", "assistant", "tool"]


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class ToolCallFunction(BaseModel):
    """Function name and JSON-encoded arguments of a tool call."""

    model_config = ConfigDict(extra="ignore")

    name: str
    arguments: str = ""

    @field_validator("arguments", mode="before")
    @classmethod
    def _encode_arguments(cls, value: Any) -> str:
        # Some OpenAI-compatible backends send arguments as an object.
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return json.dumps(value)


class ToolCall(BaseModel):
    """A tool invocation requested by the model."""

    model_config = ConfigDict(extra="ignore")

    id: str
    type: str = "function"
    function: ToolCallFunction


class Message(BaseModel):
    """A single message in a conversation."""

    model_config = ConfigDict(extra="ignore")

    role: Role
    content: str | None = None
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None

    def to_chat_dict(self) -> dict[str, Any]:
        """Format for OpenAI-compatible chat APIs."""
        out: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            out["tool_calls"] = [tc.model_dump() for tc in self.tool_calls]
        if self.tool_call_id is not None:
            out["tool_call_id"] = self.tool_call_id
        return out

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


# ---------------------------------------------------------------------------
# Request / response
# ---------------------------------------------------------------------------


class ChatRequest(BaseModel):
    """Body of a chat-completions request."""

    model: str
    messages: list[Message]
    temperature: float | None = None
    max_tokens: int | None = None
    top_p: float | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    stop: list[str] | None = None
    tools: list[dict[str, Any]] | None = None

    def to_payload(self) -> dict[str, Any]:
        """Request kwargs with unset optional fields left out."""
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_chat_dict() for m in self.messages],
        }
        for key in (
            "temperature",
            "max_tokens",
            "top_p",
            "frequency_penalty",
            "presence_penalty",
            "stop",
            "tools",
        ):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        return payload


class Usage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class Choice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: Message
    finish_reason: str | None = None


class ChatResponse(BaseModel):
    """Body of a chat-completions response."""

    model_config = ConfigDict(extra="ignore")

    choices: list[Choice] = Field(default_factory=list)
    usage: Usage | None = None

    def first_choice(self) -> Choice:
        """Return the first choice or raise EmptyResponseError."""
        if not self.choices:
            raise EmptyResponseError("Empty response: no choices returned")
        return self.choices[0]


__all__ = [
    "Role",
    "ToolCallFunction",
    "ToolCall",
    "Message",
    "ChatRequest",
    "Usage",
    "Choice",
    "ChatResponse",
]
