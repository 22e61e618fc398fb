"""Replay raw agent history as display turns (user text, answer + tool steps)."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from src.llm_core import Message

from .models import AgentStep


class TranscriptEntry(BaseModel):
    role: Literal["user", "assistant"]
    text: str
    steps: list[AgentStep] = Field(default_factory=list)


def replay_history(messages: list[Message]) -> list[TranscriptEntry]:
    """
    Group raw history into display entries.

    - user                  -> user entry
    - assistant + tool_calls -> remembers id -> (name, arguments)
    - tool                  -> step built from the remembered call
    - assistant (final)     -> assistant entry carrying the collected steps
    - system                -> skipped
    """
    entries: list[TranscriptEntry] = []
    pending_steps: list[AgentStep] = []
    pending_calls: dict[str, tuple[str, str]] = {}

    for m in messages:
        if m.role == "user":
            pending_steps = []
            pending_calls = {}
            entries.append(TranscriptEntry(role="user", text=m.content or ""))
        elif m.role == "assistant":
            if m.tool_calls:
                for call in m.tool_calls:
                    pending_calls[call.id] = (call.function.name, call.function.arguments)
            else:
                entries.append(
                    TranscriptEntry(role="assistant", text=m.content or "", steps=pending_steps)
                )
                pending_steps = []
                pending_calls = {}
        elif m.role == "tool":
            name, arguments = pending_calls.get(m.tool_call_id or "", ("unknown_tool", "{}"))
            pending_steps.append(
                AgentStep(tool_name=name, arguments=arguments, result=m.content or "")
            )
    return entries
