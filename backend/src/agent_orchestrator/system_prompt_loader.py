"""Utilities for loading the agent system prompt from disk."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import AGENT_SYSTEM_PROMPT_PATH

DEFAULT_AGENT_SYSTEM_PROMPT = (
    "You are a helpful assistant with access to tools.\n"
    "Use the tools whenever a precise answer depends on them.\n"
    "Answer briefly and to the point."
)

_cached_prompt: Optional[str] = None


def _read_file(path: Path) -> str:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        return ""
    return text.strip()


def get_agent_system_prompt() -> str:
    """Return the agent system prompt text, cached after first read.

    Falls back to DEFAULT_AGENT_SYSTEM_PROMPT when the file is missing or empty.
    """
    global _cached_prompt
    if _cached_prompt is None:
        _cached_prompt = _read_file(AGENT_SYSTEM_PROMPT_PATH)
    return _cached_prompt or DEFAULT_AGENT_SYSTEM_PROMPT
