"""Agent orchestrator: tool-calling loop with persisted history and context compression."""

from .config import AgentOptions
from .context_summary import ContextCompressor
from .history_store import AgentHistoryStore
from .loop import Agent, get_default_agent, is_context_overflow, set_default_agent
from .models import (
    AgentResult,
    AgentStep,
    CompressionContext,
    ContextStats,
    SessionStats,
    TokenInfo,
    ToolResult,
)
from .tools import BaseTool, CalculatorTool, DateTimeTool, ToolRegistry, get_default_tools
from .transcript import TranscriptEntry, replay_history

__all__ = [
    "Agent",
    "AgentOptions",
    "AgentHistoryStore",
    "ContextCompressor",
    "get_default_agent",
    "set_default_agent",
    "is_context_overflow",
    "AgentResult",
    "AgentStep",
    "CompressionContext",
    "ContextStats",
    "SessionStats",
    "TokenInfo",
    "ToolResult",
    "BaseTool",
    "CalculatorTool",
    "DateTimeTool",
    "ToolRegistry",
    "get_default_tools",
    "TranscriptEntry",
    "replay_history",
]
