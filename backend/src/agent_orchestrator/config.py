"""Agent configuration: paths and defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from main_config import (
    AGENT_DB_PATH as _AGENT_DB_PATH,
    AGENT_DIR as _AGENT_DIR,
    AGENT_SYSTEM_PROMPT_PATH as _AGENT_SYSTEM_PROMPT_PATH,
    DB_DIR as _DB_DIR,
)

# Path objects for use in this package (main_config uses os.path strings)
DB_DIR = Path(_DB_DIR)
AGENT_DIR = Path(_AGENT_DIR)
AGENT_DB_PATH = Path(_AGENT_DB_PATH)
AGENT_SYSTEM_PROMPT_PATH = Path(_AGENT_SYSTEM_PROMPT_PATH)

DEFAULT_MODEL = "deepseek-chat"
MAX_TOOL_ITERATIONS = 5
AGENT_TEMPERATURE = 0.7
AGENT_MAX_TOKENS = 1000

# Context compression: messages always sent verbatim / folded per step
RECENT_WINDOW = 6
COMPRESS_BATCH = 6
SUMMARY_TEMPERATURE = 0.3
SUMMARY_MAX_TOKENS = 400
SUMMARY_WORD_LIMIT = 150

# deepseek-chat pricing, USD per token
PRICE_INPUT_PER_TOKEN = 0.14 / 1_000_000
PRICE_OUTPUT_PER_TOKEN = 0.28 / 1_000_000

# deepseek-chat context window (128K)
CONTEXT_LIMIT = 131_072
NEAR_LIMIT_THRESHOLD = 0.8


@dataclass
class AgentOptions:
    """Per-agent tunables; defaults mirror the module constants."""

    model: str = DEFAULT_MODEL
    max_tool_iterations: int = MAX_TOOL_ITERATIONS
    temperature: float = AGENT_TEMPERATURE
    max_tokens: int = AGENT_MAX_TOKENS
    recent_window: int = RECENT_WINDOW
    compress_batch: int = COMPRESS_BATCH
    price_input_per_token: float = PRICE_INPUT_PER_TOKEN
    price_output_per_token: float = PRICE_OUTPUT_PER_TOKEN
    system_prompt: str | None = None


def ensure_dirs() -> None:
    """Create db and agent directories if they do not exist."""
    DB_DIR.mkdir(parents=True, exist_ok=True)
    AGENT_DIR.mkdir(parents=True, exist_ok=True)
