"""Data models for agent turns, tools, compression and session accounting."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field, computed_field

from .config import CONTEXT_LIMIT, NEAR_LIMIT_THRESHOLD


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@dataclass
class ToolResult:
    """Result of a single tool execution."""

    success: bool
    content: str | None = None
    error: str | None = None

    def to_text(self) -> str:
        """Plain text reported back to the model."""
        if self.success:
            return self.content or ""
        return f"Error: {self.error}"


# ---------------------------------------------------------------------------
# Turn result
# ---------------------------------------------------------------------------


class AgentStep(BaseModel):
    """One tool invocation: name, raw arguments and result text."""

    tool_name: str
    arguments: str
    result: str


class TokenInfo(BaseModel):
    """Token usage and cost of one turn (all completion calls summed)."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    cost_usd: float = 0.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class AgentResult(BaseModel):
    """Final answer of a turn plus the tool steps taken to reach it."""

    answer: str
    steps: list[AgentStep] = Field(default_factory=list)
    is_error: bool = False
    token_info: TokenInfo = Field(default_factory=TokenInfo)


def compute_cost(
    prompt_tokens: int,
    completion_tokens: int,
    price_input_per_token: float,
    price_output_per_token: float,
) -> float:
    """USD cost of a turn from its token counts."""
    return prompt_tokens * price_input_per_token + completion_tokens * price_output_per_token


# ---------------------------------------------------------------------------
# Context compression
# ---------------------------------------------------------------------------


class CompressionContext(BaseModel):
    """Running summary and the number of leading history messages it covers."""

    summary: str = ""
    covered_count: int = Field(default=0, ge=0)


# ---------------------------------------------------------------------------
# Session accounting
# ---------------------------------------------------------------------------


class SessionStats(BaseModel):
    """
    Process-lifetime accumulators for one agent.

    last_prompt_tokens is the best proxy for context-window fill: every
    request re-sends the full effective prompt.
    """

    last_prompt_tokens: int = 0
    total_cost_usd: float = 0.0
    total_turns: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def context_used_ratio(self) -> float:
        return min(self.last_prompt_tokens / CONTEXT_LIMIT, 1.0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_near_limit(self) -> bool:
        return self.context_used_ratio > NEAR_LIMIT_THRESHOLD

    def record_turn(self, token_info: TokenInfo) -> None:
        self.last_prompt_tokens = token_info.prompt_tokens
        self.total_cost_usd += token_info.cost_usd
        self.total_turns += 1


class ContextStats(BaseModel):
    """How much of the history is folded into the summary vs sent verbatim."""

    compressed_count: int = 0
    recent_count: int = 0
    is_summary_active: bool = False
    summary_length: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_messages(self) -> int:
        return self.compressed_count + self.recent_count

    @computed_field  # type: ignore[prop-decorator]
    @property
    def compression_ratio(self) -> float:
        if self.total_messages == 0:
            return 0.0
        return self.compressed_count / self.total_messages

    @classmethod
    def from_context(cls, history_len: int, ctx: CompressionContext) -> ContextStats:
        return cls(
            compressed_count=ctx.covered_count,
            recent_count=max(history_len - ctx.covered_count, 0),
            is_summary_active=bool(ctx.summary),
            summary_length=len(ctx.summary),
        )
