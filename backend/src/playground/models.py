"""Model metadata and per-branch results for the comparison modes."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ApiProvider(str, Enum):
    DEEPSEEK = "deepseek"
    GROQ = "groq"


class ModelConfig(BaseModel):
    """A model taking part in a comparison. Costs are USD per million tokens."""

    id: str
    model_name: str
    display_name: str
    tier_label: str = ""
    api_provider: ApiProvider
    input_cost_per_million: float
    output_cost_per_million: float
    # None: the parameter is not sent (deepseek-reasoner rejects it)
    temperature: float | None = 0.7
    max_tokens: int = 1000


GROQ_LLAMA_8B = ModelConfig(
    id="llama-3.1-8b-instant",
    model_name="llama-3.1-8b-instant",
    display_name="Llama 3.1 8B",
    tier_label="weak / instant",
    api_provider=ApiProvider.GROQ,
    input_cost_per_million=0.05,
    output_cost_per_million=0.08,
)
DEEPSEEK_CHAT = ModelConfig(
    id="deepseek-chat",
    model_name="deepseek-chat",
    display_name="DeepSeek Chat",
    tier_label="medium / slow",
    api_provider=ApiProvider.DEEPSEEK,
    input_cost_per_million=0.14,
    output_cost_per_million=0.28,
)
GROQ_LLAMA_70B = ModelConfig(
    id="llama-3.3-70b-versatile",
    model_name="llama-3.3-70b-versatile",
    display_name="Llama 3.3 70B",
    tier_label="strong / fast",
    api_provider=ApiProvider.GROQ,
    input_cost_per_million=0.59,
    output_cost_per_million=0.79,
)
# Judge only; never compared
JUDGE_MODEL = ModelConfig(
    id="deepseek-reasoner",
    model_name="deepseek-reasoner",
    display_name="DeepSeek Reasoner",
    tier_label="judge",
    api_provider=ApiProvider.DEEPSEEK,
    input_cost_per_million=0.55,
    output_cost_per_million=2.19,
    temperature=None,
    max_tokens=2000,
)

MODEL_CONFIGS: list[ModelConfig] = [GROQ_LLAMA_8B, DEEPSEEK_CHAT, GROQ_LLAMA_70B]


class ModelComparisonResponse(BaseModel):
    model: ModelConfig
    content: str = ""
    is_error: bool = False
    elapsed_ms: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    cost_usd: float = 0.0


class JudgeVerdict(BaseModel):
    content: str = ""
    is_error: bool = False


class TemperatureResponse(BaseModel):
    temperature: float
    content: str = ""
    is_error: bool = False
