from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

DEEPSEEK = "deepseek"
GROQ = "groq"


class ProviderConfig(BaseModel):
    """Endpoint of one OpenAI-compatible chat-completions provider."""

    name: str
    base_url: str = Field(..., description="API root; /chat/completions is appended by the SDK.")
    api_key_env: str = Field(..., description="Environment variable holding the API key.")
    default_model: str

    def api_key(self) -> str:
        return os.getenv(self.api_key_env, "")


class LLMCoreConfig(BaseModel):
    """Configuration for shared LLM usage."""

    providers: dict[str, ProviderConfig] = Field(
        default_factory=lambda: {
            DEEPSEEK: ProviderConfig(
                name=DEEPSEEK,
                base_url="https://api.deepseek.com",
                api_key_env="DEEPSEEK_API_KEY",
                default_model="deepseek-chat",
            ),
            GROQ: ProviderConfig(
                name=GROQ,
                base_url="https://api.groq.com/openai/v1",
                api_key_env="GROQ_API_KEY",
                default_model="llama-3.3-70b-versatile",
            ),
        }
    )
    default_provider: str = DEEPSEEK
    request_timeout: float = Field(
        default=60.0,
        description="Seconds before a completion call is abandoned.",
    )

    def provider(self, name: str | None = None) -> ProviderConfig:
        key = (name or self.default_provider).strip().lower()
        try:
            return self.providers[key]
        except KeyError:
            raise ValueError(f"Unknown LLM provider: {name}") from None


DEFAULT_LLM_CORE_CONFIG = LLMCoreConfig()
