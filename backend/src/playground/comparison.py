"""Side-by-side model comparison with a blind judge."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping

from src.llm_core import ChatCompletionClient, ChatRequest, EmptyResponseError, Message

from .models import (
    JUDGE_MODEL,
    MODEL_CONFIGS,
    ApiProvider,
    JudgeVerdict,
    ModelComparisonResponse,
    ModelConfig,
)

logger = logging.getLogger(__name__)

JUDGE_SYSTEM_PROMPT = "You are an objective expert in evaluating the quality of language model answers."

_JUDGE_CRITERIA = """Score each answer from 1 to 10 on four criteria:
- Accuracy (is it factually correct)
- Completeness (how fully the topic is covered)
- Clarity (how clear and well structured it is)
- Conciseness (appropriate length, no filler)

For every answer reply strictly in this format:

Answer N
  Accuracy: X/10
  Completeness: X/10
  Clarity: X/10
  Conciseness: X/10
  Total: X/40

Then finish with:
Winner: Answer X - one sentence why
My guess: for each answer, which model you think wrote it and why"""


def build_judge_prompt(question: str, answers: list[str]) -> str:
    """Anonymized prompt: answers are numbered, model names are hidden."""
    answers_text = "\n\n".join(f"Answer {i + 1}:\n{text}" for i, text in enumerate(answers))
    return (
        f'User question: "{question}"\n\n'
        f"{len(answers)} anonymous language models answered this question. "
        "You do not know which model wrote which answer.\n\n"
        f"{answers_text}\n\n"
        f"{_JUDGE_CRITERIA}"
    )


class ModelComparisonService:
    """Sends one question to several models concurrently and judges the answers."""

    def __init__(self, clients: Mapping[ApiProvider, ChatCompletionClient]) -> None:
        self._clients = dict(clients)

    def _client_for(self, config: ModelConfig) -> ChatCompletionClient:
        try:
            return self._clients[config.api_provider]
        except KeyError:
            raise ValueError(f"No client configured for provider {config.api_provider.value}") from None

    async def send_to_model(self, question: str, config: ModelConfig) -> ModelComparisonResponse:
        """One request to one model; raises on failure."""
        client = self._client_for(config)
        request = ChatRequest(
            model=config.model_name,
            messages=[Message(role="user", content=question)],
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

        start = time.monotonic()
        response = await client.chat_completions(request)
        elapsed_ms = int((time.monotonic() - start) * 1000)

        content = response.first_choice().message.content
        if content is None:
            raise EmptyResponseError(f"Empty response from {config.display_name}")

        prompt_tokens = response.usage.prompt_tokens if response.usage else 0
        completion_tokens = response.usage.completion_tokens if response.usage else 0
        cost_usd = (
            prompt_tokens * config.input_cost_per_million
            + completion_tokens * config.output_cost_per_million
        ) / 1_000_000
        return ModelComparisonResponse(
            model=config,
            content=content,
            elapsed_ms=elapsed_ms,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            cost_usd=cost_usd,
        )

    async def _send_or_error(self, question: str, config: ModelConfig) -> ModelComparisonResponse:
        try:
            return await self.send_to_model(question, config)
        except Exception as e:
            logger.warning("Comparison call to %s failed: %s", config.id, e)
            return ModelComparisonResponse(model=config, content=str(e) or "Error", is_error=True)

    async def compare(
        self,
        question: str,
        configs: list[ModelConfig] | None = None,
    ) -> list[ModelComparisonResponse]:
        """
        Ask every model concurrently. Results come back in config order no
        matter which call finishes first; a failed call only marks its own
        entry as an error.
        """
        configs = configs if configs is not None else MODEL_CONFIGS
        return list(await asyncio.gather(*(self._send_or_error(question, cfg) for cfg in configs)))

    async def judge(self, question: str, responses: list[ModelComparisonResponse]) -> JudgeVerdict:
        """Blind evaluation of the successful answers by the judge model."""
        answers = [r.content for r in responses if not r.is_error and r.content.strip()]
        if not answers:
            return JudgeVerdict(content="There are no answers to judge.", is_error=True)
        request = ChatRequest(
            model=JUDGE_MODEL.model_name,
            messages=[
                Message(role="system", content=JUDGE_SYSTEM_PROMPT),
                Message(role="user", content=build_judge_prompt(question, answers)),
            ],
            temperature=JUDGE_MODEL.temperature,
            max_tokens=JUDGE_MODEL.max_tokens,
        )
        try:
            response = await self._client_for(JUDGE_MODEL).chat_completions(request)
            content = response.first_choice().message.content
            if not content:
                raise EmptyResponseError("The judge gave no answer")
        except Exception as e:
            logger.warning("Judge call failed: %s", e)
            return JudgeVerdict(content=str(e) or "Judge error", is_error=True)
        return JudgeVerdict(content=content)
