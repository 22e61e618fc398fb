"""Same question, several sampling temperatures, answered concurrently."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from src.llm_core import ChatCompletionClient

from .chat import ChatMessage, ChatSettings, send_message
from .models import TemperatureResponse

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURES: tuple[float, ...] = (0.0, 0.7, 1.2)


async def _answer_at(
    client: ChatCompletionClient,
    question: str,
    temperature: float,
    system_prompt: str,
    max_tokens: int,
    model: str,
) -> TemperatureResponse:
    settings = ChatSettings(system_prompt=system_prompt, temperature=temperature, max_tokens=max_tokens)
    try:
        reply = await send_message(
            client,
            [ChatMessage(role="user", content=question)],
            settings,
            model=model,
        )
    except Exception as e:
        logger.warning("Temperature %.1f call failed: %s", temperature, e)
        return TemperatureResponse(temperature=temperature, content=str(e) or "Error", is_error=True)
    return TemperatureResponse(temperature=temperature, content=reply.content)


async def compare_temperatures(
    client: ChatCompletionClient,
    question: str,
    temperatures: Sequence[float] = DEFAULT_TEMPERATURES,
    system_prompt: str = "",
    max_tokens: int = 300,
    model: str = "deepseek-chat",
) -> list[TemperatureResponse]:
    """One request per temperature; responses are returned in temperature order."""
    return list(
        await asyncio.gather(
            *(
                _answer_at(client, question, t, system_prompt, max_tokens, model)
                for t in temperatures
            )
        )
    )
