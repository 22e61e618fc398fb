"""Incremental context compression: fold old history into a running summary."""

from __future__ import annotations

import asyncio
import logging

from src.llm_core import ApiError, ChatCompletionClient, ChatRequest, Message

from .config import (
    COMPRESS_BATCH,
    DEFAULT_MODEL,
    RECENT_WINDOW,
    SUMMARY_MAX_TOKENS,
    SUMMARY_TEMPERATURE,
    SUMMARY_WORD_LIMIT,
)
from .history_store import AgentHistoryStore
from .models import CompressionContext

logger = logging.getLogger(__name__)

_ROLE_LABELS = {
    "system": "System",
    "user": "User",
    "assistant": "Assistant",
    "tool": "Tool result",
}

SUMMARIZER_SYSTEM_PROMPT = (
    "You are a conversation summarizer. Compress the conversation into key points "
    "while preserving facts, decisions, numbers and open questions. Output plain text only."
)


def format_transcript(messages: list[Message]) -> str:
    """Role-labelled lines; messages without visible text are skipped."""
    parts = []
    for m in messages:
        content = (m.content or "").strip()
        if content:
            parts.append(f"{_ROLE_LABELS.get(m.role, m.role)}: {content}")
    return "\n".join(parts)


def build_summary_messages(previous_summary: str, transcript: str) -> list[Message]:
    """Prompt for the summarizer: previous summary (if any) plus the new batch."""
    sections = []
    if previous_summary.strip():
        sections.append(f"Summary of the conversation so far:\n{previous_summary.strip()}")
    sections.append(f"New messages:\n{transcript}")
    sections.append(
        "Write an updated summary of the whole conversation that merges the summary above "
        f"with the new messages. Keep it under {SUMMARY_WORD_LIMIT} words."
    )
    return [
        Message(role="system", content=SUMMARIZER_SYSTEM_PROMPT),
        Message(role="user", content="\n\n".join(sections)),
    ]


class ContextCompressor:
    """
    Keeps the verbatim part of history bounded.

    Messages [0, covered_count) live only in the summary; the rest is the
    recent window sent as-is. Whenever the window grows past
    recent_window + batch_size, the oldest batch_size messages of the window
    are folded into the summary. A batch never ends between a tool call and
    its results: trailing tool messages are folded with it.
    """

    def __init__(
        self,
        client: ChatCompletionClient,
        store: AgentHistoryStore,
        *,
        model: str = DEFAULT_MODEL,
        recent_window: int = RECENT_WINDOW,
        batch_size: int = COMPRESS_BATCH,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self._client = client
        self._store = store
        self.model = model
        self.recent_window = recent_window
        self.batch_size = batch_size

    def needs_compression(self, history_len: int, context: CompressionContext) -> bool:
        return history_len - context.covered_count > self.recent_window + self.batch_size

    def batch_end(self, history: list[Message], start: int) -> int:
        """End index of the batch starting at start, extended over trailing tool results."""
        end = min(start + self.batch_size, len(history))
        while end < len(history) and history[end].role == "tool":
            end += 1
        return end

    async def maintain(self, history: list[Message], context: CompressionContext) -> CompressionContext:
        """
        Fold as many batches as needed and return the resulting context.

        Each successful fold is persisted before the next one starts. A failed
        summarizer call leaves the context untouched and stops folding; the same
        batch is retried on the next turn.
        """
        while self.needs_compression(len(history), context):
            start = context.covered_count
            batch = history[start : self.batch_end(history, start)]
            try:
                summary = await self.summarize_batch(context.summary, batch)
            except Exception as e:
                logger.warning(
                    "Context compression failed at covered=%d, keeping previous summary: %s",
                    start,
                    e,
                )
                break
            new_context = CompressionContext(summary=summary, covered_count=start + len(batch))
            await asyncio.to_thread(self._store.save_context, new_context)
            logger.info(
                "Compressed context: covered %d -> %d of %d messages",
                start,
                new_context.covered_count,
                len(history),
            )
            context = new_context
        return context

    async def summarize_batch(self, previous_summary: str, batch: list[Message]) -> str:
        """Return the updated summary text. Raises on failure or an empty answer."""
        transcript = format_transcript(batch)
        if not transcript:
            return previous_summary
        request = ChatRequest(
            model=self.model,
            messages=build_summary_messages(previous_summary, transcript),
            temperature=SUMMARY_TEMPERATURE,
            max_tokens=SUMMARY_MAX_TOKENS,
        )
        response = await self._client.chat_completions(request)
        summary = (response.first_choice().message.content or "").strip()
        if not summary:
            raise ApiError("Summarizer returned an empty summary")
        return summary
