"""Agent: tool-calling conversation loop with persisted, compressed history."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from src.llm_core import DEEPSEEK, ChatCompletionClient, ChatRequest, Message, ToolCall, get_client

from .config import AGENT_DB_PATH, AgentOptions, ensure_dirs
from .context_summary import ContextCompressor
from .history_store import AgentHistoryStore
from .models import (
    AgentResult,
    AgentStep,
    CompressionContext,
    ContextStats,
    SessionStats,
    TokenInfo,
    compute_cost,
)
from .system_prompt_loader import get_agent_system_prompt
from .tools import BaseTool, ToolRegistry, get_default_tools

logger = logging.getLogger(__name__)

ITERATION_LIMIT_MESSAGE = "The agent exceeded its iteration limit without reaching a final answer."
CONTEXT_OVERFLOW_MESSAGE = (
    "The context is full: this conversation exceeded the model's context window. "
    "Clear the history and start a new conversation."
)

# Provider error texts seen for context-window overflow; heuristic only.
_CONTEXT_OVERFLOW_MARKERS = ("context_length", "maximum context", "context window")


def is_context_overflow(error_message: str) -> bool:
    lowered = error_message.lower()
    return any(marker in lowered for marker in _CONTEXT_OVERFLOW_MARKERS)


class Agent:
    """
    Long-lived agent for one conversation.

    History and the compression context are loaded lazily on the first call,
    appended to (and persisted) message by message, and wiped only by reset().
    Turns on one instance are serialized.
    """

    def __init__(
        self,
        client: ChatCompletionClient,
        tools: ToolRegistry | Iterable[BaseTool],
        store: AgentHistoryStore,
        options: AgentOptions | None = None,
    ) -> None:
        self._opts = options or AgentOptions()
        self._client = client
        self._tools = tools if isinstance(tools, ToolRegistry) else ToolRegistry(tools)
        self._store = store
        self._compressor = ContextCompressor(
            client,
            store,
            model=self._opts.model,
            recent_window=self._opts.recent_window,
            batch_size=self._opts.compress_batch,
        )
        self._system_prompt = self._opts.system_prompt or get_agent_system_prompt()

        self._history: list[Message] = []
        self._context = CompressionContext()
        self._loaded = False
        self._stats = SessionStats()
        self._lock = asyncio.Lock()
        # Held while reading the store; reset() takes it too.
        self._load_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        async with self._load_lock:
            if self._loaded:
                return
            await self._load()

    async def _load(self) -> None:
        history = await asyncio.to_thread(self._store.load_messages)
        context = await asyncio.to_thread(self._store.load_context)
        if context.covered_count > len(history):
            logger.warning(
                "Stored covered_count %d exceeds history length %d; clamping",
                context.covered_count,
                len(history),
            )
            context = CompressionContext(summary=context.summary, covered_count=len(history))
        self._history = history
        self._context = context
        self._loaded = True
        logger.info(
            "Loaded %d messages from history (covered by summary: %d)",
            len(history),
            context.covered_count,
        )

    async def get_history(self) -> list[Message]:
        await self._ensure_loaded()
        return list(self._history)

    async def get_context(self) -> CompressionContext:
        await self._ensure_loaded()
        return self._context.model_copy()

    def session_stats(self) -> SessionStats:
        return self._stats.model_copy()

    async def context_stats(self) -> ContextStats:
        await self._ensure_loaded()
        return ContextStats.from_context(len(self._history), self._context)

    async def reset(self) -> None:
        """Clear persisted and in-memory history, the summary and session stats."""
        async with self._lock, self._load_lock:
            await asyncio.to_thread(self._store.clear)
            self._history = []
            self._context = CompressionContext()
            self._stats = SessionStats()
            self._loaded = True
            logger.info("History, summary and session stats cleared")

    async def _append(self, message: Message) -> None:
        await asyncio.to_thread(self._store.append_message, message)
        self._history.append(message)

    # ------------------------------------------------------------------
    # Turn
    # ------------------------------------------------------------------

    def build_prompt(self, user_message: Message) -> list[Message]:
        """System prompt, summary (if any), recent window, then the new user message."""
        messages = [Message(role="system", content=self._system_prompt)]
        if self._context.summary:
            messages.append(
                Message(
                    role="system",
                    content=f"Summary of the earlier conversation:\n{self._context.summary}",
                )
            )
        messages.extend(self._history[self._context.covered_count :])
        messages.append(user_message)
        return messages

    async def chat(self, user_message: str) -> AgentResult:
        """Run one user turn to a final answer, the iteration limit, or an error result."""
        async with self._lock:
            steps: list[AgentStep] = []
            try:
                await self._ensure_loaded()
                self._context = await self._compressor.maintain(self._history, self._context)
                user_msg = Message(role="user", content=user_message)
                messages = self.build_prompt(user_msg)
                await self._append(user_msg)
                return await self._tool_loop(messages, steps)
            except Exception as e:
                error_text = str(e) or type(e).__name__
                logger.error("Agent turn failed: %s", error_text)
                answer = CONTEXT_OVERFLOW_MESSAGE if is_context_overflow(error_text) else error_text
                return AgentResult(answer=answer, steps=steps, is_error=True)

    async def _tool_loop(self, messages: list[Message], steps: list[AgentStep]) -> AgentResult:
        tool_schemas = self._tools.schemas()
        prompt_tokens = 0
        completion_tokens = 0

        for iteration in range(1, self._opts.max_tool_iterations + 1):
            request = ChatRequest(
                model=self._opts.model,
                messages=list(messages),
                temperature=self._opts.temperature,
                max_tokens=self._opts.max_tokens,
                tools=tool_schemas,
            )
            response = await self._client.chat_completions(request)
            if response.usage is not None:
                prompt_tokens += response.usage.prompt_tokens
                completion_tokens += response.usage.completion_tokens
                logger.debug(
                    "Completion call %d tokens: prompt=%d, completion=%d",
                    iteration,
                    response.usage.prompt_tokens,
                    response.usage.completion_tokens,
                )

            choice = response.first_choice()
            assistant = choice.message

            if choice.finish_reason == "tool_calls" and assistant.tool_calls:
                messages.append(assistant)
                await self._append(assistant)
                for call in assistant.tool_calls:
                    result = await self._dispatch(call)
                    steps.append(
                        AgentStep(
                            tool_name=call.function.name,
                            arguments=call.function.arguments,
                            result=result,
                        )
                    )
                    tool_msg = Message(role="tool", content=result, tool_call_id=call.id)
                    messages.append(tool_msg)
                    await self._append(tool_msg)
                continue

            if assistant.tool_calls:
                # Final answer: unanswered tool calls must not be persisted.
                assistant = assistant.model_copy(update={"tool_calls": None})
            messages.append(assistant)
            await self._append(assistant)

            cost = compute_cost(
                prompt_tokens,
                completion_tokens,
                self._opts.price_input_per_token,
                self._opts.price_output_per_token,
            )
            token_info = TokenInfo(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                cost_usd=cost,
            )
            self._stats.record_turn(token_info)
            logger.info(
                "Turn done: prompt=%d, completion=%d, cost=$%.6f, steps=%d",
                prompt_tokens,
                completion_tokens,
                cost,
                len(steps),
            )
            return AgentResult(answer=assistant.content or "", steps=steps, token_info=token_info)

        logger.warning(
            "Iteration limit (%d) reached with %d tool steps",
            self._opts.max_tool_iterations,
            len(steps),
        )
        return AgentResult(answer=ITERATION_LIMIT_MESSAGE, steps=steps)

    async def _dispatch(self, call: ToolCall) -> str:
        name = call.function.name
        tool = self._tools.get(name)
        if tool is None:
            logger.warning("Model requested unknown tool %s", name)
            return f"Error: tool '{name}' not found"
        return await tool.execute(call.function.arguments)


# ---------------------------------------------------------------------------
# Default instance
# ---------------------------------------------------------------------------

_default_agent: Agent | None = None


def get_default_agent() -> Agent:
    """Return the process-wide agent (DeepSeek client, built-in tools, on-disk store)."""
    global _default_agent
    if _default_agent is None:
        ensure_dirs()
        _default_agent = Agent(
            client=get_client(DEEPSEEK),
            tools=get_default_tools(),
            store=AgentHistoryStore(AGENT_DB_PATH),
        )
    return _default_agent


def set_default_agent(agent: Agent | None) -> None:
    global _default_agent
    _default_agent = agent
