"""Unit tests for incremental context compression."""
from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from scripted_client import ScriptedClient, text_response
from src.agent_orchestrator import AgentHistoryStore, CompressionContext, ContextCompressor
from src.agent_orchestrator.context_summary import build_summary_messages, format_transcript
from src.llm_core import ApiError, Message, ToolCall, ToolCallFunction


def _history(n: int) -> list[Message]:
    return [
        Message(role="user" if i % 2 == 0 else "assistant", content=f"message {i}")
        for i in range(n)
    ]


class TestTranscript(unittest.TestCase):
    def test_labels_and_skips_empty(self) -> None:
        messages = [
            Message(role="user", content="What is 6*7?"),
            Message(
                role="assistant",
                content=None,
                tool_calls=[ToolCall(id="c1", function=ToolCallFunction(name="calculate", arguments="{}"))],
            ),
            Message(role="tool", content="Result: 42", tool_call_id="c1"),
            Message(role="assistant", content="  "),
            Message(role="assistant", content="It is 42."),
        ]

        self.assertEqual(
            format_transcript(messages),
            "User: What is 6*7?\nTool result: Result: 42\nAssistant: It is 42.",
        )

    def test_summary_prompt_includes_previous_summary(self) -> None:
        messages = build_summary_messages("User likes jazz.", "User: hi")

        self.assertEqual(messages[0].role, "system")
        self.assertIn("User likes jazz.", messages[1].content)
        self.assertIn("User: hi", messages[1].content)
        self.assertIn("150 words", messages[1].content)

    def test_summary_prompt_without_previous_summary(self) -> None:
        content = build_summary_messages("", "User: hi")[1].content
        self.assertNotIn("so far", content)


class TestContextCompressor(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = AgentHistoryStore(Path(self._tmp.name) / "agent.db")

    def tearDown(self) -> None:
        self.store.close()
        self._tmp.cleanup()

    def make_compressor(self, client) -> ContextCompressor:
        return ContextCompressor(client, self.store, model="deepseek-chat", recent_window=6, batch_size=6)

    async def test_no_compression_within_window(self) -> None:
        client = ScriptedClient([])
        compressor = self.make_compressor(client)

        ctx = await compressor.maintain(_history(12), CompressionContext())

        self.assertEqual(ctx, CompressionContext())
        self.assertEqual(client.requests, [])

    async def test_one_batch_folded(self) -> None:
        client = ScriptedClient([text_response("  summary one  ")])
        compressor = self.make_compressor(client)

        ctx = await compressor.maintain(_history(13), CompressionContext())

        self.assertEqual(ctx, CompressionContext(summary="summary one", covered_count=6))
        self.assertEqual(self.store.load_context(), ctx)
        request = client.requests[0]
        self.assertEqual(request.temperature, 0.3)
        self.assertEqual(request.max_tokens, 400)
        self.assertIsNone(request.tools)
        self.assertIn("message 0", request.messages[1].content)
        self.assertIn("message 5", request.messages[1].content)
        self.assertNotIn("message 6", request.messages[1].content)

    async def test_two_batches_folded_in_one_call(self) -> None:
        client = ScriptedClient([text_response("summary one"), text_response("summary two")])
        compressor = self.make_compressor(client)

        ctx = await compressor.maintain(_history(19), CompressionContext())

        self.assertEqual(ctx, CompressionContext(summary="summary two", covered_count=12))
        self.assertEqual(len(client.requests), 2)
        self.assertIn("summary one", client.requests[1].messages[1].content)
        self.assertIn("message 6", client.requests[1].messages[1].content)

    async def test_recent_window_stays_bounded(self) -> None:
        for length in range(0, 40):
            client = ScriptedClient([text_response(f"s{i}") for i in range(10)])
            compressor = self.make_compressor(client)
            ctx = await compressor.maintain(_history(length), CompressionContext())
            with self.subTest(length=length):
                self.assertLessEqual(length - ctx.covered_count, 12)
                self.assertEqual(ctx.covered_count % 6, 0)

    async def test_failure_keeps_previous_context(self) -> None:
        previous = CompressionContext(summary="old", covered_count=6)
        self.store.save_context(previous)
        client = ScriptedClient([ApiError("service unavailable", 503)])
        compressor = self.make_compressor(client)

        with self.assertLogs("src.agent_orchestrator.context_summary", level="WARNING"):
            ctx = await compressor.maintain(_history(19), previous)

        self.assertEqual(ctx, previous)
        self.assertEqual(self.store.load_context(), previous)
        self.assertEqual(len(client.requests), 1)

    async def test_failure_on_second_batch_keeps_first(self) -> None:
        client = ScriptedClient([text_response("summary one"), ApiError("timeout", retryable=True)])
        compressor = self.make_compressor(client)

        ctx = await compressor.maintain(_history(19), CompressionContext())

        self.assertEqual(ctx, CompressionContext(summary="summary one", covered_count=6))
        self.assertEqual(self.store.load_context(), ctx)

    async def test_empty_summary_is_a_failure(self) -> None:
        client = ScriptedClient([text_response("   ")])
        compressor = self.make_compressor(client)

        ctx = await compressor.maintain(_history(13), CompressionContext())

        self.assertEqual(ctx, CompressionContext())

    async def test_batch_without_text_advances_coverage(self) -> None:
        history = [Message(role="assistant", content=None) for _ in range(6)] + _history(7)
        client = ScriptedClient([])
        compressor = self.make_compressor(client)

        ctx = await compressor.maintain(history, CompressionContext(summary="kept"))

        self.assertEqual(ctx, CompressionContext(summary="kept", covered_count=6))
        self.assertEqual(client.requests, [])

    async def test_batch_extends_over_tool_results(self) -> None:
        history = _history(5) + [
            Message(
                role="assistant",
                tool_calls=[ToolCall(id="c1", function=ToolCallFunction(name="calculate", arguments="{}"))],
            ),
            Message(role="tool", content="Result: 1234", tool_call_id="c1"),
        ] + _history(6)
        client = ScriptedClient([text_response("summary")])
        compressor = self.make_compressor(client)

        ctx = await compressor.maintain(history, CompressionContext())

        self.assertEqual(ctx.covered_count, 7)
        self.assertIn("Tool result: Result: 1234", client.requests[0].messages[1].content)
        self.assertNotEqual(history[ctx.covered_count].role, "tool")

    def test_batch_end(self) -> None:
        compressor = self.make_compressor(ScriptedClient([]))
        history = _history(6) + [
            Message(role="tool", content="a", tool_call_id="x"),
            Message(role="tool", content="b", tool_call_id="y"),
        ] + _history(3)

        self.assertEqual(compressor.batch_end(history, 0), 8)
        self.assertEqual(compressor.batch_end(_history(13), 6), 12)
        self.assertEqual(compressor.batch_end(_history(4), 0), 4)

    def test_invalid_batch_size(self) -> None:
        with self.assertRaises(ValueError):
            ContextCompressor(ScriptedClient([]), self.store, batch_size=0)


if __name__ == "__main__":
    unittest.main()
