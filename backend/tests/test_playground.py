"""Unit tests for plain chat, model comparison fan-out and temperature comparison."""
from __future__ import annotations

import unittest

from scripted_client import DelayedClient, ScriptedClient, text_response
from src.llm_core import ApiError
from src.playground import (
    JUDGE_MODEL,
    MODEL_CONFIGS,
    ApiProvider,
    ChatMessage,
    ChatSettings,
    ModelComparisonResponse,
    ModelComparisonService,
    build_chat_request,
    build_judge_prompt,
    compare_temperatures,
    send_message,
)


class TestChat(unittest.IsolatedAsyncioTestCase):
    def test_request_building(self) -> None:
        history = [
            ChatMessage(role="user", content="hi"),
            ChatMessage(role="error", content="network down"),
            ChatMessage(role="user", content="hi again"),
        ]
        settings = ChatSettings(system_prompt="Be brief.", temperature=0.2, stop_sequences=["END"])

        request = build_chat_request(history, settings, "deepseek-chat")

        self.assertEqual([m.role for m in request.messages], ["system", "user", "user"])
        self.assertEqual(request.temperature, 0.2)
        self.assertEqual(request.stop, ["END"])
        self.assertEqual(request.max_tokens, 4096)

    def test_no_stop_sequences(self) -> None:
        request = build_chat_request([ChatMessage(role="user", content="hi")], ChatSettings(), "deepseek-chat")
        self.assertIsNone(request.stop)
        self.assertEqual(request.messages[0].role, "user")

    async def test_send_message(self) -> None:
        client = ScriptedClient([text_response("hello there")])

        reply = await send_message(client, [ChatMessage(role="user", content="hi")], ChatSettings())

        self.assertEqual(reply, ChatMessage(role="assistant", content="hello there"))


class TestModelComparison(unittest.IsolatedAsyncioTestCase):
    def make_service(self, delays: dict[str, float], failing: set[str] | None = None):
        client = DelayedClient(delays, failing)
        service = ModelComparisonService({ApiProvider.DEEPSEEK: client, ApiProvider.GROQ: client})
        return service, client

    async def test_results_follow_config_order(self) -> None:
        # First config finishes last.
        delays = {cfg.model_name: 0.03 * (len(MODEL_CONFIGS) - i) for i, cfg in enumerate(MODEL_CONFIGS)}
        service, client = self.make_service(delays)

        responses = await service.compare("What is a monad?")

        self.assertEqual(client.completed, [cfg.model_name for cfg in reversed(MODEL_CONFIGS)])
        self.assertEqual([r.model.id for r in responses], [cfg.id for cfg in MODEL_CONFIGS])
        for response in responses:
            self.assertFalse(response.is_error)
            self.assertEqual(response.content, f"answer from {response.model.model_name}")
            self.assertEqual(response.prompt_tokens, 10)
            self.assertEqual(response.completion_tokens, 20)
            expected = (10 * response.model.input_cost_per_million + 20 * response.model.output_cost_per_million) / 1e6
            self.assertAlmostEqual(response.cost_usd, expected)

    async def test_one_failure_does_not_affect_others(self) -> None:
        failing = MODEL_CONFIGS[1].model_name
        service, _ = self.make_service({}, failing={failing})

        responses = await service.compare("hi")

        self.assertEqual([r.is_error for r in responses], [False, True, False])
        self.assertIn("unavailable", responses[1].content)

    async def test_judge_sees_anonymous_answers(self) -> None:
        judge_client = ScriptedClient([text_response("Winner: Answer 1")])
        service = ModelComparisonService({ApiProvider.DEEPSEEK: judge_client, ApiProvider.GROQ: judge_client})
        responses = [
            ModelComparisonResponse(model=MODEL_CONFIGS[0], content="first"),
            ModelComparisonResponse(model=MODEL_CONFIGS[1], content="boom", is_error=True),
            ModelComparisonResponse(model=MODEL_CONFIGS[2], content="third"),
        ]

        verdict = await service.judge("Q?", responses)

        self.assertFalse(verdict.is_error)
        self.assertEqual(verdict.content, "Winner: Answer 1")
        request = judge_client.requests[0]
        self.assertEqual(request.model, JUDGE_MODEL.model_name)
        self.assertIsNone(request.temperature)
        prompt = request.messages[1].content
        self.assertIn("Answer 1:\nfirst", prompt)
        self.assertIn("Answer 2:\nthird", prompt)
        self.assertNotIn("boom", prompt)
        for cfg in MODEL_CONFIGS:
            self.assertNotIn(cfg.display_name, prompt)

    async def test_judge_without_answers(self) -> None:
        client = ScriptedClient([])
        service = ModelComparisonService({ApiProvider.DEEPSEEK: client})
        responses = [ModelComparisonResponse(model=MODEL_CONFIGS[0], content="x", is_error=True)]

        verdict = await service.judge("Q?", responses)

        self.assertTrue(verdict.is_error)
        self.assertEqual(client.requests, [])

    async def test_judge_failure_is_reported(self) -> None:
        client = ScriptedClient([ApiError("judge unavailable", 503)])
        service = ModelComparisonService({ApiProvider.DEEPSEEK: client})
        responses = [ModelComparisonResponse(model=MODEL_CONFIGS[1], content="answer")]

        verdict = await service.judge("Q?", responses)

        self.assertTrue(verdict.is_error)
        self.assertEqual(verdict.content, "judge unavailable")

    def test_judge_prompt_numbering(self) -> None:
        prompt = build_judge_prompt("Why?", ["a", "b"])
        self.assertIn('User question: "Why?"', prompt)
        self.assertIn("2 anonymous language models", prompt)
        self.assertIn("Answer 2:\nb", prompt)


class TestTemperatureComparison(unittest.IsolatedAsyncioTestCase):
    async def test_order_and_settings(self) -> None:
        client = ScriptedClient([text_response("cold"), text_response("warm"), ApiError("too hot")])

        results = await compare_temperatures(client, "Tell a story", system_prompt="Be creative.")

        self.assertEqual([r.temperature for r in results], [0.0, 0.7, 1.2])
        self.assertEqual([r.content for r in results], ["cold", "warm", "too hot"])
        self.assertEqual([r.is_error for r in results], [False, False, True])
        self.assertEqual([req.temperature for req in client.requests], [0.0, 0.7, 1.2])
        for req in client.requests:
            self.assertEqual(req.max_tokens, 300)
            self.assertEqual(req.messages[0].content, "Be creative.")


if __name__ == "__main__":
    unittest.main()
