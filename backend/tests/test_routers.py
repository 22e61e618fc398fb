"""HTTP tests for the agent and chat routers with injected fake clients."""
from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from main import app
from scripted_client import (
    DelayedClient,
    ScriptedClient,
    quiz_final_json,
    quiz_question_json,
    text_response,
    tool_call_response,
)
from src.agent_orchestrator import Agent, AgentHistoryStore, AgentOptions, get_default_tools, set_default_agent
from src.playground import MODEL_CONFIGS, ApiProvider, ModelComparisonService
from src.routers.chat import get_chat_client, get_comparison_service


class RouterTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.store = AgentHistoryStore(Path(self._tmp.name) / "agent.db")
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        set_default_agent(None)
        self.store.close()
        self._tmp.cleanup()

    def use_agent(self, llm) -> Agent:
        agent = Agent(
            client=llm,
            tools=get_default_tools(),
            store=self.store,
            options=AgentOptions(system_prompt="test system prompt"),
        )
        set_default_agent(agent)
        return agent


class TestAgentRoutes(RouterTestCase):
    def test_chat_history_stats_and_reset(self) -> None:
        self.use_agent(
            ScriptedClient(
                [
                    tool_call_response([("c1", "calculate", {"expression": "6 * 7"})], 100, 10),
                    text_response("It is 42.", prompt_tokens=120, completion_tokens=5),
                ]
            )
        )

        resp = self.client.post("/agent/chat", json={"message": "What is 6*7?"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["answer"], "It is 42.")
        self.assertFalse(body["is_error"])
        self.assertEqual(body["steps"][0]["result"], "Result: 42")
        self.assertEqual(body["token_info"]["total_tokens"], 235)

        history = self.client.get("/agent/history").json()
        self.assertEqual([e["role"] for e in history], ["user", "assistant"])
        self.assertEqual(history[1]["steps"][0]["tool_name"], "calculate")

        stats = self.client.get("/agent/stats").json()
        self.assertEqual(stats["session"]["total_turns"], 1)
        self.assertEqual(stats["session"]["last_prompt_tokens"], 220)
        self.assertEqual(stats["context"]["recent_count"], 4)

        cleared = self.client.delete("/agent/history").json()
        self.assertEqual(cleared["session"]["total_turns"], 0)
        self.assertEqual(cleared["context"]["total_messages"], 0)
        self.assertEqual(self.client.get("/agent/history").json(), [])

    def test_blank_message_rejected(self) -> None:
        llm = ScriptedClient([])
        self.use_agent(llm)

        resp = self.client.post("/agent/chat", json={"message": "   "})

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(llm.requests, [])

    def test_error_result_is_returned_with_200(self) -> None:
        self.use_agent(ScriptedClient([RuntimeError("upstream down")]))

        body = self.client.post("/agent/chat", json={"message": "hi"}).json()

        self.assertTrue(body["is_error"])
        self.assertEqual(body["answer"], "upstream down")


class TestChatRoutes(RouterTestCase):
    def test_plain_chat(self) -> None:
        llm = ScriptedClient([text_response("hello")])
        app.dependency_overrides[get_chat_client] = lambda: llm

        resp = self.client.post(
            "/chat",
            json={"messages": [{"role": "user", "content": "hi"}], "settings": {"temperature": 0.5}},
        )

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"role": "assistant", "content": "hello"})
        self.assertEqual(llm.requests[0].temperature, 0.5)

    def test_plain_chat_requires_messages(self) -> None:
        app.dependency_overrides[get_chat_client] = lambda: ScriptedClient([])

        resp = self.client.post("/chat", json={"messages": []})

        self.assertEqual(resp.status_code, 400)

    def test_compare_without_judge(self) -> None:
        llm = DelayedClient({})
        service = ModelComparisonService({ApiProvider.DEEPSEEK: llm, ApiProvider.GROQ: llm})
        app.dependency_overrides[get_comparison_service] = lambda: service

        resp = self.client.post("/compare", json={"question": "Why is the sky blue?", "judge": False})

        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertIsNone(body["verdict"])
        self.assertEqual([r["model"]["id"] for r in body["responses"]], [c.id for c in MODEL_CONFIGS])

    def test_temperature(self) -> None:
        llm = ScriptedClient([text_response("a"), text_response("b")])
        app.dependency_overrides[get_chat_client] = lambda: llm

        resp = self.client.post("/temperature", json={"question": "Name a color", "temperatures": [0.0, 1.0]})

        self.assertEqual(resp.status_code, 200)
        self.assertEqual([r["temperature"] for r in resp.json()], [0.0, 1.0])


class TestQuizRoutes(RouterTestCase):
    def test_start_answer_and_finish(self) -> None:
        llm = ScriptedClient(
            [text_response(quiz_question_json(1, 1, correct="C")), text_response(quiz_final_json(1, 1))]
        )
        app.dependency_overrides[get_chat_client] = lambda: llm

        state = self.client.post("/quiz/start", json={"topic": "science", "question_count": 1}).json()
        self.assertTrue(state["active"])
        self.assertEqual(state["messages"][-1]["quiz_data"]["type"], "question")

        resp = self.client.post("/quiz/answer", json={"state": state, "option": "c"})

        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["score"], 1)
        self.assertFalse(body["active"])
        self.assertEqual(body["messages"][1]["selected_option"], "C")
        self.assertEqual(body["messages"][-1]["quiz_data"]["type"], "final")
        self.assertIn("science", llm.requests[0].messages[0].content)

    def test_invalid_option_rejected(self) -> None:
        llm = ScriptedClient([text_response(quiz_question_json(1, 5))])
        app.dependency_overrides[get_chat_client] = lambda: llm
        state = self.client.post("/quiz/start", json={}).json()

        resp = self.client.post("/quiz/answer", json={"state": state, "option": "E"})

        self.assertEqual(resp.status_code, 400)
        self.assertEqual(len(llm.requests), 1)


if __name__ == "__main__":
    unittest.main()
