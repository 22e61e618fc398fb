"""SQLite layer for the agent's message log and compressed context."""

from __future__ import annotations

import json
import sqlite3
import threading
from pathlib import Path

from src.llm_core import Message, ToolCall

from .models import CompressionContext


class AgentHistoryStore:
    """SQLite-backed history for a single agent.

    Two tables:
    - `agent_messages`: append-only log, ordered by autoincrement id
    - `agent_context`: at most one row (id = 1) with the running summary
      and the number of leading messages it covers
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = str(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._create_schema()

    def _create_schema(self) -> None:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS agent_messages (
                    id              INTEGER PRIMARY KEY AUTOINCREMENT,
                    role            TEXT NOT NULL,
                    content         TEXT,
                    tool_calls_json TEXT,
                    tool_call_id    TEXT
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS agent_context (
                    id            INTEGER PRIMARY KEY CHECK (id = 1),
                    summary       TEXT NOT NULL DEFAULT '',
                    covered_count INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            self._conn.commit()

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def load_messages(self) -> list[Message]:
        """Return all messages in insertion order."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT role, content, tool_calls_json, tool_call_id FROM agent_messages ORDER BY id ASC"
            ).fetchall()
        return [self._row_to_message(r) for r in rows]

    def append_message(self, message: Message) -> None:
        tool_calls_json = (
            json.dumps([tc.model_dump() for tc in message.tool_calls])
            if message.tool_calls
            else None
        )
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO agent_messages (role, content, tool_calls_json, tool_call_id)
                VALUES (?, ?, ?, ?)
                """,
                (message.role, message.content, tool_calls_json, message.tool_call_id),
            )
            self._conn.commit()

    @staticmethod
    def _row_to_message(row: tuple) -> Message:
        role, content, tool_calls_json, tool_call_id = row
        tool_calls = None
        if tool_calls_json:
            tool_calls = [ToolCall.model_validate(tc) for tc in json.loads(tool_calls_json)]
        return Message(
            role=role,
            content=content,
            tool_calls=tool_calls,
            tool_call_id=tool_call_id,
        )

    # ------------------------------------------------------------------
    # Compressed context
    # ------------------------------------------------------------------

    def load_context(self) -> CompressionContext:
        """Return the stored summary, or an empty context if none was saved."""
        with self._lock:
            row = self._conn.execute(
                "SELECT summary, covered_count FROM agent_context WHERE id = 1"
            ).fetchone()
        if not row:
            return CompressionContext()
        return CompressionContext(summary=row[0] or "", covered_count=row[1] or 0)

    def save_context(self, context: CompressionContext) -> None:
        """Insert or replace the single context row."""
        with self._lock:
            self._conn.execute(
                """
                INSERT INTO agent_context (id, summary, covered_count)
                VALUES (1, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    summary = excluded.summary,
                    covered_count = excluded.covered_count
                """,
                (context.summary, context.covered_count),
            )
            self._conn.commit()

    def clear(self) -> None:
        """Delete both the message log and the context row."""
        with self._lock:
            self._conn.execute("DELETE FROM agent_messages")
            self._conn.execute("DELETE FROM agent_context")
            self._conn.commit()

    def close(self) -> None:
        with self._lock:
            self._conn.close()
