"""Tool protocol, registry and built-in tools."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any

from .models import ToolResult

logger = logging.getLogger(__name__)


class BaseTool(ABC):
    """Base class for agent tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """JSON Schema for parameters."""
        ...

    @abstractmethod
    async def run(self, params: dict[str, Any]) -> ToolResult:
        ...

    async def execute(self, arguments: str) -> str:
        """
        Run the tool on a raw JSON argument payload and return plain text.

        Never raises: bad payloads and tool failures come back as an
        "Error: ..." string so the model can see what went wrong.
        """
        try:
            params = json.loads(arguments) if arguments and arguments.strip() else {}
        except json.JSONDecodeError as e:
            return ToolResult(success=False, error=f"invalid arguments JSON: {e}").to_text()
        if not isinstance(params, dict):
            return ToolResult(success=False, error="arguments must be a JSON object").to_text()
        try:
            result = await self.run(params)
        except Exception as e:
            logger.exception("Tool %s failed", self.name)
            result = ToolResult(success=False, error=str(e))
        return result.to_text()

    def to_tool_schema(self) -> dict[str, Any]:
        """Standard function-calling schema (OpenAI-style)."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class ToolRegistry:
    """Fixed name -> tool table handed to an agent at construction."""

    def __init__(self, tools: Iterable[BaseTool] = ()) -> None:
        self._tools: dict[str, BaseTool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def get(self, name: str) -> BaseTool | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def schemas(self) -> list[dict[str, Any]] | None:
        """Schemas for the request's tools field; None when there are no tools."""
        if not self._tools:
            return None
        return [t.to_tool_schema() for t in self._tools.values()]


# ---------------------------------------------------------------------------
# Date and time
# ---------------------------------------------------------------------------


class DateTimeTool(BaseTool):
    """Returns the current local date and time."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or datetime.now

    @property
    def name(self) -> str:
        return "get_current_datetime"

    @property
    def description(self) -> str:
        return "Get the current date and time on the user's machine."

    @property
    def parameters(self) -> dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    async def run(self, params: dict[str, Any]) -> ToolResult:
        now = self._clock()
        return ToolResult(
            success=True,
            content=f"Current date and time: {now.day} {now:%B %Y, %H:%M:%S}",
        )


# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------


class _ExpressionParser:
    """Recursive-descent evaluator for + - * / with parentheses and unary minus."""

    def __init__(self, expression: str) -> None:
        self._input = "".join(expression.split())
        self._pos = 0

    def evaluate(self) -> float:
        if not self._input:
            raise ValueError("empty expression")
        result = self._parse_expr()
        if self._pos != len(self._input):
            raise ValueError(f"unexpected '{self._input[self._pos]}' at position {self._pos}")
        return result

    def _peek(self) -> str:
        return self._input[self._pos] if self._pos < len(self._input) else ""

    def _parse_expr(self) -> float:
        result = self._parse_term()
        while self._peek() in ("+", "-"):
            op = self._input[self._pos]
            self._pos += 1
            term = self._parse_term()
            result = result + term if op == "+" else result - term
        return result

    def _parse_term(self) -> float:
        result = self._parse_factor()
        while self._peek() in ("*", "/"):
            op = self._input[self._pos]
            self._pos += 1
            factor = self._parse_factor()
            result = result * factor if op == "*" else result / factor
        return result

    def _parse_factor(self) -> float:
        ch = self._peek()
        if ch == "(":
            self._pos += 1
            result = self._parse_expr()
            if self._peek() != ")":
                raise ValueError("missing closing parenthesis")
            self._pos += 1
            return result
        if ch == "-":
            self._pos += 1
            return -self._parse_factor()
        if ch == "+":
            self._pos += 1
            return self._parse_factor()
        start = self._pos
        while self._peek() and (self._peek().isdigit() or self._peek() == "."):
            self._pos += 1
        token = self._input[start : self._pos]
        if not token:
            found = ch or "end of expression"
            raise ValueError(f"expected a number at position {start}, found {found}")
        return float(token)


def format_number(value: float) -> str:
    """Whole numbers without decimals, others with at most 6 decimals."""
    if value.is_integer():
        return str(int(value))
    return f"{value:.6f}".rstrip("0").rstrip(".")


def evaluate_expression(expression: str) -> float:
    return _ExpressionParser(expression).evaluate()


class CalculatorTool(BaseTool):
    """Evaluates an arithmetic expression."""

    @property
    def name(self) -> str:
        return "calculate"

    @property
    def description(self) -> str:
        return "Evaluate an arithmetic expression. Supports +, -, *, / and parentheses."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "expression": {
                    "type": "string",
                    "description": "Arithmetic expression, e.g. '12 * (3 + 4)'",
                },
            },
            "required": ["expression"],
        }

    async def run(self, params: dict[str, Any]) -> ToolResult:
        expression = params.get("expression")
        if not isinstance(expression, str) or not expression.strip():
            return ToolResult(success=False, error="parameter 'expression' is required")
        try:
            value = evaluate_expression(expression)
        except ZeroDivisionError:
            return ToolResult(success=False, error="division by zero")
        except ValueError as e:
            return ToolResult(success=False, error=f"could not evaluate expression: {e}")
        return ToolResult(success=True, content=f"Result: {format_number(value)}")


def get_default_tools() -> list[BaseTool]:
    """Return the built-in tool list."""
    return [
        DateTimeTool(),
        CalculatorTool(),
    ]
