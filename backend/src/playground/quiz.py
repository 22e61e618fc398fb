"""Multiple-choice quiz driven by JSON answers from the model, scored locally."""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from src.llm_core import ChatCompletionClient

from .chat import ChatMessage, ChatSettings, send_message

logger = logging.getLogger(__name__)

QUIZ_START_MESSAGE = "Start the quiz! Ask the first question."
OPTION_KEYS = ("A", "B", "C", "D")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class QuizTopic(str, Enum):
    RANDOM = "random"
    SCIENCE = "science"
    HISTORY = "history"
    GEOGRAPHY = "geography"
    MOVIES = "movies"
    TECHNOLOGY = "technology"
    SPORTS = "sports"


class QuizDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


_TOPIC_PROMPTS = {
    QuizTopic.RANDOM: "on completely different subjects (science, history, geography, culture, sports, technology)",
    QuizTopic.SCIENCE: "about science (physics, chemistry, biology, astronomy)",
    QuizTopic.HISTORY: "about world history",
    QuizTopic.GEOGRAPHY: "about geography (countries, capitals, rivers, mountains)",
    QuizTopic.MOVIES: "about movies and TV series",
    QuizTopic.TECHNOLOGY: "about IT and technology",
    QuizTopic.SPORTS: "about sports",
}

_DIFFICULTY_PROMPTS = {
    QuizDifficulty.EASY: "easy, for beginners",
    QuizDifficulty.MEDIUM: "medium difficulty",
    QuizDifficulty.HARD: "hard, for experts",
}


class QuizConfig(BaseModel):
    topic: QuizTopic = QuizTopic.RANDOM
    difficulty: QuizDifficulty = QuizDifficulty.MEDIUM
    question_count: int = Field(5, ge=1, le=20)
    subtopic: str = ""
    temperature: float = 0.7
    max_tokens: int = 600


def build_quiz_system_prompt(config: QuizConfig) -> str:
    subtopic = f', specific subtopic: "{config.subtopic.strip()}"' if config.subtopic.strip() else ""
    n = config.question_count
    return f"""You are the host of a mini quiz. Reply ONLY with valid JSON: no markdown, no explanations, no text outside the JSON.

RULES:
- {n} questions in total {_TOPIC_PROMPTS[config.topic]}{subtopic}
- Difficulty: {_DIFFICULTY_PROMPTS[config.difficulty]}
- Ask ONE question at a time
- Answers are checked by the application; never return type=answer
- When the user asks for the next question, return the next question
- When the user asks for the final result, return type=final

FORMAT - question (type=question):
{{
  "type": "question",
  "question_number": <N>,
  "total": {n},
  "question": "<question text>",
  "options": {{ "A": "<option>", "B": "<option>", "C": "<option>", "D": "<option>" }},
  "correct": "<A|B|C|D>",
  "explanation": "<one-sentence explanation of the correct answer>"
}}

FORMAT - final result (type=final):
{{
  "type": "final",
  "score": <score from the user's message>,
  "total": {n},
  "comment": "<short closing comment>"
}}

IMPORTANT: reply with JSON only, nothing else."""


def quiz_settings(config: QuizConfig) -> ChatSettings:
    return ChatSettings(
        system_prompt=build_quiz_system_prompt(config),
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        top_p=0.9,
    )


# ---------------------------------------------------------------------------
# Model answers
# ---------------------------------------------------------------------------


class QuizOptions(BaseModel):
    A: str
    B: str
    C: str
    D: str

    def as_pairs(self) -> list[tuple[str, str]]:
        return [(key, getattr(self, key)) for key in OPTION_KEYS]


class QuizQuestion(BaseModel):
    type: Literal["question"] = "question"
    question_number: int
    total: int
    question: str
    options: QuizOptions
    correct: str
    explanation: str = ""

    @property
    def is_last(self) -> bool:
        return self.question_number >= self.total


class QuizFinal(BaseModel):
    type: Literal["final"] = "final"
    score: int
    total: int
    comment: str


QuizItem = Annotated[Union[QuizQuestion, QuizFinal], Field(discriminator="type")]
_quiz_item = TypeAdapter(QuizItem)


class QuizMessage(ChatMessage):
    """Chat message that may carry a parsed quiz item and the option the user picked."""

    quiz_data: QuizItem | None = None
    selected_option: str | None = None


# ---------------------------------------------------------------------------
# JSON extraction
# ---------------------------------------------------------------------------

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def _top_level_spans(text: str) -> list[tuple[int, int]]:
    """(start, end) of every top-level {...} object; braces inside strings are ignored."""
    spans: list[tuple[int, int]] = []
    depth = 0
    start = -1
    in_string = False
    escape = False
    for i, ch in enumerate(text):
        if escape:
            escape = False
            continue
        if ch == "\\" and in_string:
            escape = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0 and start != -1:
                spans.append((start, i + 1))
                start = -1
    return spans


def count_top_level_objects(text: str) -> int:
    return len(_top_level_spans(text))


def extract_top_level_objects(text: str) -> list[str]:
    return [text[start:end] for start, end in _top_level_spans(text)]


def extract_json_block(text: str) -> str:
    """
    Normalize a model answer to one JSON document.

    Unwraps a ```json fence if present. An array or a single object is
    returned as is; several objects in a row are wrapped into an array.
    """
    trimmed = text.strip()
    match = _FENCE_RE.search(trimmed)
    inner = match.group(1).strip() if match else trimmed

    if inner.startswith("[") or (inner.startswith("{") and count_top_level_objects(inner) == 1):
        return inner
    objects = extract_top_level_objects(inner)
    if len(objects) > 1:
        return "[" + ",".join(objects) + "]"
    return inner


def parse_quiz_messages(content: str) -> list[QuizMessage]:
    """
    Parse an assistant answer into quiz messages.

    Each array element becomes its own message. Anything that is not a quiz
    item falls back to a plain assistant message with the raw text.
    """
    fallback = [QuizMessage(role="assistant", content=content.strip())]
    try:
        document: Any = json.loads(extract_json_block(content))
        if isinstance(document, list):
            return [
                QuizMessage(
                    role="assistant",
                    content=json.dumps(element, ensure_ascii=False),
                    quiz_data=_quiz_item.validate_python(element),
                )
                for element in document
            ]
        if isinstance(document, dict):
            return [
                QuizMessage(
                    role="assistant",
                    content=content,
                    quiz_data=_quiz_item.validate_python(document),
                )
            ]
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("Could not parse quiz answer: %s", e)
        return fallback
    logger.warning("Unexpected quiz JSON document: %s", type(document).__name__)
    return fallback


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class QuizState(BaseModel):
    """Whole quiz conversation; the client sends it back with every answer."""

    config: QuizConfig = Field(default_factory=QuizConfig)
    messages: list[QuizMessage] = Field(default_factory=list)
    score: int = 0
    active: bool = True

    def last_question(self) -> tuple[int, QuizQuestion] | None:
        """Index and content of the most recent question message."""
        for i in range(len(self.messages) - 1, -1, -1):
            data = self.messages[i].quiz_data
            if isinstance(data, QuizQuestion):
                return i, data
        return None


def next_request_text(question: QuizQuestion, score: int) -> str:
    """User message sent after an answer: next question, or the final result after the last one."""
    if question.is_last:
        return (
            f"That was the last question. My final score: {score}/{question.total}. "
            "Return the final result."
        )
    return f"Next question ({question.question_number + 1}/{question.total})."


async def _request_next(client: ChatCompletionClient, state: QuizState, model: str) -> QuizState:
    try:
        reply = await send_message(client, list(state.messages), quiz_settings(state.config), model=model)
    except Exception as e:
        logger.warning("Quiz request failed: %s", e)
        state.messages.append(QuizMessage(role="error", content=str(e) or "Failed to get an answer"))
        return state
    new_messages = parse_quiz_messages(reply.content)
    state.messages.extend(new_messages)
    if any(isinstance(m.quiz_data, QuizFinal) for m in new_messages):
        state.active = False
    return state


async def start_quiz(
    client: ChatCompletionClient,
    config: QuizConfig,
    model: str = "deepseek-chat",
) -> QuizState:
    """Fresh quiz: score zero, one start message, first question requested."""
    state = QuizState(config=config, messages=[QuizMessage(role="user", content=QUIZ_START_MESSAGE)])
    return await _request_next(client, state, model)


async def answer_question(
    client: ChatCompletionClient,
    state: QuizState,
    option_key: str,
    model: str = "deepseek-chat",
) -> QuizState:
    """
    Score the picked option against the latest question, then ask for the
    next question (or the final result after the last one).

    Raises ValueError for an unknown option or when there is no open question.
    """
    key = option_key.strip().upper()
    if key not in OPTION_KEYS:
        raise ValueError(f"option must be one of {', '.join(OPTION_KEYS)}")
    if not state.active:
        raise ValueError("the quiz is already finished")
    found = state.last_question()
    if found is None:
        raise ValueError("there is no question to answer")
    index, question = found
    if state.messages[index].selected_option is not None:
        raise ValueError("the latest question was already answered")

    state = state.model_copy(deep=True)
    state.messages[index].selected_option = key
    if key == question.correct.strip().upper():
        state.score += 1
    state.messages.append(QuizMessage(role="user", content=next_request_text(question, state.score)))
    return await _request_next(client, state, model)
