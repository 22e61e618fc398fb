"""Single-shot chat modes: plain chat, model comparison, temperature comparison, quiz."""

from .chat import ChatMessage, ChatSettings, build_chat_request, send_message
from .comparison import ModelComparisonService, build_judge_prompt
from .models import (
    JUDGE_MODEL,
    MODEL_CONFIGS,
    ApiProvider,
    JudgeVerdict,
    ModelComparisonResponse,
    ModelConfig,
    TemperatureResponse,
)
from .quiz import (
    QuizConfig,
    QuizDifficulty,
    QuizFinal,
    QuizMessage,
    QuizQuestion,
    QuizState,
    QuizTopic,
    answer_question,
    extract_json_block,
    parse_quiz_messages,
    start_quiz,
)
from .temperature import DEFAULT_TEMPERATURES, compare_temperatures

__all__ = [
    "ChatMessage",
    "ChatSettings",
    "build_chat_request",
    "send_message",
    "ModelComparisonService",
    "build_judge_prompt",
    "JUDGE_MODEL",
    "MODEL_CONFIGS",
    "ApiProvider",
    "JudgeVerdict",
    "ModelComparisonResponse",
    "ModelConfig",
    "TemperatureResponse",
    "DEFAULT_TEMPERATURES",
    "compare_temperatures",
    "QuizConfig",
    "QuizDifficulty",
    "QuizFinal",
    "QuizMessage",
    "QuizQuestion",
    "QuizState",
    "QuizTopic",
    "answer_question",
    "extract_json_block",
    "parse_quiz_messages",
    "start_quiz",
]
