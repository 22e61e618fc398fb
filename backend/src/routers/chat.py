"""Chat router: plain chat, model comparison, temperature comparison and quiz."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from src.llm_core import DEEPSEEK, GROQ, ChatCompletionClient, get_client
from src.playground import (
    DEFAULT_TEMPERATURES,
    ApiProvider,
    ChatMessage,
    ChatSettings,
    JudgeVerdict,
    ModelComparisonResponse,
    ModelComparisonService,
    QuizConfig,
    QuizState,
    TemperatureResponse,
    answer_question,
    compare_temperatures,
    send_message,
    start_quiz,
)


router = APIRouter(tags=["chat"])


def get_chat_client() -> ChatCompletionClient:
    return get_client(DEEPSEEK)


def get_comparison_service() -> ModelComparisonService:
    return ModelComparisonService(
        {
            ApiProvider.DEEPSEEK: get_client(DEEPSEEK),
            ApiProvider.GROQ: get_client(GROQ),
        }
    )


class ChatRequest(BaseModel):
    """Request body for POST /chat."""

    messages: list[ChatMessage] = Field(..., description="Conversation so far, oldest first")
    settings: ChatSettings = Field(default_factory=ChatSettings)


class CompareRequest(BaseModel):
    """Request body for POST /compare."""

    question: str
    judge: bool = Field(True, description="Ask the judge model to score the answers")


class CompareResponse(BaseModel):
    responses: list[ModelComparisonResponse]
    verdict: JudgeVerdict | None = None


class QuizAnswerRequest(BaseModel):
    """Request body for POST /quiz/answer."""

    state: QuizState
    option: str = Field(..., description="Picked option key, A to D")


class TemperatureRequest(BaseModel):
    """Request body for POST /temperature."""

    question: str
    temperatures: list[float] = Field(default_factory=lambda: list(DEFAULT_TEMPERATURES))
    system_prompt: str = ""


@router.post("/chat", response_model=ChatMessage)
async def chat(
    request: ChatRequest,
    client: ChatCompletionClient = Depends(get_chat_client),
) -> ChatMessage:
    """Send the conversation with the given sampling settings and return the reply."""
    if not request.messages:
        raise HTTPException(status_code=400, detail="messages must not be empty")
    try:
        return await send_message(client, request.messages, request.settings)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.post("/compare", response_model=CompareResponse)
async def compare(
    request: CompareRequest,
    service: ModelComparisonService = Depends(get_comparison_service),
) -> CompareResponse:
    """Ask every model concurrently, then optionally let the judge score them."""
    question = request.question.strip()
    if not question:
        raise HTTPException(status_code=400, detail="question must not be blank")
    responses = await service.compare(question)
    verdict = await service.judge(question, responses) if request.judge else None
    return CompareResponse(responses=responses, verdict=verdict)


@router.post("/temperature", response_model=list[TemperatureResponse])
async def temperature(
    request: TemperatureRequest,
    client: ChatCompletionClient = Depends(get_chat_client),
) -> list[TemperatureResponse]:
    question = request.question.strip()
    if not question:
        raise HTTPException(status_code=400, detail="question must not be blank")
    return await compare_temperatures(
        client,
        question,
        temperatures=request.temperatures,
        system_prompt=request.system_prompt,
    )


@router.post("/quiz/start", response_model=QuizState)
async def quiz_start(
    config: QuizConfig,
    client: ChatCompletionClient = Depends(get_chat_client),
) -> QuizState:
    """Start a quiz and return its state with the first question."""
    return await start_quiz(client, config)


@router.post("/quiz/answer", response_model=QuizState)
async def quiz_answer(
    request: QuizAnswerRequest,
    client: ChatCompletionClient = Depends(get_chat_client),
) -> QuizState:
    """Score the picked option and return the state with the next question or the final result."""
    try:
        return await answer_question(client, request.state, request.option)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
