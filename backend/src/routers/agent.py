"""Agent router: tool-using chat with persisted history."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from src.agent_orchestrator import (
    Agent,
    AgentResult,
    ContextStats,
    SessionStats,
    TranscriptEntry,
    get_default_agent,
    replay_history,
)


router = APIRouter(prefix="/agent", tags=["agent"])


class AgentChatRequest(BaseModel):
    """Request body for POST /agent/chat."""

    message: str = Field(..., description="User message")


class AgentStatsResponse(BaseModel):
    session: SessionStats
    context: ContextStats


@router.post("/chat", response_model=AgentResult)
async def agent_chat(request: AgentChatRequest, agent: Agent = Depends(get_default_agent)) -> AgentResult:
    """Run one agent turn. Failures come back as a result with is_error set."""
    text = request.message.strip()
    if not text:
        raise HTTPException(status_code=400, detail="message must not be blank")
    return await agent.chat(text)


@router.get("/history", response_model=list[TranscriptEntry])
async def agent_history(agent: Agent = Depends(get_default_agent)) -> list[TranscriptEntry]:
    """Persisted conversation grouped into display turns."""
    return replay_history(await agent.get_history())


@router.delete("/history", response_model=AgentStatsResponse)
async def clear_agent_history(agent: Agent = Depends(get_default_agent)) -> AgentStatsResponse:
    await agent.reset()
    return AgentStatsResponse(session=agent.session_stats(), context=await agent.context_stats())


@router.get("/stats", response_model=AgentStatsResponse)
async def agent_stats(agent: Agent = Depends(get_default_agent)) -> AgentStatsResponse:
    return AgentStatsResponse(session=agent.session_stats(), context=await agent.context_stats())
