"""Run the FastAPI app for the agent chat backend."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI

from src.routers import agent_router, chat_router


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Agent Chat", version="0.1.0")
app.include_router(chat_router)
app.include_router(agent_router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
