from .agent import router as agent_router
from .chat import router as chat_router

__all__ = ["agent_router", "chat_router"]
