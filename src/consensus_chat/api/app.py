from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from consensus_chat.api.dependencies import HandlerDep, SessionDep, install_service, lifespan
from consensus_chat.config import settings
from consensus_chat.dto import (
    ChatRequest,
    ChatResponse,
    ClearResponse,
    ConversationResponse,
    HealthCheckResponse,
    SaveConversationRequest,
    SaveConversationResponse,
)
from consensus_chat.services import AggregationService

APP_NAME = "Consensus Chat API"
APP_VERSION = "0.1.0"
APP_DESCRIPTION = "Asks several LLM providers the same question and reconciles their answers"


def create_app(service: AggregationService | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        service: Preset aggregation service (tests, embedding). If None, the
            lifespan builds one from settings.

    Returns:
        The configured FastAPI app
    """
    app = FastAPI(
        title=APP_NAME,
        description=APP_DESCRIPTION,
        version=APP_VERSION,
        lifespan=lifespan,
    )
    if service is not None:
        install_service(app, service)

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": APP_NAME,
            "version": APP_VERSION,
            "description": APP_DESCRIPTION,
            "endpoints": {
                "chat": "/chat",
                "clear": "/clear",
                "conversations": "/conversations",
                "stats": "/stats",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.get("/stats", response_model=dict[str, Any])
    async def stats(handler: HandlerDep) -> dict[str, Any]:
        """Session store counts."""
        return await handler.get_stats()

    @app.post("/chat", response_model=ChatResponse)
    async def chat(request: ChatRequest, handler: HandlerDep, session_key: SessionDep) -> ChatResponse:
        """Ask every provider and return the reconciled answer."""
        return await handler.chat(request, session_key)

    @app.post("/clear", response_model=ClearResponse)
    async def clear(handler: HandlerDep, session_key: SessionDep) -> ClearResponse:
        """Forget the caller's conversation history."""
        return await handler.clear(session_key)

    @app.post("/conversations", response_model=SaveConversationResponse)
    async def save_conversation(request: SaveConversationRequest, handler: HandlerDep) -> SaveConversationResponse:
        """Keep an answer so it can be shared by id."""
        return await handler.save_conversation(request)

    @app.get("/conversations/{conversation_id}", response_model=ConversationResponse)
    async def get_conversation(conversation_id: str, handler: HandlerDep) -> ConversationResponse:
        """Look up a shared answer."""
        return await handler.get_conversation(conversation_id)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "consensus_chat.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
