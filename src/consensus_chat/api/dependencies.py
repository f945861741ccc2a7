"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan (or preset by create_app)
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request, Response

from consensus_chat.config import configure_logging, settings
from consensus_chat.handlers import ChatHandler
from consensus_chat.services import AggregationService

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_id"


def get_handler(request: Request) -> ChatHandler:
    """Dependency injection for ChatHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "chat_handler", None)
    if handler is None:
        raise RuntimeError("ChatHandler not initialized. Check lifespan setup.")
    return handler


def get_session_key(request: Request, response: Response) -> str:
    """Resolve the caller's session from its cookie, minting one if absent."""
    session_key = request.cookies.get(SESSION_COOKIE)
    if not session_key:
        session_key = str(uuid.uuid4())
        response.set_cookie(SESSION_COOKIE, session_key, httponly=True, samesite="lax")
    return session_key


def install_service(app: FastAPI, service: AggregationService) -> None:
    """Store the service and its handler in app.state."""
    app.state.aggregation_service = service
    app.state.chat_handler = ChatHandler(service=service)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Repositories (vendor adapters, embedding backend, session store)
    2. Service (business logic) - stored in app.state.aggregation_service
    3. Handler (HTTP endpoints) - stored in app.state.chat_handler

    A service preset by create_app() is used as-is and left open on
    shutdown; its owner closes it.

    Args:
        app: The FastAPI application instance

    Yields:
        None
    """
    configure_logging()

    owned = getattr(app.state, "aggregation_service", None) is None
    if owned:
        install_service(app, AggregationService.create(settings))

    service: AggregationService = app.state.aggregation_service
    logger.info("Selection policy: %s", settings.selection_policy)
    logger.info("Embedding model: %s", service.embedding_model)
    logger.info("Configured providers: %s", [name for name, ok in service.provider_status().items() if ok])
    if not service.is_healthy():
        logger.warning("No provider has an API key; every answer will be an error")

    yield

    if owned:
        await service.aclose()
        del app.state.chat_handler
        del app.state.aggregation_service
    logger.info("Aggregation service shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[ChatHandler, Depends(get_handler)]
SessionDep = Annotated[str, Depends(get_session_key)]
