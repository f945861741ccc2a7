"""HTTP handlers for chat operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
Session identity is resolved by the transport and passed in as a plain key.
"""

import logging
from typing import Any

from fastapi import HTTPException, status

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

logger = logging.getLogger(__name__)


class ChatHandler:
    """HTTP handlers for chat operations.

    This handler delegates business logic to AggregationService
    and handles HTTP-specific concerns like:
    - Converting entities to DTOs
    - Setting appropriate status codes
    - Error handling and responses

    Example:
        ```python
        service = AggregationService.create()
        handler = ChatHandler(service=service)

        @app.post("/chat", response_model=ChatResponse)
        async def chat(request: ChatRequest):
            return await handler.chat(request, session_key="abc")
        ```
    """

    def __init__(self, service: AggregationService) -> None:
        """Initialize the chat handler.

        Args:
            service: The aggregation service for business logic (required).
        """
        self._service = service

    async def chat(self, request: ChatRequest, session_key: str) -> ChatResponse:
        """Handle POST /chat requests.

        Args:
            request: The chat request DTO
            session_key: Session id resolved from the cookie

        Returns:
            ChatResponse with the final answer, or the rejection message

        Raises:
            HTTPException: 400 for a blank message, 500 on unexpected errors
        """
        if not request.message.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Message must not be blank",
            )

        try:
            outcome = await self._service.ask(session_key, request.message, request.language)
        except Exception as e:
            logger.exception("Chat request failed")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to answer: {e}",
            ) from e

        if outcome.rejected:
            return ChatResponse(response=outcome.admission.reason or "", rejected=True)

        result = outcome.result
        return ChatResponse(
            response=result.answer,
            raw_responses=result.raw_responses,
            contributions=result.contributions,
            degraded=result.degraded,
            policy=result.policy,
        )

    async def clear(self, session_key: str) -> ClearResponse:
        """Handle POST /clear requests."""
        cleared = self._service.reset(session_key)
        return ClearResponse(
            success=True,
            cleared=cleared,
            message="Conversation cleared" if cleared else "Nothing to clear",
        )

    async def save_conversation(self, request: SaveConversationRequest) -> SaveConversationResponse:
        """Handle POST /conversations requests.

        Raises:
            HTTPException: If the conversation could not be stored
        """
        try:
            conversation_id = self._service.save_conversation(request.response, request.contributions)
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to save conversation: {e}",
            ) from e

        return SaveConversationResponse(conversation_id=conversation_id)

    async def get_conversation(self, conversation_id: str) -> ConversationResponse:
        """Handle GET /conversations/{conversation_id} requests.

        Raises:
            HTTPException: 404 if no conversation has that id
        """
        conversation = self._service.get_conversation(conversation_id)
        if conversation is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Conversation {conversation_id} not found",
            )

        return ConversationResponse(
            conversation_id=conversation_id,
            response=conversation.response,
            contributions=conversation.contributions,
            saved_at=conversation.saved_at,
        )

    async def get_stats(self) -> dict[str, Any]:
        """Handle GET /stats requests.

        Raises:
            HTTPException: If the store could not report its counts
        """
        try:
            return {"store": self._service.get_stats()}
        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to get stats: {e}",
            ) from e

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        is_healthy = self._service.is_healthy()

        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            providers=self._service.provider_status(),
            embedding_backend=self._service.embedding_model,
        )
