"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class ChatResponse(BaseModel):
    """Response DTO for a chat turn.

    A rate-limited request is still a normal response: ``rejected`` is true
    and ``response`` carries the limit message.
    """

    response: str = Field(..., description="Final answer, or the rejection message")
    raw_responses: dict[str, str] = Field(
        default_factory=dict,
        description="Per-provider answer text; failures start with 'Error:'",
    )
    contributions: dict[str, float] = Field(
        default_factory=dict,
        description="Provider -> percentage (sums to 100, or empty)",
    )
    rejected: bool = Field(False, description="Whether the rate gate rejected the request")
    degraded: bool = Field(False, description="Whether synthesis failed and a fallback answer was used")
    policy: str = Field("none", description="Selection policy that produced the answer")


class ClearResponse(BaseModel):
    """Response DTO for clearing a session."""

    success: bool = Field(..., description="Whether the operation succeeded")
    cleared: bool = Field(..., description="Whether there was a history to clear")
    message: str = Field(..., description="Human-readable status message")


class SaveConversationResponse(BaseModel):
    """Response DTO for a shared answer."""

    conversation_id: str = Field(..., description="Id to retrieve the conversation with")


class ConversationResponse(BaseModel):
    """Response DTO for a shared answer lookup."""

    conversation_id: str = Field(..., description="The conversation id")
    response: str = Field(..., description="The saved answer text")
    contributions: dict[str, float] = Field(default_factory=dict, description="Saved contributions")
    saved_at: float = Field(..., description="When the answer was saved (Unix timestamp)")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    providers: dict[str, bool] = Field(
        default_factory=dict,
        description="Provider name -> whether a credential is configured",
    )
    embedding_backend: str = Field(..., description="Embedding model in use")
