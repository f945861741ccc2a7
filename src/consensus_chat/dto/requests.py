"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """Request DTO for asking a question.

    The handler will convert this to a call to AggregationService.ask.
    """

    message: str = Field(..., description="The user's question", min_length=1)
    language: str | None = Field(
        None,
        description="Target response language (e.g. 'English'). Defaults to the configured language.",
    )


class SaveConversationRequest(BaseModel):
    """Request DTO for sharing an answer."""

    response: str = Field(..., description="The answer text to keep", min_length=1)
    contributions: dict[str, float] = Field(
        default_factory=dict,
        description="Provider -> contribution percentage shown with the answer",
    )
