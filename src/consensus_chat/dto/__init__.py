"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import ChatRequest, SaveConversationRequest
from .responses import (
    ChatResponse,
    ClearResponse,
    ConversationResponse,
    HealthCheckResponse,
    SaveConversationResponse,
)

__all__ = [
    "ChatRequest",
    "SaveConversationRequest",
    "ChatResponse",
    "ClearResponse",
    "SaveConversationResponse",
    "ConversationResponse",
    "HealthCheckResponse",
]
