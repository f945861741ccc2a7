"""Consensus Chat - ask several LLM providers, answer with their consensus.

This package provides a layered architecture for multi-provider answer
reconciliation:

Layers:
    - protocols: Interface contracts (GenerationProvider, EmbeddingProvider, SessionStore)
    - repositories: Vendor adapters and the in-memory session store
    - services: Rate gate, fanout, scoring and selection
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from consensus_chat.services import AggregationService

    # Using class method (recommended, like Path.home())
    service = AggregationService.create()
    outcome = await service.ask("session-abc", "What is the capital of France?", "English")
    ```

For HTTP API:
    ```python
    from consensus_chat.api.app import app
    ```
"""

from consensus_chat.config import get_settings, settings
from consensus_chat.dto import ChatRequest, ChatResponse
from consensus_chat.entities import AggregationResult, ChatOutcome, ProviderResponse, Turn
from consensus_chat.errors import ConsensusChatError, EmbeddingUnavailable, ProviderError
from consensus_chat.handlers import ChatHandler
from consensus_chat.protocols import EmbeddingProvider, GenerationProvider, SessionStore
from consensus_chat.repositories import InMemorySessionStore
from consensus_chat.services import AggregationService

__all__ = [
    # Configuration
    "settings",
    "get_settings",
    # Protocols (interfaces)
    "GenerationProvider",
    "EmbeddingProvider",
    "SessionStore",
    # Services (business logic)
    "AggregationService",
    # Handlers (HTTP)
    "ChatHandler",
    # Repositories (data access)
    "InMemorySessionStore",
    # Entities (domain models)
    "Turn",
    "ProviderResponse",
    "AggregationResult",
    "ChatOutcome",
    # Errors
    "ConsensusChatError",
    "ProviderError",
    "EmbeddingUnavailable",
    # DTOs (API contracts)
    "ChatRequest",
    "ChatResponse",
]
