"""Repository layer for data access.

This layer wraps everything outside the process (vendor HTTP APIs) and the
shared in-memory session state behind protocol-based interfaces. This enables:
- Swapping vendors or embedding backends without touching services
- Unit testing with fakes or httpx.MockTransport
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from consensus_chat.protocols import EmbeddingProvider, GenerationProvider, SessionStore

from .cohere_provider import CohereEmbeddingProvider, CohereGenerationProvider
from .factory import build_embedding_provider, build_generation_providers
from .gemini_provider import GeminiProvider
from .http_provider import HttpProvider
from .memory_session_store import InMemorySessionStore
from .ollama_embedding_provider import OllamaEmbeddingProvider
from .openai_provider import OpenAICompatibleProvider

__all__ = [
    "EmbeddingProvider",
    "GenerationProvider",
    "SessionStore",
    "HttpProvider",
    "OpenAICompatibleProvider",
    "GeminiProvider",
    "CohereGenerationProvider",
    "CohereEmbeddingProvider",
    "OllamaEmbeddingProvider",
    "InMemorySessionStore",
    "build_generation_providers",
    "build_embedding_provider",
]
