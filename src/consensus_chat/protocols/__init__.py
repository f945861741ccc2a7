"""Protocol interfaces for swappable implementations.

Protocols enable:
- Swapping vendors without touching the aggregation logic
- Unit testing with in-process fakes
- Clear separation between the core and its collaborators
"""

from .embedding_provider import EmbeddingProvider
from .generation_provider import GenerationProvider
from .session_store import SessionStore

__all__ = [
    "EmbeddingProvider",
    "GenerationProvider",
    "SessionStore",
]
