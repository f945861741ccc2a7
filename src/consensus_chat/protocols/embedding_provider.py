"""Embedding provider protocol.

Defines the interface for any embedding service that can convert an answer
into a fixed-length vector for agreement scoring.

Implementations include:
- Cohere embed API (default)
- Ollama local embeddings
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Protocol for embedding generation services.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.

    Vectors returned by one provider all share the same length; the scorer
    treats vectors of different lengths as unrelated (similarity 0.0).
    """

    @property
    def model_name(self) -> str:
        """Return the name/identifier of the embedding model."""
        ...

    async def encode(self, text: str) -> list[float]:
        """Generate the embedding vector for a single text.

        Args:
            text: The text to encode

        Returns:
            The embedding vector as a list of floats

        Raises:
            EmbeddingUnavailable: If no usable vector could be produced
        """
        ...

    async def is_available(self) -> bool:
        """Check if the embedding provider is reachable.

        Returns:
            True if available, False otherwise
        """
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...
