"""Embedding-based agreement scoring.

Answers are embedded and compared with cosine similarity; the selection
layer turns those similarities into an answer and contribution percentages.
"""

import asyncio
import logging

import numpy as np

from consensus_chat.entities import ProviderResponse
from consensus_chat.errors import EmbeddingUnavailable
from consensus_chat.protocols import EmbeddingProvider

logger = logging.getLogger(__name__)


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity of two vectors.

    Returns exactly 0.0 when the vectors differ in length, are empty, or
    either has zero norm. Negative similarities are returned as-is.
    """
    if len(a) != len(b) or not a:
        return 0.0

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(va, vb) / (norm_a * norm_b))


class EmbeddingScorer:
    """Wraps an EmbeddingProvider with the error policy used by selection.

    Example:
        ```python
        scorer = EmbeddingScorer(CohereEmbeddingProvider.create(api_key="..."))
        vectors = await scorer.embed_responses(valid)
        ```
    """

    def __init__(self, embedding_provider: EmbeddingProvider) -> None:
        self._embeddings = embedding_provider

    @property
    def model_name(self) -> str:
        return self._embeddings.model_name

    async def embed(self, text: str) -> list[float]:
        """Embed one text.

        Raises:
            EmbeddingUnavailable: On any provider failure or an empty vector
        """
        try:
            vector = await self._embeddings.encode(text)
        except EmbeddingUnavailable:
            raise
        except Exception as e:
            raise EmbeddingUnavailable(f"embedding failed: {e}") from e

        if not vector:
            raise EmbeddingUnavailable("embedding provider returned an empty vector")
        return [float(x) for x in vector]

    async def embed_responses(self, responses: list[ProviderResponse]) -> dict[str, list[float]]:
        """Embed every successful response concurrently.

        Providers whose answer could not be embedded are left out of the
        returned map; they still count as valid answers.
        """
        valid = [r for r in responses if r.success]
        results = await asyncio.gather(*(self._embed_or_none(r) for r in valid))
        return {r.provider: vector for r, vector in zip(valid, results) if vector is not None}

    async def _embed_or_none(self, response: ProviderResponse) -> list[float] | None:
        try:
            return await self.embed(response.content)
        except EmbeddingUnavailable as e:
            logger.warning("No embedding for %s answer: %s", response.provider, e)
            return None

    async def is_healthy(self) -> bool:
        return await self._embeddings.is_available()

    async def aclose(self) -> None:
        await self._embeddings.aclose()
