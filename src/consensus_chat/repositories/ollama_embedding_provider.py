"""Ollama-based embedding provider.

Uses Ollama's local API to embed provider answers, as an alternative to the
hosted Cohere backend when scoring should not leave the machine.

Requirements:
    - Ollama installed: https://ollama.com
    - Model pulled: `ollama pull nomic-embed-text`
    - Ollama running: `ollama serve` (usually runs automatically)

Models available:
- nomic-embed-text (137M params, 768 dims)
- mxbai-embed-large (335M params, 1024 dims)
- embeddinggemma (308M params, 768 dims)
- all-minilm (22M params, 384 dims)
"""

import logging

import httpx

from consensus_chat.config import settings
from consensus_chat.errors import EmbeddingUnavailable

logger = logging.getLogger(__name__)


class OllamaEmbeddingProvider:
    """Ollama-based implementation of EmbeddingProvider protocol.

    This class satisfies the EmbeddingProvider protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        provider = OllamaEmbeddingProvider.create(
            model_name="nomic-embed-text",
            base_url="http://localhost:11434"
        )
        embedding = await provider.encode("Paris is the capital of France.")
        ```
    """

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Ollama embedding provider.

        Args:
            model_name: Name of the Ollama model.
                       Defaults to "nomic-embed-text".
            base_url: Ollama API base URL.
                     Defaults to settings.ollama_base_url.
            timeout: Request timeout in seconds.
            client: Optional pre-built HTTP client.
        """
        self._model_name = model_name or "nomic-embed-text"
        self._base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self._timeout = timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @classmethod
    def create(
        cls,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
    ) -> "OllamaEmbeddingProvider":
        """Factory method to create OllamaEmbeddingProvider with defaults.

        Args:
            model_name: Model name. If None, uses "nomic-embed-text".
            base_url: Ollama API URL. If None, uses settings.
            timeout: Request timeout in seconds.

        Returns:
            Configured OllamaEmbeddingProvider
        """
        return cls(model_name=model_name, base_url=base_url, timeout=timeout)

    @property
    def model_name(self) -> str:
        """Get the model name/identifier."""
        return self._model_name

    async def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Args:
            text: The text to encode

        Returns:
            The embedding vector as a list of floats

        Raises:
            EmbeddingUnavailable: If the Ollama request fails or the response is unusable
        """
        url = f"{self._base_url}/api/embed"
        payload = {
            "model": self._model_name,
            "input": text,
        }

        try:
            response = await self.client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            error_msg = f"Ollama API error: {e}"
            if "connection refused" in str(e).lower():
                error_msg += " (is Ollama running? Try: ollama serve)"
            elif "not found" in str(e).lower():
                error_msg += f" (model not found? Try: ollama pull {self._model_name})"
            raise EmbeddingUnavailable(error_msg) from e
        except ValueError as e:
            raise EmbeddingUnavailable(f"Ollama returned a non-JSON body: {e}") from e

        # Ollama returns {"embeddings": [[...]]} for single input
        if data.get("embeddings"):
            return [float(x) for x in data["embeddings"][0]]

        # Older servers answer with "embedding" (singular)
        if data.get("embedding"):
            return [float(x) for x in data["embedding"]]

        raise EmbeddingUnavailable(f"Unexpected response format: {data}")

    async def is_available(self) -> bool:
        """Check if Ollama is running and the model answers."""
        try:
            await self.encode("test")
            return True
        except EmbeddingUnavailable:
            logger.warning("Ollama embeddings unavailable", exc_info=True)
            return False

    async def aclose(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
