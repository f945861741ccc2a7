"""Cohere adapters: text generation and multilingual embeddings.

Cohere is both a generation vendor in the fanout and the default embedding
backend for agreement scoring. The two share a credential but nothing else.
"""

import logging
from typing import Any

import httpx

from consensus_chat.entities import Turn
from consensus_chat.errors import EmbeddingUnavailable, ProviderResponseError
from consensus_chat.prompts import flatten_history

from .http_provider import HttpProvider

logger = logging.getLogger(__name__)

COHERE_API_URL = "https://api.cohere.ai/v1"


def _cohere_error(data: Any) -> str | None:
    """Cohere reports failures as ``{"message": ...}`` or ``{"error": {"message": ...}}``."""
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if "generations" not in data and "embeddings" not in data and data.get("message"):
        return str(data["message"])
    return None


class CohereGenerationProvider(HttpProvider):
    """Cohere ``/generate`` adapter with the history flattened into the prompt."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "command",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(name="Cohere", api_key=api_key, api_key_env="COHERE_API_KEY", timeout=timeout, client=client)
        self._model = model

    async def _call(self, history: list[Turn], question: str, language: str) -> str:
        payload = {
            "model": self._model,
            "prompt": flatten_history(history, question, language),
            "max_tokens": 1000,
            "temperature": 0.7,
        }
        data = await self._post_json(f"{COHERE_API_URL}/generate", payload, headers=self._bearer_headers())

        error = _cohere_error(data)
        if error:
            raise ProviderResponseError(f"error from Cohere API: {error}")

        try:
            text = data["generations"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderResponseError("no valid response from Cohere") from e

        if not isinstance(text, str) or not text.strip():
            raise ProviderResponseError("no valid response from Cohere")
        return text


class CohereEmbeddingProvider:
    """Cohere ``/embed`` implementation of the EmbeddingProvider protocol.

    Every failure (missing key, HTTP error, malformed or empty payload) is
    reported as EmbeddingUnavailable; callers treat it as "no vector".
    """

    def __init__(
        self,
        api_key: str | None,
        model_name: str = "embed-multilingual-v3.0",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key or None
        self._model_name = model_name
        self._timeout = timeout
        self._client = client

    @classmethod
    def create(cls, api_key: str | None, model_name: str | None = None, timeout: float = 30.0) -> "CohereEmbeddingProvider":
        return cls(api_key=api_key, model_name=model_name or "embed-multilingual-v3.0", timeout=timeout)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    @property
    def model_name(self) -> str:
        return self._model_name

    async def encode(self, text: str) -> list[float]:
        if self._api_key is None:
            raise EmbeddingUnavailable("COHERE_API_KEY is not set")

        payload = {"texts": [text], "model": self._model_name, "input_type": "search_document"}
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        try:
            response = await self.client.post(f"{COHERE_API_URL}/embed", json=payload, headers=headers)
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise EmbeddingUnavailable(f"error with Cohere Embed request: {e}") from e

        error = _cohere_error(data)
        if error or not response.is_success:
            raise EmbeddingUnavailable(f"error from Cohere Embed API: {error or response.status_code}")

        try:
            vector = data["embeddings"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise EmbeddingUnavailable("no embedding returned by Cohere") from e

        if not vector:
            raise EmbeddingUnavailable("no embedding returned by Cohere")
        return [float(x) for x in vector]

    async def is_available(self) -> bool:
        try:
            await self.encode("test")
            return True
        except EmbeddingUnavailable:
            logger.warning("Cohere embeddings unavailable", exc_info=True)
            return False

    async def aclose(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
