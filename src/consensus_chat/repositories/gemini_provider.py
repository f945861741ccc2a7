"""Google Gemini ``generateContent`` adapter."""

from typing import Any

import httpx

from consensus_chat.entities import Turn
from consensus_chat.errors import ProviderResponseError
from consensus_chat.prompts import flatten_history

from .http_provider import HttpProvider, upstream_error_message


class GeminiProvider(HttpProvider):
    """Gemini adapter: API key in the query string, history flattened into one part."""

    BASE_URL = "https://generativelanguage.googleapis.com/v1/models"

    def __init__(
        self,
        api_key: str | None,
        model: str = "gemini-1.5-flash",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(name="Gemini", api_key=api_key, api_key_env="GEMINI_API_KEY", timeout=timeout, client=client)
        self._model = model

    async def _call(self, history: list[Turn], question: str, language: str) -> str:
        payload: dict[str, Any] = {
            "contents": [{"parts": [{"text": flatten_history(history, question, language)}]}],
        }
        data = await self._post_json(
            f"{self.BASE_URL}/{self._model}:generateContent",
            payload,
            headers={"Content-Type": "application/json"},
            params={"key": self._api_key},
        )

        error = upstream_error_message(data)
        if error:
            raise ProviderResponseError(f"error from Gemini: {error}")

        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderResponseError("Gemini did not provide a valid response") from e

        if not isinstance(text, str) or not text.strip():
            raise ProviderResponseError("Gemini did not provide a valid response")
        return text
