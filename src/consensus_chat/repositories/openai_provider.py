"""OpenAI-compatible chat-completions adapter.

OpenAI, DeepSeek and Mistral all speak the same ``/chat/completions``
dialect (bearer auth, ``choices[0].message.content``); only the base URL,
model and whether the history is sent as messages differ.
"""

from typing import Any

import httpx

from consensus_chat.entities import Turn
from consensus_chat.errors import ProviderResponseError
from consensus_chat.prompts import conversation_messages, flatten_history

from .http_provider import HttpProvider, upstream_error_message


class OpenAICompatibleProvider(HttpProvider):
    """Generation provider for any OpenAI-compatible endpoint.

    Example:
        ```python
        provider = OpenAICompatibleProvider.deepseek(api_key=settings.deepseek_api_key)
        answer = await provider.generate([], "Capital of France?", "English")
        ```
    """

    def __init__(
        self,
        name: str,
        base_url: str,
        model: str,
        api_key: str | None,
        api_key_env: str,
        send_history: bool = True,
        extra_payload: dict[str, Any] | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            name: Display name
            base_url: API root, e.g. "https://api.openai.com/v1"
            model: Model identifier sent in the payload
            api_key: Bearer credential
            api_key_env: Environment variable holding the credential
            send_history: Send turns as messages; when False the history is
                flattened into a single user message
            extra_payload: Additional fields (max_tokens, temperature, ...)
            timeout: HTTP timeout in seconds
            client: Optional pre-built HTTP client
        """
        super().__init__(name=name, api_key=api_key, api_key_env=api_key_env, timeout=timeout, client=client)
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._send_history = send_history
        self._extra_payload = extra_payload or {}

    @classmethod
    def openai(cls, api_key: str | None, model: str = "gpt-3.5-turbo", **kwargs: Any) -> "OpenAICompatibleProvider":
        return cls(
            name="OpenAI",
            base_url="https://api.openai.com/v1",
            model=model,
            api_key=api_key,
            api_key_env="OPENAI_API_KEY",
            **kwargs,
        )

    @classmethod
    def deepseek(cls, api_key: str | None, model: str = "deepseek-chat", **kwargs: Any) -> "OpenAICompatibleProvider":
        return cls(
            name="DeepSeek",
            base_url="https://api.deepseek.com/v1",
            model=model,
            api_key=api_key,
            api_key_env="DEEPSEEK_API_KEY",
            **kwargs,
        )

    @classmethod
    def mistral(
        cls, api_key: str | None, model: str = "mistral-small-latest", **kwargs: Any
    ) -> "OpenAICompatibleProvider":
        return cls(
            name="Mistral",
            base_url="https://api.mistral.ai/v1",
            model=model,
            api_key=api_key,
            api_key_env="MISTRAL_API_KEY",
            send_history=False,
            extra_payload={"max_tokens": 1000, "temperature": 0.7},
            **kwargs,
        )

    def _messages(self, history: list[Turn], question: str, language: str) -> list[dict[str, str]]:
        if self._send_history:
            return conversation_messages(history, question, language)
        return [{"role": "user", "content": flatten_history(history, question, language)}]

    async def _call(self, history: list[Turn], question: str, language: str) -> str:
        payload = {
            "model": self._model,
            "messages": self._messages(history, question, language),
            **self._extra_payload,
        }
        data = await self._post_json(f"{self._base_url}/chat/completions", payload, headers=self._bearer_headers())

        error = upstream_error_message(data)
        if error:
            raise ProviderResponseError(f"error from {self.name}: {error}")

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderResponseError(f"no valid response from {self.name}") from e

        if not isinstance(content, str) or not content.strip():
            raise ProviderResponseError(f"no valid response from {self.name}")
        return content
