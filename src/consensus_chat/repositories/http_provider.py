"""Shared HTTP plumbing for generation provider adapters.

Each vendor adapter subclasses HttpProvider and only describes its URL,
headers, payload and how to pull the answer out of the JSON body. Status
and JSON validation live here so every vendor fails the same way.
"""

import logging
from typing import Any

import httpx

from consensus_chat.entities import Turn
from consensus_chat.errors import ProviderNotConfigured, ProviderResponseError, TransientProviderError

logger = logging.getLogger(__name__)

# Upstream statuses that usually clear up on their own
TRANSIENT_STATUSES = {408, 429, 502, 503, 504}


class HttpProvider:
    """Base class for httpx-backed generation providers.

    Subclasses implement ``_call``; ``generate`` takes care of the
    credential check. Network-level failures are left to propagate as
    ``httpx.TransportError`` so the retry wrapper can see them.
    """

    def __init__(
        self,
        name: str,
        api_key: str | None,
        api_key_env: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            name: Display name, unique among configured providers
            api_key: Credential; None or empty marks the provider unconfigured
            api_key_env: Environment variable named in the "not set" error
            timeout: HTTP timeout in seconds
            client: Pre-built client (tests inject one with a MockTransport)
        """
        self._name = name
        self._api_key = api_key or None
        self._api_key_env = api_key_env
        self._timeout = timeout
        self._client = client

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_configured(self) -> bool:
        return self._api_key is not None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    async def generate(self, history: list[Turn], question: str, language: str) -> str:
        if not self.is_configured:
            raise ProviderNotConfigured(f"{self._api_key_env} is not set")
        return await self._call(history, question, language)

    async def _call(self, history: list[Turn], question: str, language: str) -> str:
        raise NotImplementedError

    async def _post_json(
        self,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """POST a JSON payload and return the decoded JSON body.

        Raises:
            TransientProviderError: For 408/429/5xx gateway statuses
            ProviderResponseError: For any other non-success status or a non-JSON body
            httpx.TransportError: For network-level failures
        """
        response = await self.client.post(url, json=payload, headers=headers, params=params)

        if not response.is_success:
            detail = f"invalid response from {self._name} (status {response.status_code}): {response.text[:300]}"
            if response.status_code in TRANSIENT_STATUSES:
                raise TransientProviderError(detail)
            raise ProviderResponseError(detail)

        try:
            return response.json()
        except ValueError as e:
            raise ProviderResponseError(f"error parsing {self._name} response: {e}") from e

    def _bearer_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def aclose(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def upstream_error_message(data: Any) -> str | None:
    """Extract an error message from the common vendor error shapes.

    Handles ``{"error": "..."}``, ``{"error": {"message": "..."}}`` and
    ``{"message": "..."}`` bodies.
    """
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return None
