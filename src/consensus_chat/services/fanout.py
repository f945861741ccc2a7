"""Concurrent dispatch of one question to every generation provider.

Each provider runs as its own asyncio task with its own timeout and retry
budget. Tasks never raise: every outcome, good or bad, comes back as a
ProviderResponse, so one slow or broken vendor cannot take the request down.
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable

import httpx

from consensus_chat.entities import ProviderResponse, Turn
from consensus_chat.errors import ProviderError
from consensus_chat.protocols import GenerationProvider

from .retry import RetryPolicy, retry_with_backoff

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ProviderFanout:
    """Fan a question out to N providers and stream results as they finish.

    Example:
        ```python
        fanout = ProviderFanout(providers, timeouts={"OpenAI": 10.0})
        async for response in fanout.dispatch(history, "Capital of France?", "English"):
            print(response.provider, response.success)
        ```
    """

    def __init__(
        self,
        providers: list[GenerationProvider],
        retry_policy: RetryPolicy | None = None,
        timeouts: dict[str, float] | None = None,
        default_timeout: float = DEFAULT_TIMEOUT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the fanout.

        Args:
            providers: Providers to query, in priority order
            retry_policy: Attempt budget and backoff; defaults to 3 attempts, 1s base
            timeouts: Per-provider timeout overrides in seconds
            default_timeout: Timeout for providers without an override
            sleep: Backoff sleep, injectable for tests

        Raises:
            ValueError: If two providers share a name
        """
        names = [p.name for p in providers]
        if len(set(names)) != len(names):
            raise ValueError(f"Provider names must be unique, got {names}")

        self._providers = list(providers)
        self._retry = retry_policy or RetryPolicy()
        self._timeouts = dict(timeouts or {})
        self._default_timeout = default_timeout
        self._sleep = sleep

    @property
    def providers(self) -> list[GenerationProvider]:
        return list(self._providers)

    @property
    def names(self) -> list[str]:
        return [p.name for p in self._providers]

    def get(self, name: str) -> GenerationProvider | None:
        for provider in self._providers:
            if provider.name == name:
                return provider
        return None

    def timeout_for(self, name: str) -> float:
        return self._timeouts.get(name, self._default_timeout)

    async def dispatch(self, history: list[Turn], question: str, language: str) -> AsyncIterator[ProviderResponse]:
        """Start one task per provider and yield responses in completion order.

        Exactly one response is yielded per provider. Leaving the iteration
        early cancels the tasks that are still running.
        """
        snapshot = list(history)
        tasks = [
            asyncio.create_task(self.call(provider, snapshot, question, language), name=f"provider:{provider.name}")
            for provider in self._providers
        ]
        try:
            for next_done in asyncio.as_completed(tasks):
                yield await next_done
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

    async def call(
        self,
        provider: GenerationProvider,
        history: list[Turn],
        question: str,
        language: str,
    ) -> ProviderResponse:
        """Query one provider with timeout and retries; never raises provider errors."""
        start = time.perf_counter()

        if not provider.is_configured:
            logger.warning("%s skipped: no API key configured", provider.name)
            return ProviderResponse.failed(provider.name, f"{provider.name.upper()}_API_KEY is not set")

        timeout = self.timeout_for(provider.name)
        attempts = 0

        async def attempt() -> str:
            nonlocal attempts
            attempts += 1
            return await asyncio.wait_for(provider.generate(history, question, language), timeout=timeout)

        try:
            content = await retry_with_backoff(attempt, self._retry, label=provider.name, sleep=self._sleep)
        except asyncio.TimeoutError:
            error = f"timed out after {timeout:g}s ({attempts} attempts)"
        except httpx.TransportError as e:
            error = f"network error after {attempts} attempts: {str(e) or type(e).__name__}"
        except ProviderError as e:
            error = str(e) if attempts <= 1 else f"{e} ({attempts} attempts)"
        except Exception as e:
            logger.exception("%s adapter raised an unexpected error", provider.name)
            error = f"unexpected error: {e!r}"
        else:
            latency_ms = int((time.perf_counter() - start) * 1000)
            logger.info("%s answered in %dms (%d attempts)", provider.name, latency_ms, attempts)
            return ProviderResponse.ok(provider.name, content, latency_ms=latency_ms, attempts=attempts)

        latency_ms = int((time.perf_counter() - start) * 1000)
        logger.warning("%s failed: %s", provider.name, error)
        return ProviderResponse.failed(provider.name, error, latency_ms=latency_ms, attempts=attempts)
