"""
Retry with linear backoff for provider calls.

Classifies failures as transient (retriable) vs permanent (not retriable)
and applies one retry loop uniformly to every provider adapter.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import httpx

from consensus_chat.errors import TransientProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Network-level failures: connection errors, read/connect timeouts, per-attempt
# asyncio timeouts and gateway statuses the adapters flag as transient.
TRANSIENT_EXCEPTIONS: tuple[type[BaseException], ...] = (
    httpx.TransportError,
    asyncio.TimeoutError,
    TransientProviderError,
)


def is_retriable_error(error: BaseException) -> bool:
    """
    Classify an exception as transient (retry may help) or permanent.

    Permanent failures (missing credentials, non-success status, malformed
    payloads) will not resolve by asking again.
    """
    return isinstance(error, TRANSIENT_EXCEPTIONS)


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and linear backoff.

    Attributes:
        max_attempts: Total calls allowed, first one included
        base_delay: Seconds; the wait after failed attempt ``n`` is ``base_delay * n``
    """

    max_attempts: int = 3
    base_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * attempt


async def retry_with_backoff(
    call: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    label: str = "call",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await ``call()`` until it succeeds, fails permanently, or the budget runs out.

    Args:
        call: Zero-argument coroutine factory; invoked once per attempt
        policy: Attempt budget and backoff
        label: Name used in log lines (usually the provider name)
        sleep: Awaitable sleep, injectable for tests

    Returns:
        The first successful result

    Raises:
        The permanent exception as soon as it occurs, or the last transient
        exception once every attempt has failed.
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await call()
        except TRANSIENT_EXCEPTIONS as e:
            if attempt == policy.max_attempts:
                logger.warning("%s: giving up after %d attempts: %r", label, attempt, e)
                raise

            delay = policy.delay_for(attempt)
            logger.info("%s: attempt %d failed (%r), retrying in %.1fs", label, attempt, e, delay)
            await sleep(delay)

    raise AssertionError("unreachable: the loop either returns or raises")
