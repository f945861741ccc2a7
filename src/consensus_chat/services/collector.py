"""Join barrier over the fanout's completion stream."""

from collections.abc import AsyncIterator, Iterable
from dataclasses import replace

from consensus_chat.entities import ProviderResponse
from consensus_chat.errors import CollectorError


class ResponseCollector:
    """Drain a completion stream until every dispatched provider reported once.

    Responses are stamped with their arrival index. Downstream code may only
    rely on arrival order for the "earliest valid answer" tie-break.
    """

    async def collect(
        self,
        stream: AsyncIterator[ProviderResponse],
        expected: Iterable[str],
    ) -> list[ProviderResponse]:
        """Collect all responses, in arrival order.

        Args:
            stream: Completion stream, one response per provider
            expected: Names of the dispatched providers

        Returns:
            Every response with ``arrival`` set, earliest first

        Raises:
            CollectorError: On a duplicate, unknown or missing provider report
        """
        expected = list(expected)
        pending = set(expected)
        if len(pending) != len(expected):
            raise CollectorError(f"duplicate provider names dispatched: {expected}")

        collected: list[ProviderResponse] = []
        async for response in stream:
            if response.provider not in pending:
                raise CollectorError(f"unexpected or repeated report from {response.provider!r}")
            pending.remove(response.provider)
            collected.append(replace(response, arrival=len(collected)))

        if pending:
            raise CollectorError(f"providers never reported: {sorted(pending)}")
        return collected


def valid_responses(responses: Iterable[ProviderResponse]) -> list[ProviderResponse]:
    """Successful responses, earliest arrival first."""
    return sorted((r for r in responses if r.success), key=lambda r: r.arrival)
