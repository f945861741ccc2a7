"""Service layer for business logic.

This layer contains the aggregation engine: rate gate, provider fanout,
response collection, embedding scoring and answer selection. Services
depend on protocols (interfaces), not concrete implementations, making
them testable with in-process fakes.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Vendor APIs / session store)

Usage:
    ```python
    from consensus_chat.services import AggregationService

    # Using factory method (recommended)
    service = AggregationService.create()

    # Or manual creation
    service = AggregationService(
        fanout=ProviderFanout(providers),
        scorer=EmbeddingScorer(embedding_provider),
        store=store,
        rate_gate=RateGate(store),
        selector=ReferenceSelector(),
    )
    ```
"""

from .aggregation_service import AggregationService
from .collector import ResponseCollector, valid_responses
from .contributions import compute_contributions, equal_split
from .fanout import ProviderFanout
from .rate_gate import RateGate
from .retry import RetryPolicy, is_retriable_error, retry_with_backoff
from .scoring import EmbeddingScorer, cosine_similarity
from .selection import (
    FALLBACK_ORDER,
    ReferenceSelector,
    Selection,
    SelectionContext,
    Selector,
    SynthesisSelector,
)

__all__ = [
    "AggregationService",
    "ProviderFanout",
    "ResponseCollector",
    "valid_responses",
    "RetryPolicy",
    "retry_with_backoff",
    "is_retriable_error",
    "EmbeddingScorer",
    "cosine_similarity",
    "compute_contributions",
    "equal_split",
    "RateGate",
    "FALLBACK_ORDER",
    "Selection",
    "SelectionContext",
    "Selector",
    "ReferenceSelector",
    "SynthesisSelector",
]
