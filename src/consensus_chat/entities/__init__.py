"""Domain entities for internal representation.

These are plain dataclasses used internally by services and repositories.
They are NOT used for API contracts - use DTOs from the dto package for that.
"""

from .aggregation_result import AggregationResult, ChatOutcome
from .provider_response import ERROR_PREFIX, ProviderResponse
from .rate_tracker import Admission, RateTracker
from .saved_conversation import SavedConversation
from .turn import ASSISTANT, USER, Turn

__all__ = [
    "ERROR_PREFIX",
    "ASSISTANT",
    "USER",
    "Admission",
    "AggregationResult",
    "ChatOutcome",
    "ProviderResponse",
    "RateTracker",
    "SavedConversation",
    "Turn",
]
