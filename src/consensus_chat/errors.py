"""Exception types raised inside the aggregation core.

Provider failures never escape the fanout: they are converted into failed
ProviderResponse values there. These classes exist so adapters can say *why*
a call failed and so the retry wrapper can tell transient from permanent
failures.
"""


class ConsensusChatError(Exception):
    """Base class for all package errors."""


class ProviderError(ConsensusChatError):
    """A generation provider could not produce an answer."""


class ProviderNotConfigured(ProviderError):
    """The provider has no credential configured."""


class ProviderResponseError(ProviderError):
    """Non-success status, upstream error body, or malformed/empty payload."""


class TransientProviderError(ProviderError):
    """A failure worth retrying (network-level or overloaded upstream)."""


class EmbeddingUnavailable(ConsensusChatError):
    """The embedding provider could not return a usable vector."""


class CollectorError(ConsensusChatError):
    """A provider reported twice, or a report came from an unknown provider."""
