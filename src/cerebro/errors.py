"""Exception hierarchy for provider, store and credential failures.

Embedding failures are recovered locally (lexical-only scoring), generation
failures become an error answer, durable-store failures are logged and
swallowed. Only ``MissingCredential`` is fatal.
"""

from __future__ import annotations


class CerebroError(Exception):
    """Base class for all Cerebro errors."""


class MissingCredential(CerebroError, EnvironmentError):
    """The API key required by a provider is not set."""

    def __init__(self, message: str, provider: str = "") -> None:
        super().__init__(message)
        self.provider = provider


class EmbeddingUnavailable(CerebroError):
    """The embedding provider failed or timed out for a single text."""


class ProviderError(CerebroError):
    """The generation provider returned an error."""


class ProviderTimeout(ProviderError):
    """The generation provider did not answer within the configured wait."""


class DurableStoreError(CerebroError):
    """The durable mirror could not be read."""


class DurableWriteFailure(DurableStoreError):
    """The durable mirror could not be written."""
