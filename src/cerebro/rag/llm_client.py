"""LiteLLM client wrappers for embedding and generation.

All provider traffic in the ingest and answer pipelines routes through this
module. Neither client retries: ``num_retries`` defaults to 0 and retry
policy belongs to the caller. API key presence is validated before the first
call so a missing credential fails fast.
"""

from __future__ import annotations

import asyncio
import logging
import os

import litellm

from cerebro.errors import (
    EmbeddingUnavailable,
    MissingCredential,
    ProviderError,
    ProviderTimeout,
)

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True
litellm.set_verbose = False  # type: ignore[assignment]

logger = logging.getLogger(__name__)

DEFAULT_GENERATION_TIMEOUT = 120.0


# ------------------------------------------------------------------
# Provider → env var mapping for API key validation
# ------------------------------------------------------------------

_PROVIDER_ENV: dict[str, str | None] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "azure": "AZURE_API_KEY",
    "cohere": "COHERE_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "google": "GOOGLE_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "groq": "GROQ_API_KEY",
    "together_ai": "TOGETHERAI_API_KEY",
    "ollama": None,  # Local, no key required
    "ollama_chat": None,
}


def provider_of(model: str) -> str:
    """Return the provider prefix of a 'provider/model' string (default openai)."""
    return model.split("/")[0].lower() if "/" in model else "openai"


def validate_api_key(model: str) -> None:
    """Check that the required API key env var is set for *model*.

    Args:
        model: LiteLLM model string in 'provider/model' format.

    Raises:
        MissingCredential: If the required key is missing from environment.
    """
    provider = provider_of(model)
    env_var = _PROVIDER_ENV.get(provider)

    if env_var is None:
        return  # No key required (e.g. ollama) or provider-managed auth

    if not os.getenv(env_var):
        raise MissingCredential(
            f"API key not found for provider '{provider}'. "
            f"Set the {env_var} environment variable.",
            provider=provider,
        )


class EmbeddingClient:
    """Convert text into a fixed-length vector via ``litellm.aembedding()``.

    Args:
        model: LiteLLM embedding model string (provider/model format).
        num_retries: Retries delegated to LiteLLM; 0 means a single attempt.
    """

    def __init__(self, model: str, num_retries: int = 0) -> None:
        self.model = model
        self.num_retries = num_retries

    def check_credentials(self) -> None:
        validate_api_key(self.model)

    async def embed(self, text: str) -> list[float]:
        """Return the embedding of *text*.

        Raises:
            EmbeddingUnavailable: On any provider error or timeout.
        """
        try:
            response = await litellm.aembedding(
                model=self.model,
                input=[text],
                num_retries=self.num_retries,
            )
            return list(response.data[0]["embedding"])
        except Exception as exc:
            raise EmbeddingUnavailable(
                f"Embedding failed with {self.model}: {exc}"
            ) from exc


class GenerationClient:
    """Map a prompt to answer text via ``litellm.acompletion()``.

    One call per prompt, no streaming, bounded by *timeout* seconds.
    """

    def __init__(
        self,
        model: str,
        timeout: float = DEFAULT_GENERATION_TIMEOUT,
        max_tokens: int = 2048,
        temperature: float = 0.0,
        num_retries: int = 0,
    ) -> None:
        self.model = model
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.num_retries = num_retries

    def check_credentials(self) -> None:
        validate_api_key(self.model)

    async def generate(self, prompt: str) -> str:
        """Return the text content of the first choice for *prompt*.

        Raises:
            ProviderTimeout: If no answer arrives within ``self.timeout``.
            ProviderError: On any other provider failure.
        """
        try:
            response = await asyncio.wait_for(
                litellm.acompletion(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                    num_retries=self.num_retries,
                    timeout=self.timeout,
                ),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, litellm.exceptions.Timeout) as exc:
            raise ProviderTimeout(
                f"{self.model} did not answer within {self.timeout:g}s"
            ) from exc
        except Exception as exc:
            raise ProviderError(f"{self.model} failed: {exc}") from exc
        return response.choices[0].message.content or ""
