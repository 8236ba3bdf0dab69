"""swe_llm exception hierarchy.

Base exceptions for provider selection and resilience with correlation ID support.

Usage:
    from swe_llm.exceptions import MissingCredentialError, ProviderRateLimitError

    try:
        response = await built.client.ainvoke(messages)
    except ProviderRateLimitError as e:
        logger.warning("Rate limited", extra={"provider": e.provider, "model": e.model})
"""

import uuid


class SweLLMError(Exception):
    """Base exception for all swe_llm errors.

    Carries a correlation_id for tracing errors across layers.
    """

    def __init__(self, message: str, *, correlation_id: str | None = None):
        self.correlation_id = correlation_id or str(uuid.uuid4())
        super().__init__(message)


class ConfigurationError(SweLLMError):
    """Fatal misconfiguration (missing process secret, missing caller identity)."""

    pass


class MissingCredentialError(SweLLMError):
    """No usable API key for the requested provider."""

    def __init__(self, message: str, *, provider: str | None = None, **kwargs):
        self.provider = provider
        super().__init__(message, **kwargs)


class LLMError(SweLLMError):
    """Errors from LLM provider operations."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        model: str | None = None,
        status_code: int | None = None,
        **kwargs,
    ):
        self.provider = provider
        self.model = model
        self.status_code = status_code
        super().__init__(message, **kwargs)


class ProviderRateLimitError(LLMError):
    """Provider answered HTTP 429."""

    pass


class ProviderUnavailableError(LLMError):
    """Any other HTTP or network failure from a provider."""

    pass


class KeyPoolExhaustedError(ProviderRateLimitError):
    """Every key in an OpenRouter key pool has been rate limited."""

    pass
