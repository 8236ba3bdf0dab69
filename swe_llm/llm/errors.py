"""Map provider SDK exceptions onto the swe_llm error taxonomy.

The OpenAI, Anthropic and Google SDKs each raise their own exception
types. Callers walking the fallback list only need to know whether a
failure was a rate limit (429) or anything else, plus which
provider/model produced it.
"""

from typing import Any

import httpx

from swe_llm.exceptions import LLMError, ProviderRateLimitError, ProviderUnavailableError


def extract_status_code(exc: BaseException) -> int | None:
    """Best-effort HTTP status from an SDK or httpx exception."""
    for attr in ("status_code", "status", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value

    response: Any = getattr(exc, "response", None)
    if isinstance(response, httpx.Response):
        return response.status_code
    status = getattr(response, "status_code", None)
    return status if isinstance(status, int) else None


def classify_provider_error(
    exc: BaseException,
    provider: str | None = None,
    model: str | None = None,
) -> LLMError:
    """Wrap ``exc`` in ``ProviderRateLimitError`` or ``ProviderUnavailableError``.

    Errors that are already typed are returned unchanged.
    """
    if isinstance(exc, LLMError):
        return exc

    status_code = extract_status_code(exc)
    error_cls = ProviderRateLimitError if status_code == 429 else ProviderUnavailableError
    error = error_cls(
        f"{provider or 'provider'} request for {model or 'model'} failed: {exc}",
        provider=provider,
        model=model,
        status_code=status_code,
    )
    error.__cause__ = exc
    return error
