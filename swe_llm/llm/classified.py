"""Chat model wrapper that raises typed provider errors.

SDK clients raise their own exception types (``openai.RateLimitError``,
``anthropic.APIStatusError``, Google API errors). The factory wraps every
SDK-built client in ``ClassifiedChatModel`` so failures reach the caller as
``ProviderRateLimitError`` (HTTP 429) or ``ProviderUnavailableError``
carrying provider, model and status.
"""

import logging
from collections.abc import Sequence
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_core.outputs import ChatResult
from langchain_core.runnables import Runnable
from pydantic import SkipValidation

from swe_llm.exceptions import LLMError
from swe_llm.llm.errors import classify_provider_error
from swe_llm.llm.providers import Provider

logger = logging.getLogger(__name__)


class ClassifiedChatModel(BaseChatModel):
    """BaseChatModel that delegates to an SDK client and types its errors."""

    client: SkipValidation[BaseChatModel]
    provider: Provider
    model_name: str

    @property
    def _llm_type(self) -> str:
        return self.client._llm_type

    @property
    def _identifying_params(self) -> dict[str, Any]:
        return {"provider": str(self.provider), "model_name": self.model_name}

    def _classify(self, error: Exception) -> LLMError:
        classified = classify_provider_error(error, self.provider, self.model_name)
        logger.debug(
            "%s:%s request failed (status=%s): %s",
            self.provider,
            self.model_name,
            classified.status_code,
            error,
        )
        return classified

    def _generate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: Any = None,
        **kwargs: Any,
    ) -> ChatResult:
        try:
            return self.client._generate(messages, stop=stop, run_manager=run_manager, **kwargs)
        except LLMError:
            raise
        except Exception as e:
            raise self._classify(e) from e

    async def _agenerate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: Any = None,
        **kwargs: Any,
    ) -> ChatResult:
        try:
            return await self.client._agenerate(
                messages, stop=stop, run_manager=run_manager, **kwargs
            )
        except LLMError:
            raise
        except Exception as e:
            raise self._classify(e) from e

    def bind_tools(self, tools: Sequence[Any], **kwargs: Any) -> Runnable:
        """Format tools the way the wrapped client does, keeping error typing."""
        bound = self.client.bind_tools(tools, **kwargs)
        return self.bind(**bound.kwargs)


def unwrap_client(client: Any) -> Any:
    """The SDK client behind a ``ClassifiedChatModel``, or ``client`` itself."""
    if isinstance(client, ClassifiedChatModel):
        return client.client
    return client
