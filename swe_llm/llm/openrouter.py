"""OpenRouter chat model with API key pool rotation.

OpenRouter rate limits per key, so a caller may supply several keys.
Each request uses the current key; on HTTP 429 the pool advances to the
next key and the request is retried, up to once per key. Once every key
has been rate limited the client raises ``KeyPoolExhaustedError`` and the
caller moves on to its next fallback candidate.
"""

import logging
from typing import Any

import httpx
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, convert_to_openai_messages
from langchain_core.outputs import ChatGeneration, ChatResult
from pydantic import Field, PrivateAttr

from swe_llm.exceptions import (
    KeyPoolExhaustedError,
    MissingCredentialError,
    ProviderRateLimitError,
    ProviderUnavailableError,
)

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_MODEL_PREFIX = "openrouter/"
DEFAULT_REQUEST_TIMEOUT = 60.0


class OpenRouterKeyManager:
    """Ordered pool of OpenRouter keys with a cursor and an exhausted flag."""

    def __init__(self, keys: list[str]):
        if not keys:
            raise MissingCredentialError("No OpenRouter API keys provided.", provider="openrouter")
        self._keys = list(keys)
        self._current_index = 0
        self._used_all_keys = False

    def get_next_key(self) -> str:
        """Key at the current position (does not advance)."""
        return self._keys[self._current_index]

    def rotate_key(self) -> None:
        """Advance to the next key, or mark the pool exhausted at the last one."""
        if self._current_index < len(self._keys) - 1:
            self._current_index += 1
        else:
            self._used_all_keys = True

    def is_all_keys_used(self) -> bool:
        return self._used_all_keys

    def get_keys(self) -> list[str]:
        return list(self._keys)

    @property
    def current_index(self) -> int:
        return self._current_index


class ChatOpenRouter(BaseChatModel):
    """Chat model calling OpenRouter's chat completions endpoint directly."""

    model_name: str
    temperature: float = 0
    max_tokens: int
    api_keys: list[str] = Field(repr=False)
    base_url: str = OPENROUTER_BASE_URL
    default_headers: dict[str, str] = Field(default_factory=dict)
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    # httpx transport override (tests use httpx.MockTransport)
    transport: Any = Field(default=None, exclude=True, repr=False)
    _key_manager: OpenRouterKeyManager = PrivateAttr()

    def model_post_init(self, __context: Any) -> None:
        """Build the key pool after Pydantic validation."""
        self._key_manager = OpenRouterKeyManager(self.api_keys)

    @property
    def _llm_type(self) -> str:
        return "openrouter"

    @property
    def _identifying_params(self) -> dict[str, Any]:
        return {
            "model_name": self.model_name,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    @property
    def key_manager(self) -> OpenRouterKeyManager:
        return self._key_manager

    def _request_model(self) -> str:
        """Model id as OpenRouter expects it (without our ``openrouter/`` prefix)."""
        if self.model_name.startswith(OPENROUTER_MODEL_PREFIX):
            return self.model_name[len(OPENROUTER_MODEL_PREFIX) :]
        return self.model_name

    def _build_request(
        self, messages: list[BaseMessage], api_key: str, stop: list[str] | None
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        url = f"{self.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
            **self.default_headers,
        }
        payload: dict[str, Any] = {
            "model": self._request_model(),
            "messages": convert_to_openai_messages(messages),
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if stop:
            payload["stop"] = stop
        return url, headers, payload

    def _parse_response(self, response: httpx.Response) -> str:
        if response.status_code == 429:
            raise ProviderRateLimitError(
                "OpenRouter request failed with status 429",
                provider="openrouter",
                model=self.model_name,
                status_code=429,
            )
        if response.is_error:
            raise ProviderUnavailableError(
                f"OpenRouter request failed with status {response.status_code}",
                provider="openrouter",
                model=self.model_name,
                status_code=response.status_code,
            )
        data = response.json()
        content = data["choices"][0]["message"].get("content")
        return content or ""

    def _network_error(self, e: httpx.HTTPError) -> ProviderUnavailableError:
        return ProviderUnavailableError(
            f"OpenRouter request failed: {e}",
            provider="openrouter",
            model=self.model_name,
        )

    def _max_attempts(self) -> int:
        if self._key_manager.is_all_keys_used():
            return 1
        return len(self._key_manager.get_keys())

    def _on_rate_limited(self, error: ProviderRateLimitError) -> None:
        """Rotate after a 429, or raise once the pool is already exhausted."""
        if self._key_manager.is_all_keys_used():
            raise self._exhausted() from error
        logger.warning(
            "OpenRouter key %d/%d rate limited, rotating",
            self._key_manager.current_index + 1,
            len(self._key_manager.get_keys()),
        )
        self._key_manager.rotate_key()

    def _exhausted(self) -> KeyPoolExhaustedError:
        return KeyPoolExhaustedError(
            "All OpenRouter API keys have been used.",
            provider="openrouter",
            model=self.model_name,
            status_code=429,
        )

    @staticmethod
    def _to_chat_result(content: str) -> ChatResult:
        return ChatResult(
            generations=[ChatGeneration(message=AIMessage(content=content), text=content)],
            llm_output={},
        )

    def _post(self, messages: list[BaseMessage], api_key: str, stop: list[str] | None) -> str:
        url, headers, payload = self._build_request(messages, api_key, stop)
        try:
            with httpx.Client(transport=self.transport, timeout=self.request_timeout) as client:
                response = client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise self._network_error(e) from e
        return self._parse_response(response)

    async def _apost(
        self, messages: list[BaseMessage], api_key: str, stop: list[str] | None
    ) -> str:
        url, headers, payload = self._build_request(messages, api_key, stop)
        try:
            async with httpx.AsyncClient(
                transport=self.transport, timeout=self.request_timeout
            ) as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise self._network_error(e) from e
        return self._parse_response(response)

    def _generate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: Any = None,
        **kwargs: Any,
    ) -> ChatResult:
        """Sync generate with key rotation on 429. Use ainvoke() from async context."""
        attempts = 0
        max_attempts = self._max_attempts()
        while attempts < max_attempts:
            api_key = self._key_manager.get_next_key()
            try:
                content = self._post(messages, api_key, stop)
            except ProviderRateLimitError as e:
                self._on_rate_limited(e)
                attempts += 1
                continue
            return self._to_chat_result(content)
        raise self._exhausted()

    async def _agenerate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: Any = None,
        **kwargs: Any,
    ) -> ChatResult:
        """Async generate with key rotation on 429."""
        attempts = 0
        max_attempts = self._max_attempts()
        while attempts < max_attempts:
            api_key = self._key_manager.get_next_key()
            try:
                content = await self._apost(messages, api_key, stop)
            except ProviderRateLimitError as e:
                self._on_rate_limited(e)
                attempts += 1
                continue
            return self._to_chat_result(content)
        raise self._exhausted()
