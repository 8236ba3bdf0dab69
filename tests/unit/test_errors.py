"""Tests for provider error classification."""

from typing import Any

import httpx
import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage
from langchain_core.outputs import ChatGeneration, ChatResult

from swe_llm.exceptions import (
    KeyPoolExhaustedError,
    LLMError,
    ProviderRateLimitError,
    ProviderUnavailableError,
)
from swe_llm.llm.classified import ClassifiedChatModel, unwrap_client
from swe_llm.llm.errors import classify_provider_error, extract_status_code
from swe_llm.llm.providers import Provider


class SDKStatusError(Exception):
    """Shaped like the OpenAI/Anthropic SDK status errors."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


def _http_status_error(status: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.example.com/v1/chat/completions")
    response = httpx.Response(status, request=request)
    return httpx.HTTPStatusError("error", request=request, response=response)


class TestExtractStatusCode:
    """Tests for extract_status_code."""

    def test_status_code_attribute(self):
        assert extract_status_code(SDKStatusError("slow down", 429)) == 429

    def test_httpx_response(self):
        assert extract_status_code(_http_status_error(502)) == 502

    def test_code_attribute(self):
        error = Exception("quota")
        error.code = 429
        assert extract_status_code(error) == 429

    def test_no_status(self):
        assert extract_status_code(RuntimeError("boom")) is None


class TestClassifyProviderError:
    """Tests for classify_provider_error."""

    def test_rate_limit(self):
        cause = SDKStatusError("slow down", 429)
        error = classify_provider_error(cause, "anthropic", "claude-sonnet-4-0")

        assert isinstance(error, ProviderRateLimitError)
        assert error.provider == "anthropic"
        assert error.model == "claude-sonnet-4-0"
        assert error.status_code == 429
        assert error.__cause__ is cause

    @pytest.mark.parametrize("status", [400, 401, 500, 503])
    def test_other_statuses_are_unavailable(self, status):
        error = classify_provider_error(_http_status_error(status), "openai", "gpt-5")

        assert isinstance(error, ProviderUnavailableError)
        assert error.status_code == status

    def test_network_error_is_unavailable(self):
        error = classify_provider_error(httpx.ConnectError("refused"), "qwen", "qwen-plus")

        assert isinstance(error, ProviderUnavailableError)
        assert error.status_code is None
        assert "qwen" in str(error)

    def test_typed_errors_pass_through(self):
        original = KeyPoolExhaustedError("all used", provider="openrouter", status_code=429)
        assert classify_provider_error(original, "openai", "gpt-5") is original

    def test_result_is_llm_error(self):
        assert isinstance(classify_provider_error(ValueError("bad")), LLMError)


class FailingChatModel(BaseChatModel):
    """Chat model that raises ``error`` on every call, or replies "ok"."""

    error: Any = None

    @property
    def _llm_type(self) -> str:
        return "failing"

    def _generate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        if self.error is not None:
            raise self.error
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content="ok"))])


def _classified(error: Exception | None = None) -> ClassifiedChatModel:
    return ClassifiedChatModel(
        client=FailingChatModel(error=error), provider=Provider.MOONSHOT_AI, model_name="kimi-k2"
    )


class TestClassifiedChatModel:
    """Tests for the typed-error wrapper around SDK clients."""

    def test_success_passes_through(self):
        assert _classified().invoke("hi").content == "ok"

    def test_rate_limit_is_typed(self):
        cause = SDKStatusError("slow down", 429)

        with pytest.raises(ProviderRateLimitError) as exc_info:
            _classified(cause).invoke("hi")

        assert exc_info.value.provider == Provider.MOONSHOT_AI
        assert exc_info.value.model == "kimi-k2"
        assert exc_info.value.__cause__ is cause

    def test_server_error_is_unavailable(self):
        with pytest.raises(ProviderUnavailableError) as exc_info:
            _classified(SDKStatusError("down", 503)).invoke("hi")
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_async_rate_limit_is_typed(self):
        with pytest.raises(ProviderRateLimitError):
            await _classified(SDKStatusError("slow down", 429)).ainvoke("hi")

    def test_typed_errors_not_rewrapped(self):
        original = KeyPoolExhaustedError("all used", provider="openrouter", status_code=429)

        with pytest.raises(KeyPoolExhaustedError) as exc_info:
            _classified(original).invoke("hi")

        assert exc_info.value is original

    def test_unwrap_client(self):
        model = _classified()
        assert isinstance(unwrap_client(model), FailingChatModel)
        assert unwrap_client("plain") == "plain"
