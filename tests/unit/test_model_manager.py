"""Unit tests for the ModelManager resilience context.

Clients are real LangChain SDK objects built with platform test keys;
nothing here sends a request. Provider calls are simulated by the
``attempt`` callables passed to ``run_task``.
"""

from collections.abc import Callable

import pytest

from swe_llm.exceptions import ProviderUnavailableError
from swe_llm.llm.circuit_breaker import CircuitState
from swe_llm.llm.config import CallerConfig
from swe_llm.llm.factory import BuiltModel
from swe_llm.llm.manager import (
    ModelManager,
    ModelManagerConfig,
    get_model_manager,
    reset_model_manager,
)
from swe_llm.llm.providers import Provider
from swe_llm.llm.tasks import LLMTask
from tests.helpers.llm import make_test_settings

SONNET = "anthropic:claude-sonnet-4-0"
GPT5 = "openai:gpt-5"


def run_task(
    manager: ModelManager,
    caller: CallerConfig,
    attempt: Callable[[str], None],
    task: LLMTask = LLMTask.PROGRAMMER,
) -> list[str]:
    """Walk the candidate list the way an agent does; return the keys tried."""
    tried: list[str] = []
    built = manager.load_model(caller, task)
    for candidate in manager.get_model_configs(caller, task, built):
        if not manager.is_circuit_closed(candidate.model_key):
            continue
        manager.initialize_model(candidate, caller)
        tried.append(candidate.model_key)
        try:
            attempt(candidate.model_key)
        except ProviderUnavailableError:
            manager.record_failure(candidate.model_key)
            continue
        manager.record_success(candidate.model_key)
        break
    return tried


def failing(*model_keys: str) -> Callable[[str], None]:
    def attempt(model_key: str) -> None:
        if model_key in model_keys:
            raise ProviderUnavailableError("upstream error", model=model_key, status_code=503)

    return attempt


class TestCallerLoop:
    """Circuit breaking across repeated task runs."""

    def test_healthy_model_used_first(self, manager, allowed_caller):
        assert run_task(manager, allowed_caller, failing()) == [SONNET]

    def test_failing_model_skipped_once_open(self, manager, allowed_caller):
        attempt = failing(SONNET)

        assert run_task(manager, allowed_caller, attempt) == [SONNET, GPT5]
        assert run_task(manager, allowed_caller, attempt) == [SONNET, GPT5]
        # Two consecutive failures opened the circuit
        assert run_task(manager, allowed_caller, attempt) == [GPT5]

        status = manager.get_circuit_breaker_status()
        assert status[SONNET].state is CircuitState.OPEN
        assert status[GPT5].state is CircuitState.CLOSED

    def test_open_circuit_retried_after_timeout(self, manager, allowed_caller, clock):
        attempt = failing(SONNET)
        run_task(manager, allowed_caller, attempt)
        run_task(manager, allowed_caller, attempt)

        clock.advance_ms(180_000)
        assert run_task(manager, allowed_caller, failing()) == [SONNET]
        assert manager.get_circuit_breaker_status()[SONNET].failure_count == 0

    def test_success_between_failures_keeps_circuit_closed(self, manager, allowed_caller):
        run_task(manager, allowed_caller, failing(SONNET))
        run_task(manager, allowed_caller, failing())
        run_task(manager, allowed_caller, failing(SONNET))

        assert manager.is_circuit_closed(SONNET)

    def test_byok_caller(self, manager, byok_caller):
        assert run_task(manager, byok_caller, failing(SONNET)) == [SONNET, GPT5]


class TestModelManager:
    """Tests for the manager's delegating API."""

    def test_config_from_settings(self):
        settings = make_test_settings(
            circuit_breaker_failure_threshold=3, circuit_breaker_timeout_ms=60_000
        )
        manager = ModelManager(settings=settings)

        assert manager.circuit_breakers.failure_threshold == 3
        assert manager.circuit_breakers.timeout_ms == 60_000

    def test_explicit_config_wins(self, test_settings):
        config = ModelManagerConfig(circuit_breaker_failure_threshold=5)
        manager = ModelManager(config, settings=test_settings)
        assert manager.circuit_breakers.failure_threshold == 5

    def test_load_model_returns_handle(self, manager, allowed_caller):
        built = manager.load_model(allowed_caller, LLMTask.PROGRAMMER)

        assert isinstance(built, BuiltModel)
        assert built.model_key == SONNET
        assert manager.get_original_provider(built) is Provider.ANTHROPIC

    def test_gateway_identity_recovered_without_record(self, manager):
        caller = CallerConfig(user_login="platform-admin", planner_model_name="qwen:qwen-plus")
        built = manager.load_model(caller, LLMTask.PLANNER)
        manager.identities.clear()

        assert manager.get_original_provider(built) is Provider.QWEN

        configs = manager.get_model_configs(caller, LLMTask.PLANNER, built)
        assert configs[0].model_key == "qwen:qwen-plus"

    def test_get_base_config(self, manager):
        caller = CallerConfig(router_model_name="google-genai:gemini-2.5-flash")
        config = manager.get_base_config(caller, LLMTask.ROUTER)
        assert config.model_key == "google-genai:gemini-2.5-flash"

    def test_get_model_name_for_task(self, manager):
        assert manager.get_model_name_for_task(CallerConfig(), LLMTask.ROUTER) == (
            "claude-3-5-haiku-latest"
        )

    def test_managers_are_isolated(self, test_settings, clock):
        first = ModelManager(settings=test_settings, time_func=clock)
        second = ModelManager(settings=test_settings, time_func=clock)

        first.record_failure(SONNET)
        first.record_failure(SONNET)

        assert not first.is_circuit_closed(SONNET)
        assert second.is_circuit_closed(SONNET)

    def test_shutdown_clears_state(self, manager, allowed_caller):
        manager.load_model(allowed_caller, LLMTask.PROGRAMMER)
        manager.record_failure(SONNET)

        manager.shutdown()

        assert manager.get_circuit_breaker_status() == {}
        assert len(manager.identities) == 0


class TestDefaultManager:
    """Tests for the process-wide default manager."""

    @pytest.mark.usefixtures("mock_settings")
    def test_singleton(self):
        assert get_model_manager() is get_model_manager()

    @pytest.mark.usefixtures("mock_settings")
    def test_reset(self):
        first = get_model_manager()
        first.record_failure(SONNET)

        reset_model_manager()

        assert get_model_manager() is not first
        assert first.get_circuit_breaker_status() == {}
