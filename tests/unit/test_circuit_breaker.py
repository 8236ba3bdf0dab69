"""Unit tests for the per-model circuit breaker registry."""

import pytest

from swe_llm.llm.circuit_breaker import CircuitBreakerRegistry, CircuitState
from tests.helpers.llm import FakeClock

MODEL_KEY = "anthropic:claude-sonnet-4-0"


@pytest.fixture
def registry(clock: FakeClock) -> CircuitBreakerRegistry:
    return CircuitBreakerRegistry(failure_threshold=2, timeout_ms=180_000, time_func=clock)


class TestCircuitBreakerRegistry:
    """Tests for CircuitBreakerRegistry."""

    def test_unseen_key_is_closed(self, registry):
        assert registry.is_circuit_closed("never-seen")
        assert registry.get_state("never-seen").state is CircuitState.CLOSED

    def test_defaults(self):
        registry = CircuitBreakerRegistry()
        assert registry.failure_threshold == 2
        assert registry.timeout_ms == 180_000

    def test_opens_at_threshold(self, registry):
        registry.record_failure(MODEL_KEY)
        assert registry.is_circuit_closed(MODEL_KEY)

        registry.record_failure(MODEL_KEY)
        assert not registry.is_circuit_closed(MODEL_KEY)

        state = registry.get_state(MODEL_KEY)
        assert state.state is CircuitState.OPEN
        assert state.failure_count == 2
        assert state.opened_at == 1000.0

    def test_success_resets(self, registry):
        registry.record_failure(MODEL_KEY)
        registry.record_failure(MODEL_KEY)
        assert not registry.is_circuit_closed(MODEL_KEY)

        registry.record_success(MODEL_KEY)
        assert registry.is_circuit_closed(MODEL_KEY)
        state = registry.get_state(MODEL_KEY)
        assert state.failure_count == 0
        assert state.opened_at is None

    def test_stays_open_until_timeout(self, registry, clock):
        registry.record_failure(MODEL_KEY)
        registry.record_failure(MODEL_KEY)

        clock.advance_ms(179_999)
        assert not registry.is_circuit_closed(MODEL_KEY)

    def test_recovers_lazily_after_timeout(self, registry, clock):
        """Recovery happens on the first query after the timeout, not before."""
        registry.record_failure(MODEL_KEY)
        registry.record_failure(MODEL_KEY)

        clock.advance_ms(180_000)
        # Not queried yet: still recorded as open
        assert registry.get_state(MODEL_KEY).state is CircuitState.OPEN

        assert registry.is_circuit_closed(MODEL_KEY)
        state = registry.get_state(MODEL_KEY)
        assert state.state is CircuitState.CLOSED
        assert state.failure_count == 0
        assert state.opened_at is None

    def test_reopens_after_recovery(self, registry, clock):
        registry.record_failure(MODEL_KEY)
        registry.record_failure(MODEL_KEY)
        clock.advance_ms(180_000)
        assert registry.is_circuit_closed(MODEL_KEY)

        registry.record_failure(MODEL_KEY)
        assert registry.is_circuit_closed(MODEL_KEY)
        registry.record_failure(MODEL_KEY)
        assert not registry.is_circuit_closed(MODEL_KEY)

    def test_keys_are_independent(self, registry):
        registry.record_failure("openai:gpt-5")
        registry.record_failure("openai:gpt-5")
        assert not registry.is_circuit_closed("openai:gpt-5")
        assert registry.is_circuit_closed("openai:gpt-5-mini")

    def test_custom_threshold(self, clock):
        registry = CircuitBreakerRegistry(failure_threshold=3, time_func=clock)
        registry.record_failure(MODEL_KEY)
        registry.record_failure(MODEL_KEY)
        assert registry.is_circuit_closed(MODEL_KEY)
        registry.record_failure(MODEL_KEY)
        assert not registry.is_circuit_closed(MODEL_KEY)

    def test_last_failure_time_tracked(self, registry, clock):
        registry.record_failure(MODEL_KEY)
        clock.advance_ms(5_000)
        registry.record_failure(MODEL_KEY)
        assert registry.get_state(MODEL_KEY).last_failure_time == 1005.0

    def test_status_is_a_snapshot(self, registry):
        registry.record_failure(MODEL_KEY)
        status = registry.get_status()
        status[MODEL_KEY].failure_count = 99
        assert registry.get_state(MODEL_KEY).failure_count == 1

    def test_clear(self, registry):
        registry.record_failure(MODEL_KEY)
        registry.clear()
        assert registry.get_status() == {}
