"""Circuit breaker registry for LLM models.

Tracks failures per model key (``provider:model``). Two states only:
CLOSED and OPEN. An open circuit recovers lazily the first time it is
queried after the timeout; there is no background timer and no
half-open trial state.

The registry only answers and records. Skipping an open candidate is
up to the caller walking the fallback list.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import StrEnum

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_THRESHOLD = 2
DEFAULT_TIMEOUT_MS = 180_000  # 3 minutes


class CircuitState(StrEnum):
    CLOSED = "CLOSED"  # Normal operation
    OPEN = "OPEN"  # Failing, use fallback


@dataclass
class CircuitBreakerState:
    """Failure state of one model key."""

    state: CircuitState = CircuitState.CLOSED
    failure_count: int = 0
    last_failure_time: float = 0.0
    opened_at: float | None = None


class CircuitBreakerRegistry:
    """In-memory circuit breakers keyed by model key.

    Concurrent failures on the same key may lose an increment; that only
    delays opening by one failure, so no locking is done.
    """

    def __init__(
        self,
        failure_threshold: int = DEFAULT_FAILURE_THRESHOLD,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        time_func: Callable[[], float] | None = None,
    ):
        """Initialize the registry.

        Args:
            failure_threshold: Failures before a circuit opens
            timeout_ms: Milliseconds an open circuit waits before recovering
            time_func: Callable returning current time in seconds (default: time.time).
                       Inject a mock clock for deterministic testing.
        """
        self.failure_threshold = failure_threshold
        self.timeout_ms = timeout_ms
        self._time_func = time_func or time.time
        self._circuits: dict[str, CircuitBreakerState] = {}

    def _get_state(self, model_key: str) -> CircuitBreakerState:
        if model_key not in self._circuits:
            self._circuits[model_key] = CircuitBreakerState()
        return self._circuits[model_key]

    def is_circuit_closed(self, model_key: str) -> bool:
        """Whether ``model_key`` may be attempted, recovering an expired open circuit."""
        state = self._get_state(model_key)

        if state.state is CircuitState.CLOSED:
            return True

        if state.opened_at is not None:
            elapsed_ms = (self._time_func() - state.opened_at) * 1000
            if elapsed_ms >= self.timeout_ms:
                state.state = CircuitState.CLOSED
                state.failure_count = 0
                state.opened_at = None
                logger.info(
                    "%s: Circuit breaker automatically recovered: OPEN -> CLOSED (%.1fs elapsed)",
                    model_key,
                    elapsed_ms / 1000,
                )
                return True

        return False

    def record_success(self, model_key: str) -> None:
        """Reset ``model_key`` to CLOSED."""
        state = self._get_state(model_key)
        state.state = CircuitState.CLOSED
        state.failure_count = 0
        state.opened_at = None
        logger.debug("%s: Circuit breaker reset after successful request", model_key)

    def record_failure(self, model_key: str) -> None:
        """Count a failure, opening the circuit at the threshold."""
        state = self._get_state(model_key)
        now = self._time_func()

        state.last_failure_time = now
        state.failure_count += 1

        if state.failure_count >= self.failure_threshold:
            state.state = CircuitState.OPEN
            state.opened_at = now
            retry_at = datetime.fromtimestamp(now + self.timeout_ms / 1000, tz=timezone.utc)
            logger.warning(
                "%s: Circuit breaker opened after %d failures. Will retry after %s",
                model_key,
                state.failure_count,
                retry_at.isoformat(),
            )

    def get_state(self, model_key: str) -> CircuitBreakerState:
        """Snapshot of one key's state (unseen keys report CLOSED)."""
        return replace(self._circuits.get(model_key) or CircuitBreakerState())

    def get_status(self) -> dict[str, CircuitBreakerState]:
        """Snapshot of every tracked key."""
        return {key: replace(state) for key, state in self._circuits.items()}

    def clear(self) -> None:
        self._circuits.clear()
