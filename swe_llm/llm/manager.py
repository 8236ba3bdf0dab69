"""Model manager: the resilience context handed to callers.

One ``ModelManager`` owns the circuit-breaker map and the provider
identity map, plus the vault, factory and planner built on them. Tests
create their own instance; long-running processes can share the default
one from ``get_model_manager()``.

Typical caller loop (the loop itself lives in the caller)::

    built = manager.load_model(caller_config, LLMTask.PROGRAMMER)
    for candidate in manager.get_model_configs(caller_config, LLMTask.PROGRAMMER, built):
        if not manager.is_circuit_closed(candidate.model_key):
            continue
        model = manager.initialize_model(candidate, caller_config)
        try:
            response = await model.client.ainvoke(messages)
        except Exception as e:
            manager.record_failure(candidate.model_key)
            continue
        manager.record_success(candidate.model_key)
        break
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from swe_llm.llm.circuit_breaker import CircuitBreakerRegistry, CircuitBreakerState
from swe_llm.llm.config import CallerConfig, ModelLoadConfig
from swe_llm.llm.factory import BuiltModel, ProviderClientFactory, ProviderIdentityRegistry
from swe_llm.llm.fallback import FallbackPlanner
from swe_llm.llm.key_vault import ProviderKeyVault
from swe_llm.llm.providers import PROVIDER_FALLBACK_ORDER, Provider
from swe_llm.llm.task_config import get_model_name_for_task, resolve_base_config
from swe_llm.llm.tasks import LLMTask
from swe_llm.settings import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class ModelManagerConfig:
    """Tuning for a ModelManager."""

    circuit_breaker_failure_threshold: int = 2
    circuit_breaker_timeout_ms: int = 180_000
    fallback_order: Sequence[Provider] = field(default_factory=lambda: list(PROVIDER_FALLBACK_ORDER))

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelManagerConfig":
        return cls(
            circuit_breaker_failure_threshold=settings.circuit_breaker_failure_threshold,
            circuit_breaker_timeout_ms=settings.circuit_breaker_timeout_ms,
        )


class ModelManager:
    """Load models for tasks and track their health."""

    def __init__(
        self,
        config: ModelManagerConfig | None = None,
        *,
        settings: Settings | None = None,
        time_func: Callable[[], float] | None = None,
    ):
        self._settings = settings or get_settings()
        self.config = config or ModelManagerConfig.from_settings(self._settings)

        self.circuit_breakers = CircuitBreakerRegistry(
            failure_threshold=self.config.circuit_breaker_failure_threshold,
            timeout_ms=self.config.circuit_breaker_timeout_ms,
            time_func=time_func,
        )
        self.identities = ProviderIdentityRegistry()
        self.key_vault = ProviderKeyVault(self._settings)
        self.factory = ProviderClientFactory(self.identities, self.key_vault, self._settings)
        self.planner = FallbackPlanner(self.factory, self.config.fallback_order)

        logger.info(
            "Model manager initialized (threshold=%d, timeout_ms=%d, fallback_order=%s)",
            self.config.circuit_breaker_failure_threshold,
            self.config.circuit_breaker_timeout_ms,
            ",".join(str(p) for p in self.planner.fallback_order),
        )

    def load_model(self, caller_config: CallerConfig, task: LLMTask) -> BuiltModel:
        """Build the configured model for ``task`` (no fallback while loading)."""
        base_config = resolve_base_config(task, caller_config)
        return self.initialize_model(base_config, caller_config)

    def initialize_model(self, config: ModelLoadConfig, caller_config: CallerConfig) -> BuiltModel:
        return self.factory.build_client(config, caller_config)

    def get_base_config(self, caller_config: CallerConfig, task: LLMTask) -> ModelLoadConfig:
        return resolve_base_config(task, caller_config)

    def get_model_configs(
        self,
        caller_config: CallerConfig,
        task: LLMTask,
        selected: BuiltModel | ModelLoadConfig | Any | None = None,
    ) -> list[ModelLoadConfig]:
        """Ordered fallback candidates for ``task``."""
        return self.planner.build_candidate_list(task, caller_config, selected)

    def get_model_name_for_task(self, caller_config: CallerConfig, task: LLMTask) -> str:
        return get_model_name_for_task(task, caller_config)

    def get_original_provider(self, selected: BuiltModel | Any) -> Provider | None:
        return self.factory.get_original_provider(selected)

    # Circuit breaker
    def is_circuit_closed(self, model_key: str) -> bool:
        return self.circuit_breakers.is_circuit_closed(model_key)

    def record_success(self, model_key: str) -> None:
        self.circuit_breakers.record_success(model_key)

    def record_failure(self, model_key: str) -> None:
        self.circuit_breakers.record_failure(model_key)

    def get_circuit_breaker_status(self) -> dict[str, CircuitBreakerState]:
        return self.circuit_breakers.get_status()

    def shutdown(self) -> None:
        """Drop all in-memory state."""
        self.circuit_breakers.clear()
        self.identities.clear()
        logger.info("Model manager shutdown complete")


_model_manager: ModelManager | None = None


def get_model_manager(config: ModelManagerConfig | None = None) -> ModelManager:
    """Process-wide default manager, created on first use."""
    global _model_manager
    if _model_manager is None:
        _model_manager = ModelManager(config)
    return _model_manager


def reset_model_manager() -> None:
    global _model_manager
    if _model_manager is not None:
        _model_manager.shutdown()
        _model_manager = None
