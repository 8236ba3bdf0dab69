"""Ordered fallback candidates for a task.

The first candidate is the model the caller already selected, rebuilt
with its true provider. The rest come from walking the provider priority
order and taking each provider's registered default for the task.

The list is never re-sorted or filtered by circuit state; the caller
checks ``CircuitBreakerRegistry.is_circuit_closed`` before each attempt.
"""

import logging
from collections.abc import Sequence
from typing import Any

from swe_llm.llm.classified import unwrap_client
from swe_llm.llm.config import CallerConfig, ModelLoadConfig
from swe_llm.llm.factory import (
    BuiltModel,
    ProviderClientFactory,
    get_client_model_name,
)
from swe_llm.llm.providers import (
    PROVIDER_FALLBACK_ORDER,
    Provider,
    get_default_model_for_provider,
)
from swe_llm.llm.task_config import (
    EXTENDED_THINKING_PREFIX,
    build_load_config,
    is_openai_reasoning_model,
    resolve_base_config,
)
from swe_llm.llm.tasks import LLMTask

logger = logging.getLogger(__name__)

_TOKEN_ATTRS = ("max_tokens", "max_completion_tokens", "max_output_tokens")


def _first_number(obj: Any, attrs: Sequence[str]) -> int | float | None:
    for attr in attrs:
        value = getattr(obj, attr, None)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value
    return None


class FallbackPlanner:
    """Compose the ordered candidate list for a task."""

    def __init__(
        self,
        factory: ProviderClientFactory,
        fallback_order: Sequence[Provider] = PROVIDER_FALLBACK_ORDER,
    ):
        self._factory = factory
        self._fallback_order = tuple(Provider(p) for p in fallback_order)

    @property
    def fallback_order(self) -> tuple[Provider, ...]:
        return self._fallback_order

    def build_candidate_list(
        self,
        task: LLMTask,
        caller_config: CallerConfig,
        selected: BuiltModel | ModelLoadConfig | Any | None = None,
    ) -> list[ModelLoadConfig]:
        """Selected model first, then provider defaults in priority order.

        Args:
            task: Task being executed
            caller_config: Caller's configuration (task overrides, max tokens)
            selected: The model already chosen: a ``BuiltModel`` handle, a bare
                chat model, or a ``ModelLoadConfig``

        Returns:
            Candidate configs, without duplicates of the selected model name
        """
        task = LLMTask(task)
        base_config = resolve_base_config(task, caller_config)
        configs: list[ModelLoadConfig] = []

        selected_config = None
        if selected is not None:
            selected_config = self._selected_model_config(base_config, selected)
            if selected_config is not None:
                configs.append(selected_config)

        for provider in self._fallback_order:
            model_name = get_default_model_for_provider(provider, task)
            if not model_name:
                continue
            if selected_config is not None and model_name == selected_config.model_name:
                continue

            thinking_model = (
                is_openai_reasoning_model(provider, model_name)
                or EXTENDED_THINKING_PREFIX in model_name
            )
            configs.append(
                build_load_config(
                    provider,
                    model_name,
                    token_budget=base_config.token_budget,
                    temperature=None if thinking_model else base_config.temperature,
                    thinking_model=thinking_model,
                )
            )

        logger.debug(
            "Fallback candidates for %s: %s",
            task,
            [config.model_key for config in configs],
        )
        return configs

    def _selected_model_config(
        self, base_config: ModelLoadConfig, selected: Any
    ) -> ModelLoadConfig | None:
        """Rebuild the selected model's config with its true provider."""
        if isinstance(selected, ModelLoadConfig):
            provider: Provider | None = selected.provider
            model_name: str | None = selected.model_name
            token_budget = selected.token_budget
            temperature = selected.temperature
        else:
            client = selected.client if isinstance(selected, BuiltModel) else selected
            provider = self._factory.get_original_provider(selected)
            model_name = get_client_model_name(client)
            sdk_client = unwrap_client(client)
            token_budget = _first_number(sdk_client, _TOKEN_ATTRS)
            temperature = _first_number(sdk_client, ("temperature",))

        if provider is None or not model_name:
            logger.warning("Could not identify the selected model; skipping it as a candidate")
            return None

        return build_load_config(
            provider,
            model_name,
            token_budget=int(token_budget) if token_budget is not None else base_config.token_budget,
            temperature=temperature if temperature is not None else base_config.temperature,
            thinking_model=base_config.thinking_model,
        )
