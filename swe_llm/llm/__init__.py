"""LLM provider selection and resilience.

Re-exports the public API.
"""

from swe_llm.llm.circuit_breaker import (
    CircuitBreakerRegistry,
    CircuitBreakerState,
    CircuitState,
)
from swe_llm.llm.classified import ClassifiedChatModel
from swe_llm.llm.config import (
    DEFAULT_MAX_TOKENS,
    THINKING_BUDGET_TOKENS,
    ApiKeyBundle,
    CallerConfig,
    ModelLoadConfig,
)
from swe_llm.llm.errors import classify_provider_error
from swe_llm.llm.factory import BuiltModel, ProviderClientFactory, ProviderIdentityRegistry
from swe_llm.llm.fallback import FallbackPlanner
from swe_llm.llm.key_vault import ProviderKeyVault
from swe_llm.llm.manager import (
    ModelManager,
    ModelManagerConfig,
    get_model_manager,
    reset_model_manager,
)
from swe_llm.llm.openrouter import ChatOpenRouter, OpenRouterKeyManager
from swe_llm.llm.providers import (
    MODEL_OPTIONS,
    PROVIDER_CAPABILITIES,
    PROVIDER_FALLBACK_ORDER,
    Provider,
    get_provider_base_url,
    infer_provider_from_base_url,
)
from swe_llm.llm.task_config import get_model_name_for_task, resolve_base_config
from swe_llm.llm.tasks import LLMTask

__all__ = [
    "DEFAULT_MAX_TOKENS",
    "MODEL_OPTIONS",
    "PROVIDER_CAPABILITIES",
    "PROVIDER_FALLBACK_ORDER",
    "THINKING_BUDGET_TOKENS",
    "ApiKeyBundle",
    "BuiltModel",
    "CallerConfig",
    "ClassifiedChatModel",
    "ChatOpenRouter",
    "CircuitBreakerRegistry",
    "CircuitBreakerState",
    "CircuitState",
    "FallbackPlanner",
    "LLMTask",
    "ModelLoadConfig",
    "ModelManager",
    "ModelManagerConfig",
    "OpenRouterKeyManager",
    "Provider",
    "ProviderClientFactory",
    "ProviderIdentityRegistry",
    "ProviderKeyVault",
    "classify_provider_error",
    "get_model_manager",
    "get_model_name_for_task",
    "get_provider_base_url",
    "infer_provider_from_base_url",
    "reset_model_manager",
    "resolve_base_config",
]
