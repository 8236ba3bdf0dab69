"""Value models passed between the resolver, factory and planner."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from swe_llm.llm.providers import Provider
from swe_llm.llm.tasks import LLMTask

DEFAULT_MAX_TOKENS = 10_000
THINKING_BUDGET_TOKENS = 5_000


class ModelLoadConfig(BaseModel):
    """Concrete invocation parameters for one (provider, model) pair.

    Exactly one of ``max_tokens`` / ``max_completion_tokens`` carries the
    token budget; the latter is used only by the gpt-5 family.
    """

    model_config = ConfigDict(frozen=True)

    provider: Provider
    model_name: str
    temperature: float | None = None
    max_tokens: int | None = None
    max_completion_tokens: int | None = None
    thinking_model: bool = False
    thinking_budget_tokens: int | None = None

    @property
    def token_budget(self) -> int | None:
        """Whichever token field is set for this model family."""
        if self.max_completion_tokens is not None:
            return self.max_completion_tokens
        return self.max_tokens

    @property
    def model_key(self) -> str:
        """Opaque handle used for circuit-breaker state and provider identity."""
        return f"{self.provider}:{self.model_name}"


class ApiKeyBundle(BaseModel):
    """Encrypted per-provider API keys supplied by the caller."""

    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    google_api_key: str | None = None
    moonshot_api_key: str | None = None
    deepseek_api_key: str | None = None
    qwen_api_key: str | None = None
    zai_api_key: str | None = None
    openrouter: list[str] = Field(default_factory=list)


class CallerConfig(BaseModel):
    """Configuration supplied by the orchestrating agent for one run.

    Per-task overrides follow the ``{task}_model_name`` /
    ``{task}_temperature`` naming, e.g. ``planner_model_name``.
    """

    model_config = ConfigDict(extra="allow")

    planner_model_name: str | None = None
    planner_temperature: float | None = None
    programmer_model_name: str | None = None
    programmer_temperature: float | None = None
    reviewer_model_name: str | None = None
    reviewer_temperature: float | None = None
    router_model_name: str | None = None
    router_temperature: float | None = None
    summarizer_model_name: str | None = None
    summarizer_temperature: float | None = None

    max_tokens: int | None = Field(default=None, ge=1)
    user_login: str | None = None
    api_keys: ApiKeyBundle | None = None
    qwen_use_international: bool | None = None
    task: LLMTask | None = None

    def model_name_for(self, task: LLMTask) -> str | None:
        return getattr(self, f"{task.value}_model_name")

    def temperature_for(self, task: LLMTask) -> float | None:
        return getattr(self, f"{task.value}_temperature")
